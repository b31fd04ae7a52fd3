from .base import Base

# Directory collaborators (read-only inside the engine)
from .judge import Judge
from .team import Team, TeamVerificationStatus

# Assignment domain
from .assignment import JudgeTeamAssignment, EvaluationStatus

__all__ = [
    "Base",
    "Judge",
    "Team",
    "TeamVerificationStatus",
    "JudgeTeamAssignment",
    "EvaluationStatus",
]
