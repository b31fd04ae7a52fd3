"""
Judge-Team Assignment ORM Model

One row per judge-evaluates-team pairing:
- (judge_id, team_id) is unique
- evaluation_status only moves forward: none -> draft -> submitted
- id increases with creation and orders a judge's teams
"""
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Dict

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey,
    Index, UniqueConstraint, Enum
)
from sqlalchemy import event

from judge_assignment.orm.base import Base


# =============================================================================
# Enums
# =============================================================================

class EvaluationStatus(PyEnum):
    NONE = "none"
    DRAFT = "draft"
    SUBMITTED = "submitted"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER[self]

    @property
    def is_pending(self) -> bool:
        return self is not EvaluationStatus.SUBMITTED

    def can_transition_to(self, target: "EvaluationStatus") -> bool:
        """
        Forward-only transitions.

        Re-reporting DRAFT on a draft is allowed (repeated draft saves);
        every other same-status or backward move is rejected.
        """
        if self is EvaluationStatus.DRAFT and target is EvaluationStatus.DRAFT:
            return True
        return target.rank > self.rank


_STATUS_ORDER = {
    EvaluationStatus.NONE: 0,
    EvaluationStatus.DRAFT: 1,
    EvaluationStatus.SUBMITTED: 2,
}


# =============================================================================
# Model: JudgeTeamAssignment
# =============================================================================

class JudgeTeamAssignment(Base):
    __tablename__ = "judge_team_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    judge_id = Column(
        Integer,
        ForeignKey("judges.id", ondelete="RESTRICT"),
        nullable=False
    )
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="RESTRICT"),
        nullable=False
    )
    evaluation_status = Column(
        Enum(EvaluationStatus, create_constraint=True),
        nullable=False,
        default=EvaluationStatus.NONE
    )
    assigned_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    assigned_by = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint('judge_id', 'team_id', name='uq_assignment_judge_team'),
        Index('idx_assignment_judge', 'judge_id'),
        Index('idx_assignment_team', 'team_id'),
    )

    @property
    def key(self):
        return (self.judge_id, self.team_id)

    @property
    def is_pending(self) -> bool:
        return self.evaluation_status.is_pending

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "judge_id": self.judge_id,
            "team_id": self.team_id,
            "evaluation_status": self.evaluation_status.value if self.evaluation_status else None,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
            "assigned_by": self.assigned_by,
        }


# =============================================================================
# ORM Event Listeners
# =============================================================================

@event.listens_for(JudgeTeamAssignment, 'before_insert')
def validate_assignment_before_insert(mapper, connection, target):
    """Validate assignment data before insertion."""
    if not target.assigned_by:
        raise ValueError("assigned_by is required")
    if target.evaluation_status is None:
        target.evaluation_status = EvaluationStatus.NONE
