"""
Assignment Store: durable judge/team pairings and their evaluation status.

Sole source of truth for assignments. Every write is flushed per pair;
commit/rollback belongs to the calling operation (see MutationGate), so
each multi-step operation is atomic as a whole.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import (
    AssignmentNotFoundError, DuplicateAssignmentError, InvalidTransitionError,
    AssignmentValidationError
)
from judge_assignment.orm.assignment import JudgeTeamAssignment, EvaluationStatus

logger = logging.getLogger(__name__)


class AssignmentStore:
    """Data access for JudgeTeamAssignment rows bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, judge_id: int, team_id: int) -> Optional[JudgeTeamAssignment]:
        result = await self.db.execute(
            select(JudgeTeamAssignment).where(
                JudgeTeamAssignment.judge_id == judge_id,
                JudgeTeamAssignment.team_id == team_id
            )
        )
        return result.scalar_one_or_none()

    async def exists(self, judge_id: int, team_id: int) -> bool:
        return await self.get(judge_id, team_id) is not None

    async def list_by_judge(self, judge_id: int) -> List[JudgeTeamAssignment]:
        """A judge's assignments in creation order."""
        result = await self.db.execute(
            select(JudgeTeamAssignment)
            .where(JudgeTeamAssignment.judge_id == judge_id)
            .order_by(JudgeTeamAssignment.assigned_at.asc(), JudgeTeamAssignment.id.asc())
        )
        return list(result.scalars().all())

    async def list_by_team(self, team_id: int) -> List[JudgeTeamAssignment]:
        """A team's assignments ordered by judge id."""
        result = await self.db.execute(
            select(JudgeTeamAssignment)
            .where(JudgeTeamAssignment.team_id == team_id)
            .order_by(JudgeTeamAssignment.judge_id.asc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[JudgeTeamAssignment]:
        """Every assignment, grouped by judge then creation order."""
        result = await self.db.execute(
            select(JudgeTeamAssignment)
            .order_by(
                JudgeTeamAssignment.judge_id.asc(),
                JudgeTeamAssignment.assigned_at.asc(),
                JudgeTeamAssignment.id.asc()
            )
        )
        return list(result.scalars().all())

    async def count_all(self) -> int:
        result = await self.db.execute(select(func.count(JudgeTeamAssignment.id)))
        return result.scalar() or 0

    async def count_by_judge(self) -> Dict[int, int]:
        result = await self.db.execute(
            select(JudgeTeamAssignment.judge_id, func.count(JudgeTeamAssignment.id))
            .group_by(JudgeTeamAssignment.judge_id)
        )
        return {row[0]: row[1] for row in result.all()}

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(
        self,
        judge_id: int,
        team_id: int,
        assigned_by: str,
        status: EvaluationStatus = EvaluationStatus.NONE,
        assigned_at: Optional[datetime] = None
    ) -> JudgeTeamAssignment:
        """
        Create one assignment.

        Raises:
            DuplicateAssignmentError: pair already exists
            AssignmentValidationError: missing acting admin
        """
        if not assigned_by:
            raise AssignmentValidationError("assigned_by (acting admin) is required", code="MISSING_FIELD")

        if await self.exists(judge_id, team_id):
            raise DuplicateAssignmentError(
                f"Judge {judge_id} is already assigned to team {team_id}",
                details={"judge_id": judge_id, "team_id": team_id}
            )

        assignment = JudgeTeamAssignment(
            judge_id=judge_id,
            team_id=team_id,
            evaluation_status=status,
            assigned_at=assigned_at or datetime.utcnow(),
            assigned_by=assigned_by
        )
        self.db.add(assignment)

        try:
            await self.db.flush()
        except IntegrityError as e:
            if "uq_assignment_judge_team" in str(e) or "unique" in str(e).lower():
                raise DuplicateAssignmentError(
                    f"Judge {judge_id} is already assigned to team {team_id}",
                    details={"judge_id": judge_id, "team_id": team_id}
                ) from e
            raise

        return assignment

    async def delete(self, judge_id: int, team_id: int) -> JudgeTeamAssignment:
        """
        Delete one assignment and return the removed row.

        Raises:
            AssignmentNotFoundError: pair does not exist
        """
        assignment = await self.get(judge_id, team_id)
        if assignment is None:
            raise AssignmentNotFoundError(judge_id, team_id)

        await self.db.delete(assignment)
        await self.db.flush()
        return assignment

    async def set_status(
        self,
        judge_id: int,
        team_id: int,
        status: EvaluationStatus
    ) -> JudgeTeamAssignment:
        """
        Move an assignment's evaluation status forward.

        Raises:
            AssignmentNotFoundError: pair does not exist
            InvalidTransitionError: status is not forward of the current one
        """
        assignment = await self.get(judge_id, team_id)
        if assignment is None:
            raise AssignmentNotFoundError(judge_id, team_id)

        current = assignment.evaluation_status
        if not current.can_transition_to(status):
            raise InvalidTransitionError(judge_id, team_id, current.value, status.value)

        if current is not status:
            assignment.evaluation_status = status
            await self.db.flush()

        return assignment
