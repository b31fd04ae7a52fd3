"""
Reassignment: move one team's assignment from one judge to another.

Evaluation content is authored by a specific judge and cannot be handed
to a different evaluator, so the new assignment always starts at 'none'.
Submitted evaluations are never discarded.
"""
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import (
    AssignmentConflictError, AssignmentNotFoundError, AssignmentValidationError,
    SubmittedAssignmentError
)
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.assignment_store import AssignmentStore
from judge_assignment.services.directories import JudgeDirectory
from judge_assignment.services.mutation_gate import MutationGate, mutation_gate as default_gate

logger = logging.getLogger(__name__)


async def reassign_team(
    team_id: int,
    old_judge_id: int,
    new_judge_id: int,
    acting_admin_id: str,
    db: AsyncSession,
    gate: MutationGate = default_gate
) -> Dict[str, Any]:
    """
    Atomically replace (old_judge, team) with (new_judge, team).

    Checks, in order:
    1. (old_judge, team) exists                -> AssignmentNotFoundError
    2. new judge exists and is active          -> AssignmentValidationError
    3. (new_judge, team) does not exist yet    -> AssignmentConflictError
    4. old assignment not submitted            -> SubmittedAssignmentError

    Returns:
        {"team_id", "old_judge_id", "new_judge_id", "previous_status", "assignment"}
    """
    logger.info(
        f"[REASSIGN START] team={team_id} from={old_judge_id} to={new_judge_id} admin={acting_admin_id}"
    )

    async with gate.transaction(db, "reassign"):
        store = AssignmentStore(db)

        existing = await store.get(old_judge_id, team_id)
        if existing is None:
            raise AssignmentNotFoundError(old_judge_id, team_id)

        judges = JudgeDirectory(db)
        if not await judges.exists(new_judge_id):
            raise AssignmentValidationError(
                f"Judge {new_judge_id} does not exist",
                code="JUDGE_NOT_FOUND",
                details={"new_judge_id": new_judge_id}
            )
        if not await judges.is_active(new_judge_id):
            raise AssignmentValidationError(
                f"Judge {new_judge_id} is not active",
                code="JUDGE_INACTIVE",
                details={"new_judge_id": new_judge_id}
            )

        if await store.exists(new_judge_id, team_id):
            raise AssignmentConflictError(
                f"Judge {new_judge_id} is already assigned to team {team_id}",
                details={"judge_id": new_judge_id, "team_id": team_id}
            )

        if existing.evaluation_status is EvaluationStatus.SUBMITTED:
            raise SubmittedAssignmentError(old_judge_id, team_id)

        previous_status = existing.evaluation_status
        await store.delete(old_judge_id, team_id)
        replacement = await store.create(
            new_judge_id,
            team_id,
            assigned_by=acting_admin_id,
            status=EvaluationStatus.NONE
        )

    logger.info(
        f"[REASSIGN SUCCESS] team={team_id} {old_judge_id} -> {new_judge_id} "
        f"(discarded status={previous_status.value})"
    )

    return {
        "team_id": team_id,
        "old_judge_id": old_judge_id,
        "new_judge_id": new_judge_id,
        "previous_status": previous_status.value,
        "assignment": replacement.to_dict(),
    }
