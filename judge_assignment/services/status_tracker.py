"""
Evaluation Status Tracker

Applies status transitions reported by the evaluation-authoring
subsystem (none -> draft -> submitted) onto assignment records.
The engine never initiates a transition on its own.
"""
import logging
from typing import Dict, Any, Union

from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.exceptions import AssignmentNotFoundError, AssignmentValidationError
from judge_assignment.orm.assignment import EvaluationStatus
from judge_assignment.services.assignment_store import AssignmentStore
from judge_assignment.services.mutation_gate import MutationGate, mutation_gate as default_gate

logger = logging.getLogger(__name__)


def parse_status(value: Union[str, EvaluationStatus]) -> EvaluationStatus:
    """Coerce a wire value ('none' | 'draft' | 'submitted') to EvaluationStatus."""
    if isinstance(value, EvaluationStatus):
        return value
    try:
        return EvaluationStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in EvaluationStatus)
        raise AssignmentValidationError(
            f"Unknown evaluation status '{value}'. Must be one of: {allowed}",
            code="INVALID_INPUT"
        )


async def apply_status_transition(
    judge_id: int,
    team_id: int,
    new_status: Union[str, EvaluationStatus],
    db: AsyncSession,
    gate: MutationGate = default_gate
) -> Dict[str, Any]:
    """
    Forward a status-transition event to the store.

    Raises:
        AssignmentNotFoundError: judge is not assigned to the team
        InvalidTransitionError: transition is not forward-monotonic
        MutationInProgressError: another mutation is running
    """
    status = parse_status(new_status)

    async with gate.transaction(db, "status-transition"):
        store = AssignmentStore(db)
        assignment = await store.get(judge_id, team_id)
        if assignment is None:
            raise AssignmentNotFoundError(judge_id, team_id)
        previous = assignment.evaluation_status

        assignment = await store.set_status(judge_id, team_id, status)

    logger.info(
        f"[STATUS] judge={judge_id} team={team_id} "
        f"{previous.value} -> {assignment.evaluation_status.value}"
    )

    return {
        "judge_id": judge_id,
        "team_id": team_id,
        "previous_status": previous.value,
        "evaluation_status": assignment.evaluation_status.value,
        "changed": previous is not assignment.evaluation_status,
    }


async def get_evaluation_status(judge_id: int, team_id: int, db: AsyncSession) -> Dict[str, Any]:
    """Current evaluation status of one assignment."""
    assignment = await AssignmentStore(db).get(judge_id, team_id)
    if assignment is None:
        raise AssignmentNotFoundError(judge_id, team_id)

    return {
        "judge_id": judge_id,
        "team_id": team_id,
        "evaluation_status": assignment.evaluation_status.value,
        "is_pending": assignment.is_pending,
    }
