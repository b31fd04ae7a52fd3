"""
Admin Assignment API Routes

Judge-team assignment matrix and the three assignment mutations:
- bulk assign (all-or-nothing)
- reassign one team
- auto-balance pending work
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.config import settings
from judge_assignment.database import get_db
from judge_assignment.errors import ErrorResponse, FeatureDisabledError
from judge_assignment.routes.dependencies import get_acting_admin_id
from judge_assignment.schemas.assignments import (
    AssignmentMatrixResponse, AutoBalanceSuccess, BulkAssignFailure, BulkAssignRequest,
    BulkAssignSuccess, IntegrityReport, ReassignRequest, ReassignSuccess
)
from judge_assignment.services.assignment_matrix import (
    build_assignment_matrix, summarize_matrix, verify_assignment_integrity
)
from judge_assignment.services.auto_balancer import auto_balance
from judge_assignment.services.bulk_assignment_service import bulk_assign
from judge_assignment.services.mutation_gate import MutationGate, get_mutation_gate
from judge_assignment.services.reassignment_service import reassign_team

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Judge Assignments"])


# =============================================================================
# Read: Assignment Matrix
# =============================================================================

@router.get("/judge-assignments", response_model=AssignmentMatrixResponse)
async def get_judge_assignments(db: AsyncSession = Depends(get_db)):
    """
    Assignment matrix: every judge with load stats and assigned teams.
    """
    matrix = await build_assignment_matrix(db)
    summary = summarize_matrix(matrix)

    return {
        "message": "Judge assignment matrix retrieved successfully.",
        "total_judges": summary["total_judges"],
        "totals": {
            "total_assigned": summary["total_assigned"],
            "total_completed": summary["total_completed"],
            "total_pending": summary["total_pending"],
        },
        "assignment_matrix": matrix,
    }


@router.get("/assignments/integrity", response_model=IntegrityReport)
async def get_assignment_integrity(db: AsyncSession = Depends(get_db)):
    """Verify store invariants (no duplicates, totals match record count)."""
    return await verify_assignment_integrity(db)


# =============================================================================
# Write: Bulk Assign
# =============================================================================

@router.post(
    "/assignments/assign",
    status_code=status.HTTP_201_CREATED,
    response_model=BulkAssignSuccess,
    responses={
        400: {"model": BulkAssignFailure},
        409: {"model": BulkAssignFailure},
    }
)
async def assign_teams_to_judges(
    payload: BulkAssignRequest,
    db: AsyncSession = Depends(get_db),
    gate: MutationGate = Depends(get_mutation_gate),
    acting_admin_id: str = Depends(get_acting_admin_id)
):
    """
    Assign teams to judges in one batch.

    Either every pair is created or none is; a rejected batch lists
    every offending pair with its reason.
    """
    result = await bulk_assign(
        [(pair.judge_id, pair.team_id) for pair in payload.assignments],
        acting_admin_id=acting_admin_id,
        db=db,
        gate=gate
    )

    return {
        "message": f"{result['created_count']} new assignments created successfully.",
        "created_count": result["created_count"],
        "assignments": result["assignments"],
    }


# =============================================================================
# Write: Reassign
# =============================================================================

@router.post(
    "/assignments/reassign",
    response_model=ReassignSuccess,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }
)
async def reassign_team_endpoint(
    payload: ReassignRequest,
    db: AsyncSession = Depends(get_db),
    gate: MutationGate = Depends(get_mutation_gate),
    acting_admin_id: str = Depends(get_acting_admin_id)
):
    """
    Move one team from one judge to another.

    Evaluation progress does not transfer: the new assignment starts at 'none'.
    Submitted evaluations cannot be reassigned.
    """
    result = await reassign_team(
        team_id=payload.team_id,
        old_judge_id=payload.old_judge_id,
        new_judge_id=payload.new_judge_id,
        acting_admin_id=acting_admin_id,
        db=db,
        gate=gate
    )

    return {
        "message": (
            f"Team {payload.team_id} successfully reassigned from Judge "
            f"{payload.old_judge_id} to Judge {payload.new_judge_id}."
        ),
        **result,
    }


# =============================================================================
# Write: Auto-Balance
# =============================================================================

@router.post(
    "/assignments/auto-balance",
    response_model=AutoBalanceSuccess,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }
)
async def auto_balance_assignments(
    db: AsyncSession = Depends(get_db),
    gate: MutationGate = Depends(get_mutation_gate),
    acting_admin_id: str = Depends(get_acting_admin_id)
):
    """
    Redistribute pending assignments so every active judge is within one
    of every other. Submitted evaluations never move.
    """
    if not settings.is_enabled("FEATURE_AUTO_BALANCE"):
        raise FeatureDisabledError("Auto-balance")

    result = await auto_balance(acting_admin_id=acting_admin_id, db=db, gate=gate)

    if result["moves_performed"] == 0:
        message = "Assignments already balanced; no moves performed."
    else:
        message = f"Auto-balance completed: {result['moves_performed']} assignment(s) moved."

    return {"message": message, **result}
