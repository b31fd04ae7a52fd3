"""
Judge-Facing Assignment API Routes

- assigned teams (paginated)
- dashboard load summary
- evaluation status lookup
- status-transition ingest from the evaluation-authoring subsystem
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from judge_assignment.config import settings
from judge_assignment.database import get_db
from judge_assignment.errors import ErrorResponse
from judge_assignment.schemas.assignments import (
    EvaluationStatusResponse, EvaluationStatusValue, JudgeAssignmentsResponse,
    JudgeDashboardResponse, StatusTransitionRequest, StatusTransitionResult
)
from judge_assignment.services.assignment_matrix import get_judge_load_stats, list_assigned_teams
from judge_assignment.services.mutation_gate import MutationGate, get_mutation_gate
from judge_assignment.services.status_tracker import (
    apply_status_transition, get_evaluation_status, parse_status
)

router = APIRouter(tags=["Judge Workload"])


@router.get(
    "/judge/{judge_id}/assignments",
    response_model=JudgeAssignmentsResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_assigned_teams(
    judge_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.JUDGE_ASSIGNMENTS_PAGE_SIZE, ge=1, le=settings.JUDGE_ASSIGNMENTS_MAX_PAGE_SIZE),
    status: Optional[EvaluationStatusValue] = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    """Teams assigned to one judge, oldest assignment first."""
    result = await list_assigned_teams(
        judge_id,
        db,
        page=page,
        limit=limit,
        status=parse_status(status) if status else None
    )
    return {
        "message": "Assigned teams retrieved successfully.",
        "judge_id": judge_id,
        **result,
    }


@router.get(
    "/judge/{judge_id}/dashboard",
    response_model=JudgeDashboardResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_judge_dashboard(judge_id: int, db: AsyncSession = Depends(get_db)):
    summary = await get_judge_load_stats(judge_id, db)
    return {"message": "Dashboard summary retrieved.", **summary}


@router.get(
    "/judge/{judge_id}/evaluations/{team_id}/status",
    response_model=EvaluationStatusResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_evaluation_status_endpoint(
    judge_id: int,
    team_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await get_evaluation_status(judge_id, team_id, db)


@router.post(
    "/evaluations/status",
    response_model=StatusTransitionResult,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }
)
async def report_status_transition(
    payload: StatusTransitionRequest,
    db: AsyncSession = Depends(get_db),
    gate: MutationGate = Depends(get_mutation_gate)
):
    """
    Ingest a status-transition event (none -> draft -> submitted).

    Backward moves and double submissions are rejected with 409.
    """
    result = await apply_status_transition(
        payload.judge_id,
        payload.team_id,
        payload.status,
        db=db,
        gate=gate
    )
    return {"message": "Evaluation status updated.", **result}
