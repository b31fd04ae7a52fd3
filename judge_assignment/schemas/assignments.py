"""
Assignment API Schemas (Pydantic)

Every operation has an explicit request model and a result model tagged
with `kind`. Failures use errors.ErrorResponse, tagged with the error kind.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


EvaluationStatusValue = Literal["none", "draft", "submitted"]


# =============================================================================
# Requests
# =============================================================================

class AssignmentPair(BaseModel):
    """One judge/team pair in a bulk request."""
    judge_id: int = Field(..., gt=0)
    team_id: int = Field(..., gt=0)


class BulkAssignRequest(BaseModel):
    """Request schema for bulk assignment."""
    assignments: List[AssignmentPair] = Field(..., min_length=1)


class ReassignRequest(BaseModel):
    """Request schema for moving one team to another judge."""
    team_id: int = Field(..., gt=0)
    old_judge_id: int = Field(..., gt=0)
    new_judge_id: int = Field(..., gt=0)


class StatusTransitionRequest(BaseModel):
    """Status-transition event from the evaluation-authoring subsystem."""
    judge_id: int = Field(..., gt=0)
    team_id: int = Field(..., gt=0)
    status: EvaluationStatusValue


# =============================================================================
# Shared shapes
# =============================================================================

class LoadStats(BaseModel):
    total_assigned: int
    completed_count: int
    pending_count: int


class AssignmentRecord(BaseModel):
    id: Optional[int] = None
    judge_id: int
    team_id: int
    evaluation_status: EvaluationStatusValue
    assigned_at: Optional[str] = None
    assigned_by: str


class TeamAssignmentEntry(BaseModel):
    team_id: int
    team_name: Optional[str] = None
    evaluation_status: EvaluationStatusValue
    assigned_at: Optional[str] = None


class JudgeMatrixRow(BaseModel):
    judge_id: int
    judge_name: Optional[str] = None
    is_active: bool
    load_stats: LoadStats
    teams_assigned: List[TeamAssignmentEntry]


class MatrixTotals(BaseModel):
    total_assigned: int
    total_completed: int
    total_pending: int


class PairFailureEntry(BaseModel):
    index: int
    judge_id: int
    team_id: int
    reason: str
    message: str


class BalanceMoveEntry(BaseModel):
    team_id: int
    from_judge_id: int
    to_judge_id: int
    evaluation_status: EvaluationStatusValue


class Pagination(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    items_per_page: int


# =============================================================================
# Results
# =============================================================================

class AssignmentMatrixResponse(BaseModel):
    success: bool = True
    message: str
    total_judges: int
    totals: MatrixTotals
    assignment_matrix: List[JudgeMatrixRow]


class BulkAssignSuccess(BaseModel):
    kind: Literal["success"] = "success"
    success: bool = True
    message: str
    created_count: int
    assignments: List[AssignmentRecord]


class BulkAssignFailure(BaseModel):
    """Body returned when a batch is rejected (no partial application)."""
    kind: Literal["validation_error", "duplicate_assignment"]
    success: bool = False
    error: str
    message: str
    code: str
    failures: List[PairFailureEntry]


class ReassignSuccess(BaseModel):
    kind: Literal["success"] = "success"
    success: bool = True
    message: str
    team_id: int
    old_judge_id: int
    new_judge_id: int
    previous_status: EvaluationStatusValue
    assignment: AssignmentRecord


class AutoBalanceSuccess(BaseModel):
    kind: Literal["success"] = "success"
    success: bool = True
    message: str
    moves_performed: int
    moves: List[BalanceMoveEntry]
    pending_before: Dict[str, int]
    pending_after: Dict[str, int]
    target_min: int
    target_max: int
    balanced: bool


class StatusTransitionResult(BaseModel):
    kind: Literal["success"] = "success"
    success: bool = True
    message: str
    judge_id: int
    team_id: int
    previous_status: EvaluationStatusValue
    evaluation_status: EvaluationStatusValue
    changed: bool


class EvaluationStatusResponse(BaseModel):
    success: bool = True
    judge_id: int
    team_id: int
    evaluation_status: EvaluationStatusValue
    is_pending: bool


class JudgeDashboardResponse(BaseModel):
    success: bool = True
    message: str
    judge_id: int
    judge_name: str
    load_stats: LoadStats


class JudgeAssignmentsResponse(BaseModel):
    success: bool = True
    message: str
    judge_id: int
    teams: List[TeamAssignmentEntry]
    pagination: Pagination


class IntegrityReport(BaseModel):
    success: bool = True
    is_valid: bool
    record_count: int
    judges_with_assignments: int
    errors: List[str]
