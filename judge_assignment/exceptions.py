"""
judge_assignment/exceptions.py
Typed exceptions for the assignment engine

Every exception carries:
- kind: the error family reported to callers
  (validation_error, duplicate_assignment, not_found, conflict,
  invalid_transition, internal_error)
- code: unique machine-readable code
- status_code: HTTP status used by the API layer
"""
from typing import Any, Dict, List, Optional


class ErrorKind:
    """Error families surfaced to callers."""

    VALIDATION_ERROR = "validation_error"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_TRANSITION = "invalid_transition"
    INTERNAL_ERROR = "internal_error"


class AssignmentEngineError(Exception):
    """Base exception for the assignment engine."""
    kind: str = ErrorKind.INTERNAL_ERROR
    code: str = "ASSIGNMENT_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if code:
            self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": False,
            "kind": self.kind,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation
# =============================================================================

class PairFailure:
    """One rejected (judge_id, team_id) pair and why it was rejected."""

    JUDGE_NOT_FOUND = "JUDGE_NOT_FOUND"
    JUDGE_INACTIVE = "JUDGE_INACTIVE"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    DUPLICATE_IN_BATCH = "DUPLICATE_IN_BATCH"

    DUPLICATE_REASONS = frozenset({ALREADY_ASSIGNED, DUPLICATE_IN_BATCH})

    def __init__(self, index: int, judge_id: int, team_id: int, reason: str, message: str):
        self.index = index
        self.judge_id = judge_id
        self.team_id = team_id
        self.reason = reason
        self.message = message

    @property
    def is_duplicate(self) -> bool:
        return self.reason in self.DUPLICATE_REASONS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "judge_id": self.judge_id,
            "team_id": self.team_id,
            "reason": self.reason,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"PairFailure(index={self.index}, judge_id={self.judge_id}, team_id={self.team_id}, reason={self.reason})"


class AssignmentValidationError(AssignmentEngineError):
    """
    Raised when input is malformed or references a nonexistent/inactive entity.

    For bulk assignment, `failures` lists every offending pair.
    """
    kind = ErrorKind.VALIDATION_ERROR
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str,
        failures: Optional[List[PairFailure]] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.failures = list(failures or [])
        super().__init__(message, code=code, details=details)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.failures:
            result["failures"] = [f.to_dict() for f in self.failures]
        return result


class DuplicateAssignmentError(AssignmentValidationError):
    """Raised when a (judge, team) pair already exists or repeats in a batch."""
    kind = ErrorKind.DUPLICATE_ASSIGNMENT
    code = "DUPLICATE_ASSIGNMENT"
    status_code = 409


# =============================================================================
# Lookup
# =============================================================================

class AssignmentNotFoundError(AssignmentEngineError):
    """Raised when the (judge, team) assignment does not exist."""
    kind = ErrorKind.NOT_FOUND
    code = "ASSIGNMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, judge_id: int, team_id: int):
        self.judge_id = judge_id
        self.team_id = team_id
        super().__init__(
            f"No assignment exists for judge {judge_id} and team {team_id}",
            details={"judge_id": judge_id, "team_id": team_id}
        )


class JudgeNotFoundError(AssignmentEngineError):
    """Raised when a judge id is unknown to the judge directory."""
    kind = ErrorKind.NOT_FOUND
    code = "JUDGE_NOT_FOUND"
    status_code = 404

    def __init__(self, judge_id: int):
        self.judge_id = judge_id
        super().__init__(f"Judge {judge_id} not found", details={"judge_id": judge_id})


# =============================================================================
# Conflicts
# =============================================================================

class AssignmentConflictError(AssignmentEngineError):
    """Raised when the requested change collides with existing state."""
    kind = ErrorKind.CONFLICT
    code = "ASSIGNMENT_CONFLICT"
    status_code = 409


class SubmittedAssignmentError(AssignmentConflictError):
    """Raised when an operation would discard a submitted evaluation."""
    code = "EVALUATION_ALREADY_SUBMITTED"

    def __init__(self, judge_id: int, team_id: int):
        super().__init__(
            f"Judge {judge_id} has already submitted an evaluation for team {team_id}; "
            f"the assignment cannot be moved",
            details={"judge_id": judge_id, "team_id": team_id}
        )


class MutationInProgressError(AssignmentConflictError):
    """Raised when another assignment mutation is already running."""
    code = "MUTATION_IN_PROGRESS"

    def __init__(self, requested: str, running: Optional[str] = None):
        self.requested = requested
        self.running = running
        message = f"Cannot run '{requested}': another assignment change is in progress"
        if running:
            message = f"Cannot run '{requested}': '{running}' is in progress"
        super().__init__(message, details={"requested": requested, "running": running})


class InvalidTransitionError(AssignmentEngineError):
    """Raised when an evaluation status change is not forward-monotonic."""
    kind = ErrorKind.INVALID_TRANSITION
    code = "STATE_TRANSITION_INVALID"
    status_code = 409

    def __init__(self, judge_id: int, team_id: int, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move evaluation status from '{current}' to '{requested}' "
            f"(judge {judge_id}, team {team_id})",
            details={
                "judge_id": judge_id,
                "team_id": team_id,
                "current_status": current,
                "requested_status": requested,
            }
        )


# =============================================================================
# Internal
# =============================================================================

class AssignmentStoreError(AssignmentEngineError):
    """Raised when the store itself fails (database error)."""
    kind = ErrorKind.INTERNAL_ERROR
    code = "INTERNAL_ERROR"
    status_code = 500
