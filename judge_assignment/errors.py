"""
judge_assignment/errors.py
Centralized API error handling

CORE PRINCIPLES:
- All errors follow one structure
- Errors are user-safe (no stack traces)
- Errors are machine-readable

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "kind": "conflict",
    "error": "Conflict",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional),
    "failures": [] (bulk assignment only)
}

HTTP STATUS CODE DISCIPLINE:
- 400: Invalid input / nonexistent or inactive referenced entity
- 403: Feature disabled
- 404: Assignment or judge does not exist
- 409: Duplicate, conflict, invalid transition, mutation in progress
- 422: Request shape error (Pydantic)
- 500: NEVER caused by user input (internal only)
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from judge_assignment.exceptions import AssignmentEngineError, ErrorKind

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"

    FEATURE_DISABLED = "FEATURE_DISABLED"

    NOT_FOUND = "NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    JUDGE_NOT_FOUND = "JUDGE_NOT_FOUND"

    DUPLICATE_ASSIGNMENT = "DUPLICATE_ASSIGNMENT"
    ASSIGNMENT_CONFLICT = "ASSIGNMENT_CONFLICT"
    EVALUATION_ALREADY_SUBMITTED = "EVALUATION_ALREADY_SUBMITTED"
    MUTATION_IN_PROGRESS = "MUTATION_IN_PROGRESS"
    STATE_TRANSITION_INVALID = "STATE_TRANSITION_INVALID"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    kind: str
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None
    failures: Optional[List[Dict[str, Any]]] = None


ERROR_TITLES = {
    ErrorKind.VALIDATION_ERROR: "Validation Error",
    ErrorKind.DUPLICATE_ASSIGNMENT: "Duplicate Assignment",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.CONFLICT: "Conflict",
    ErrorKind.INVALID_TRANSITION: "Invalid Transition",
    ErrorKind.INTERNAL_ERROR: "Internal Error",
}


class APIError(Exception):
    """API-layer exception with the standard structure (non-domain failures)."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        kind: str = ErrorKind.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.kind = kind
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": False,
            "kind": self.kind,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class FeatureDisabledError(APIError):
    """403 Forbidden - Feature switched off by configuration"""
    def __init__(self, feature: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=f"{feature} is disabled",
            code=ErrorCode.FEATURE_DISABLED,
            details={"feature": feature}
        )


class MissingAdminIdentityError(APIError):
    """400 Bad Request - Acting admin identity missing"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message="X-Admin-Id header is required for assignment changes",
            code=ErrorCode.MISSING_FIELD,
            details={"header": "X-Admin-Id"}
        )


def domain_error_content(exc: AssignmentEngineError) -> Dict[str, Any]:
    """Build the response body for a domain exception."""
    content = exc.to_dict()
    content["error"] = ERROR_TITLES.get(exc.kind, "Error")
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the standard error handlers to an application."""

    @app.exception_handler(AssignmentEngineError)
    async def assignment_error_handler(request: Request, exc: AssignmentEngineError):
        if exc.status_code >= 500:
            log_id = str(uuid.uuid4())[:8]
            logger.error(f"[{log_id}] Store failure on {request.url.path}: {exc.message}")
            content = domain_error_content(exc)
            content["message"] = "An internal error occurred. Please try again later."
            content["details"] = {"log_id": log_id}
            return JSONResponse(status_code=exc.status_code, content=content)

        logger.warning(f"Assignment error on {request.url.path}: {exc.code} - {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=domain_error_content(exc))

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"API error on {request.url.path}: {exc.code} - {exc.message}")
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

        error_details = []
        for error in exc.errors():
            error_details.append({
                "loc": list(error.get("loc", [])),
                "msg": error.get("msg"),
                "type": error.get("type")
            })

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "kind": ErrorKind.VALIDATION_ERROR,
                "error": "Validation Error",
                "message": "Request body is malformed",
                "code": ErrorCode.VALIDATION_ERROR,
                "details": {"errors": error_details}
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP exception on {request.url.path}: {exc.detail}")

        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content=exc.detail)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "kind": ErrorKind.NOT_FOUND if exc.status_code == 404 else ErrorKind.VALIDATION_ERROR,
                "error": "HTTP Error",
                "message": str(exc.detail),
                "code": ErrorCode.NOT_FOUND if exc.status_code == 404 else ErrorCode.INVALID_INPUT
            }
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log_id = str(uuid.uuid4())[:8]
        logger.error(f"[{log_id}] Unhandled exception on {request.url.path}: {type(exc).__name__}: {str(exc)}")

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "kind": ErrorKind.INTERNAL_ERROR,
                "error": "Internal Error",
                "message": "An internal error occurred. Please try again later.",
                "code": ErrorCode.INTERNAL_ERROR,
                "details": {"log_id": log_id}
            }
        )


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "service": "judge-assignment-errors",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "kind": "string (error family)",
            "error": "string (error title)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)",
            "failures": "array (bulk assignment only)"
        },
        "kinds": sorted(ERROR_TITLES.keys()),
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
