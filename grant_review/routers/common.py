"""
Shared Router Helpers - Grant Review Scoring Engine
grant_review/routers/common.py

Request-validation handler and ErrorResponse helpers used by every router.
"""

from datetime import datetime, timezone
from typing import NoReturn, Optional

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from grant_review.core.exceptions import (
    AssignmentInProgressException,
    ConflictOfInterestException,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    GrantReviewException,
    InvalidStateTransitionException,
    PermissionDeniedException,
    ScoreValidationException,
)
from grant_review.models.assessment import ErrorResponse


#  Validation Error Messages

FIELD_MESSAGES = {
    "assessor_id": {
        "missing": "Assessor ID is required",
        "string_too_short": "Assessor ID cannot be empty",
    },
    "application_id": {
        "missing": "Application ID is required",
        "string_too_short": "Application ID cannot be empty",
    },
    "coi_confirmed": {
        "missing": "Conflict of interest confirmation is required",
        "bool_type": "Conflict of interest confirmation must be true or false",
        "bool_parsing": "Conflict of interest confirmation must be true or false",
    },
    "strategy": {
        "enum": "Strategy must be one of: round_robin, random, balanced",
    },
    "basis": {
        "enum": "Ranking basis must be one of: total, weighted",
    },
    "assessors_per_application": {
        "greater_than_equal": "Assessors per application must be at least 1",
        "int_type": "Assessors per application must be an integer",
        "int_parsing": "Assessors per application must be a valid integer",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "greater_than": "Field '{field}' must be greater than the minimum allowed value",
    "string_type": "Field '{field}' must be a string",
    "float_type": "Field '{field}' must be a number",
    "float_parsing": "Field '{field}' must be a valid number",
    "int_type": "Field '{field}' must be an integer",
    "int_parsing": "Field '{field}' must be a valid integer",
    "bool_type": "Field '{field}' must be true or false",
    "bool_parsing": "Field '{field}' must be true or false",
    "datetime": "Field '{field}' must be a valid datetime",
    "enum": "Field '{field}' has an invalid value",
    "value_error": "Field '{field}' is invalid",
    "json_invalid": "Malformed JSON request body",
    "extra_forbidden": "Unknown field '{field}' is not allowed",
}


def get_validation_message(field: str, error_type: str) -> str:
    leaf = field.split(".")[-1]
    if leaf in FIELD_MESSAGES:
        for key in FIELD_MESSAGES[leaf]:
            if key in error_type:
                return FIELD_MESSAGES[leaf][key]
    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)
    return f"Invalid value for field '{field}'"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])
    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error_code": "INVALID_REQUEST",
                "message": "Malformed JSON request body",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
    field = ".".join(str(l) for l in loc if l not in ("body", "query", "path"))
    message = get_validation_message(field, error_type)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "VALIDATION_ERROR",
            "message": message,
            "details": {"field": field, "type": error_type} if field else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


#  Exception Helpers

NOT_FOUND_CODES = {
    "FundingCall": "CALL_NOT_FOUND",
    "Application": "APPLICATION_NOT_FOUND",
    "Assignment": "ASSIGNMENT_NOT_FOUND",
    "Assessment": "ASSESSMENT_NOT_FOUND",
}


def raise_error(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[dict] = None,
) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error_code=error_code,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json"),
    )


def raise_internal_error() -> NoReturn:
    raise_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "Unexpected server error")


def raise_for_exception(exc: GrantReviewException) -> NoReturn:
    """Translate an engine exception into an ErrorResponse HTTP error."""
    if isinstance(exc, EntityNotFoundException):
        raise_error(
            status.HTTP_404_NOT_FOUND,
            NOT_FOUND_CODES.get(exc.entity_type, "NOT_FOUND"),
            str(exc),
        )
    if isinstance(exc, ScoreValidationException):
        raise_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "SCORE_VALIDATION_FAILED",
            "Submitted scores failed validation",
            {"errors": exc.errors},
        )
    if isinstance(exc, PermissionDeniedException):
        raise_error(status.HTTP_403_FORBIDDEN, "FORBIDDEN", exc.message)
    if isinstance(exc, ConflictOfInterestException):
        raise_error(status.HTTP_409_CONFLICT, "CONFLICT_OF_INTEREST", str(exc))
    if isinstance(exc, DuplicateEntityException):
        raise_error(status.HTTP_409_CONFLICT, "DUPLICATE_ASSIGNMENT", exc.message)
    if isinstance(exc, AssignmentInProgressException):
        raise_error(status.HTTP_409_CONFLICT, "ASSIGNMENT_IN_PROGRESS", str(exc))
    if isinstance(exc, InvalidStateTransitionException):
        raise_error(
            status.HTTP_409_CONFLICT,
            "INVALID_STATE_TRANSITION",
            str(exc),
            {"from_status": exc.from_status, "to_status": exc.to_status},
        )
    if isinstance(exc, DatabaseConnectionException):
        raise_error(status.HTTP_503_SERVICE_UNAVAILABLE, "STORE_UNAVAILABLE", exc.message)
    raise_internal_error()
