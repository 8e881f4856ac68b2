"""
Custom Exceptions - Grant Review Scoring Engine
grant_review/core/exceptions.py

Exception classes for repository operations and review workflows.
"""

from typing import List


class GrantReviewException(Exception):
    """Base exception for the scoring engine."""

    pass


class RepositoryException(GrantReviewException):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in the store."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class ForeignKeyViolationException(RepositoryException):
    """Foreign key constraint violation."""

    def __init__(self, message: str = "Foreign key constraint violation"):
        self.message = message
        super().__init__(message)


class ScoreValidationException(GrantReviewException):
    """Submitted scores failed validation; carries every collected error."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Score validation failed")


class InvalidStateTransitionException(GrantReviewException):
    """A lifecycle transition is not allowed from the current status."""

    def __init__(self, entity_type: str, from_status: str, to_status: str):
        self.entity_type = entity_type
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"{entity_type} cannot move from '{from_status}' to '{to_status}'")


class ConflictOfInterestException(GrantReviewException):
    """Assessor has declared a conflict of interest with the application."""

    def __init__(self, application_id: str, assessor_id: str):
        self.application_id = application_id
        self.assessor_id = assessor_id
        super().__init__(
            f"Assessor {assessor_id} has declared a conflict of interest with application {application_id}"
        )


class AssignmentInProgressException(GrantReviewException):
    """Assignment already has an assessment and cannot be removed."""

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment {assignment_id} cannot be removed: assessment already started")


class PermissionDeniedException(GrantReviewException):
    """Caller does not own the resource it is trying to change."""

    def __init__(self, message: str = "Permission denied"):
        self.message = message
        super().__init__(message)
