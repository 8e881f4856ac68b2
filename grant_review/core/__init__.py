"""
Core Package - Grant Review Scoring Engine
grant_review/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.
"""

from grant_review.core.exceptions import (
    AssignmentInProgressException,
    ConflictOfInterestException,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    ForeignKeyViolationException,
    GrantReviewException,
    InvalidStateTransitionException,
    PermissionDeniedException,
    RepositoryException,
    ScoreValidationException,
)

__all__ = [
    "AssignmentInProgressException",
    "ConflictOfInterestException",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ForeignKeyViolationException",
    "GrantReviewException",
    "InvalidStateTransitionException",
    "PermissionDeniedException",
    "RepositoryException",
    "ScoreValidationException",
]
