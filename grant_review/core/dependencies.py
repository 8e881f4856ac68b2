"""
Dependencies - Grant Review Scoring Engine
grant_review/core/dependencies.py

FastAPI dependency injection for the store and services.
"""

from functools import lru_cache

from fastapi import Depends

from grant_review.config import settings
from grant_review.repositories.memory_repository import InMemoryScoreRepository
from grant_review.repositories.score_repository import ScoreRepository
from grant_review.repositories.snowflake_score_repository import SnowflakeScoreRepository
from grant_review.services.assessment_service import AssessmentService
from grant_review.services.assignment_service import AssignmentService
from grant_review.services.results_service import ResultsService


@lru_cache()
def get_score_repository() -> ScoreRepository:
    """Get cached store for the configured STORE_BACKEND."""
    if settings.STORE_BACKEND == "snowflake":
        return SnowflakeScoreRepository()
    return InMemoryScoreRepository()


def get_results_service(
    repository: ScoreRepository = Depends(get_score_repository),
) -> ResultsService:
    return ResultsService(repository)


def get_assignment_service(
    repository: ScoreRepository = Depends(get_score_repository),
) -> AssignmentService:
    return AssignmentService(repository)


def get_assessment_service(
    repository: ScoreRepository = Depends(get_score_repository),
) -> AssessmentService:
    return AssessmentService(repository)
