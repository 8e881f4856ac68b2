"""
Services module for the Grant Review Scoring Engine.
"""

from grant_review.services.assessment_service import AssessmentService
from grant_review.services.assignment_service import AssignmentService
from grant_review.services.cache import get_cache, invalidate_call
from grant_review.services.redis_cache import RedisCache
from grant_review.services.results_service import ResultsService
from grant_review.services.snowflake import get_snowflake_connection

__all__ = [
    "AssessmentService",
    "AssignmentService",
    "ResultsService",
    "RedisCache",
    "get_cache",
    "invalidate_call",
    "get_snowflake_connection",
]
