"""
Progress Router - Grant Review Scoring Engine
grant_review/routers/progress.py

Endpoints:
  GET /api/v1/calls/{call_id}/progress               - Completion summary for a call
  GET /api/v1/calls/{call_id}/progress/outstanding   - Assessors with work left
"""

from typing import List

from fastapi import APIRouter, Depends

from grant_review.config import settings
from grant_review.core.dependencies import get_results_service
from grant_review.core.exceptions import GrantReviewException
from grant_review.models.assessment import ErrorResponse
from grant_review.models.progress import AssessorProgress, CallProgress
from grant_review.routers.common import raise_for_exception
from grant_review.services.results_service import ResultsService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Progress"])


@router.get(
    "/calls/{call_id}/progress",
    response_model=CallProgress,
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="Call assessment progress",
)
def get_call_progress(
    call_id: str,
    service: ResultsService = Depends(get_results_service),
) -> CallProgress:
    try:
        return service.get_call_progress(call_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/progress/outstanding",
    response_model=List[AssessorProgress],
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="Assessors with outstanding assessments",
    description="Used to drive reminder notifications.",
)
def get_outstanding_assessors(
    call_id: str,
    service: ResultsService = Depends(get_results_service),
) -> List[AssessorProgress]:
    try:
        return service.get_assessors_with_outstanding(call_id)
    except GrantReviewException as e:
        raise_for_exception(e)
