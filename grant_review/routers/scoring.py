"""
Scoring Router - Grant Review Scoring Engine
grant_review/routers/scoring.py

Stateless helpers for assessor forms:
  POST /api/v1/scoring/validate - Check scores against a criteria set
  POST /api/v1/scoring/total    - Total and weighted score for one assessor
"""

from fastapi import APIRouter

from grant_review.config import settings
from grant_review.models.assessment import AssessorTotal, ScoreCheckRequest, ValidationResult
from grant_review.scoring.assessor_total import calculate_assessor_total
from grant_review.scoring.score_validator import validate_scores

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Scoring"])


@router.post(
    "/scoring/validate",
    response_model=ValidationResult,
    summary="Validate criterion scores",
    description="Always 200; problems are listed in `errors`.",
)
async def validate(request: ScoreCheckRequest) -> ValidationResult:
    return validate_scores(request.scores, request.criteria)


@router.post(
    "/scoring/total",
    response_model=AssessorTotal,
    summary="Calculate an assessor total",
    description="`weighted` is null when no criterion carries a positive weight.",
)
async def total(request: ScoreCheckRequest) -> AssessorTotal:
    return calculate_assessor_total(request.scores, request.criteria)
