"""
Results Router - Grant Review Scoring Engine
grant_review/routers/results.py

Endpoints:
  GET /api/v1/calls/{call_id}/results                   - Master results for a call
  GET /api/v1/calls/{call_id}/results/ranking           - Leaderboard (basis=total|weighted)
  GET /api/v1/calls/{call_id}/results/variance-flags    - High-variance applications only
  GET /api/v1/calls/{call_id}/results/export            - Row-structured export
  GET /api/v1/applications/{application_id}/results     - One application's result
  GET /api/v1/applications/{application_id}/breakdown   - Per-criterion aggregates
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from grant_review.config import settings
from grant_review.core.dependencies import get_results_service
from grant_review.core.exceptions import GrantReviewException
from grant_review.models.assessment import ErrorResponse
from grant_review.models.enumerations import RankingBasis
from grant_review.models.results import (
    ApplicationResult,
    CriterionAggregate,
    MasterResultsResponse,
    RankingResponse,
    ResultsExport,
    VarianceFlagsResponse,
)
from grant_review.routers.common import raise_for_exception
from grant_review.services.results_service import ResultsService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Results"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Call or application not found"}}


@router.get(
    "/calls/{call_id}/results",
    response_model=MasterResultsResponse,
    responses=NOT_FOUND,
    summary="Master results for a call",
    description="Aggregates every submitted application in the call from its completed assessments.",
)
def get_master_results(
    call_id: str,
    service: ResultsService = Depends(get_results_service),
) -> MasterResultsResponse:
    try:
        return service.get_master_results(call_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/results/ranking",
    response_model=RankingResponse,
    responses=NOT_FOUND,
    summary="Ranked leaderboard",
    description="Competition-ranked applications, highest first. Unassessed applications are left out.",
)
def get_ranking(
    call_id: str,
    basis: RankingBasis = Query(default=RankingBasis.TOTAL, description="total or weighted"),
    service: ResultsService = Depends(get_results_service),
) -> RankingResponse:
    try:
        return service.get_ranking(call_id, basis)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/results/variance-flags",
    response_model=VarianceFlagsResponse,
    responses=NOT_FOUND,
    summary="High-variance applications",
)
def get_variance_flags(
    call_id: str,
    service: ResultsService = Depends(get_results_service),
) -> VarianceFlagsResponse:
    try:
        return service.get_variance_flags(call_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/results/export",
    response_model=ResultsExport,
    responses=NOT_FOUND,
    summary="Export rows",
    description="Summary rows by default; `detailed=true` returns one row per assessor criterion score.",
)
def export_results(
    call_id: str,
    detailed: bool = Query(default=False),
    service: ResultsService = Depends(get_results_service),
) -> ResultsExport:
    try:
        return service.export_rows(call_id, detailed=detailed)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/applications/{application_id}/results",
    response_model=ApplicationResult,
    responses=NOT_FOUND,
    summary="Result for one application",
)
def get_application_result(
    application_id: str,
    service: ResultsService = Depends(get_results_service),
) -> ApplicationResult:
    try:
        return service.calculate_application_result(application_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/applications/{application_id}/breakdown",
    response_model=List[CriterionAggregate],
    responses=NOT_FOUND,
    summary="Per-criterion score breakdown",
)
def get_score_breakdown(
    application_id: str,
    service: ResultsService = Depends(get_results_service),
) -> List[CriterionAggregate]:
    try:
        return service.get_score_breakdown(application_id)
    except GrantReviewException as e:
        raise_for_exception(e)
