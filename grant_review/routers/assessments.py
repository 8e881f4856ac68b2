"""
Assessment Router - Grant Review Scoring Engine
grant_review/routers/assessments.py

Endpoints:
  PUT  /api/v1/assignments/{assignment_id}/assessment          - Save draft
  POST /api/v1/assignments/{assignment_id}/assessment/submit   - Validate and submit
  POST /api/v1/assignments/{assignment_id}/assessment/return   - Return for revision
"""

from fastapi import APIRouter, Depends

from grant_review.config import settings
from grant_review.core.dependencies import get_assessment_service
from grant_review.core.exceptions import GrantReviewException
from grant_review.models.assessment import (
    AssessmentDraftRequest,
    AssessmentSubmitRequest,
    AssessorSubmission,
    ErrorResponse,
    ReturnForRevisionRequest,
)
from grant_review.routers.common import raise_for_exception
from grant_review.services.assessment_service import AssessmentService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Assessments"])

WORKFLOW_ERRORS = {
    403: {"model": ErrorResponse, "description": "Assignment belongs to another assessor"},
    404: {"model": ErrorResponse, "description": "Assignment not found"},
    409: {"model": ErrorResponse, "description": "Assessment not in an editable state"},
}


@router.put(
    "/assignments/{assignment_id}/assessment",
    response_model=AssessorSubmission,
    responses=WORKFLOW_ERRORS,
    summary="Save a draft assessment",
)
def save_draft(
    assignment_id: str,
    request: AssessmentDraftRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessorSubmission:
    try:
        return service.save_draft(
            assignment_id,
            request.assessor_id,
            scores=request.scores,
            overall_comment=request.overall_comment,
            coi_confirmed=request.coi_confirmed,
            coi_details=request.coi_details,
        )
    except GrantReviewException as e:
        raise_for_exception(e)


@router.post(
    "/assignments/{assignment_id}/assessment/submit",
    response_model=AssessorSubmission,
    responses={
        **WORKFLOW_ERRORS,
        422: {"model": ErrorResponse, "description": "Scores failed validation"},
    },
    summary="Submit an assessment",
    description="Every validation problem is returned at once in `details.errors`.",
)
def submit_assessment(
    assignment_id: str,
    request: AssessmentSubmitRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessorSubmission:
    try:
        return service.submit(
            assignment_id,
            request.assessor_id,
            scores=request.scores,
            overall_comment=request.overall_comment,
            coi_confirmed=request.coi_confirmed,
            coi_details=request.coi_details,
        )
    except GrantReviewException as e:
        raise_for_exception(e)


@router.post(
    "/assignments/{assignment_id}/assessment/return",
    response_model=AssessorSubmission,
    responses=WORKFLOW_ERRORS,
    summary="Return an assessment for revision",
)
def return_assessment(
    assignment_id: str,
    request: ReturnForRevisionRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessorSubmission:
    try:
        return service.return_for_revision(assignment_id, reason=request.reason)
    except GrantReviewException as e:
        raise_for_exception(e)
