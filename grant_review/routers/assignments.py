"""
Assignment Router - Grant Review Scoring Engine
grant_review/routers/assignments.py

Endpoints:
  POST   /api/v1/calls/{call_id}/assignments/distribute - Bulk distribution over the pool
  POST   /api/v1/assignments                            - Manual single assignment
  DELETE /api/v1/assignments/{assignment_id}            - Remove an unstarted assignment
  GET    /api/v1/calls/{call_id}/assignments              - All assignments in a call
  GET    /api/v1/calls/{call_id}/assignments/summary      - Status counts with overdue, per call and assessor
  GET    /api/v1/calls/{call_id}/assessors/{assessor_id}/assignments - One assessor's assignments
  GET    /api/v1/applications/{application_id}/assignments - Assessors on one application
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from grant_review.config import settings
from grant_review.core.dependencies import get_assignment_service
from grant_review.core.exceptions import GrantReviewException
from grant_review.models.assessment import ErrorResponse
from grant_review.models.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentSummaryResponse,
    DistributionRequest,
    DistributionResponse,
)
from grant_review.routers.common import raise_for_exception
from grant_review.services.assignment_service import AssignmentService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Assignments"])


@router.post(
    "/calls/{call_id}/assignments/distribute",
    response_model=DistributionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="Distribute applications to assessors",
    description="round_robin, random or balanced. Existing pairs and declared conflicts are respected.",
)
def distribute_assignments(
    call_id: str,
    request: DistributionRequest,
    service: AssignmentService = Depends(get_assignment_service),
) -> DistributionResponse:
    try:
        return service.distribute(
            call_id,
            strategy=request.strategy,
            assessors_per_application=request.assessors_per_application,
            assigned_by=request.assigned_by,
            due_at=request.due_at,
            application_ids=request.application_ids,
        )
    except GrantReviewException as e:
        raise_for_exception(e)


@router.post(
    "/assignments",
    response_model=Assignment,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Application not found"},
        409: {"model": ErrorResponse, "description": "Duplicate pair or conflict of interest"},
    },
    summary="Assign an assessor to an application",
)
def create_assignment(
    request: AssignmentCreate,
    service: AssignmentService = Depends(get_assignment_service),
) -> Assignment:
    try:
        return service.assign(
            request.application_id,
            request.assessor_id,
            assigned_by=request.assigned_by,
            due_at=request.due_at,
        )
    except GrantReviewException as e:
        raise_for_exception(e)


@router.delete(
    "/assignments/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse, "description": "Assignment not found"},
        409: {"model": ErrorResponse, "description": "Assessment already started"},
    },
    summary="Remove an assignment",
)
def delete_assignment(
    assignment_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> Response:
    try:
        service.unassign(assignment_id)
    except GrantReviewException as e:
        raise_for_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/calls/{call_id}/assignments",
    response_model=List[Assignment],
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="List a call's assignments",
)
def list_call_assignments(
    call_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> List[Assignment]:
    try:
        return service.list_for_call(call_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/assignments/summary",
    response_model=AssignmentSummaryResponse,
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="Assignment status summary",
    description="Pending, in-progress, completed, returned and overdue counts for the call and each assessor.",
)
def get_assignment_summary(
    call_id: str,
    as_of: Optional[datetime] = Query(default=None, description="Judge overdue at this instant instead of now"),
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentSummaryResponse:
    try:
        return service.get_status_summary(call_id, now=as_of)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/calls/{call_id}/assessors/{assessor_id}/assignments",
    response_model=List[Assignment],
    responses={404: {"model": ErrorResponse, "description": "Call not found"}},
    summary="List one assessor's assignments",
    description="Soonest due first; assignments without a due date come last.",
)
def list_assessor_assignments(
    call_id: str,
    assessor_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> List[Assignment]:
    try:
        return service.list_for_assessor(call_id, assessor_id)
    except GrantReviewException as e:
        raise_for_exception(e)


@router.get(
    "/applications/{application_id}/assignments",
    response_model=List[Assignment],
    responses={404: {"model": ErrorResponse, "description": "Application not found"}},
    summary="List an application's assignments",
)
def list_application_assignments(
    application_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> List[Assignment]:
    try:
        return service.list_for_application(application_id)
    except GrantReviewException as e:
        raise_for_exception(e)
