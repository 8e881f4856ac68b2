"""
Assessment Service - Grant Review Scoring Engine
grant_review/services/assessment_service.py

Assessor-facing workflow: save a draft, submit, and coordinator return for
revision. Submission is the only place scores are validated and totals are
stamped onto the stored record.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple
from uuid import uuid4

from grant_review.core.exceptions import (
    EntityNotFoundException,
    InvalidStateTransitionException,
    PermissionDeniedException,
    ScoreValidationException,
)
from grant_review.models.assessment import AssessorSubmission, CriterionScore
from grant_review.models.assignment import Assignment
from grant_review.models.call import Application, FundingCall
from grant_review.models.enumerations import AssessmentStatus, AssignmentStatus
from grant_review.repositories.score_repository import ScoreRepository
from grant_review.scoring.assessor_total import AssessorTotalCalculator
from grant_review.scoring.score_validator import ScoreValidator
from grant_review.services.cache import invalidate_call

logger = logging.getLogger(__name__)

COI_REQUIRED_MESSAGE = "Conflict of interest confirmation is required before submitting"


class AssessmentService:
    """Draft, submit and return assessments for one assignment."""

    def __init__(
        self,
        repository: ScoreRepository,
        validator: Optional[ScoreValidator] = None,
        total_calculator: Optional[AssessorTotalCalculator] = None,
    ):
        self.repo = repository
        self.validator = validator or ScoreValidator()
        self.total_calculator = total_calculator or AssessorTotalCalculator()

    def _load(self, assignment_id: str) -> Tuple[Assignment, Application, FundingCall]:
        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None:
            raise EntityNotFoundException("Assignment", assignment_id)
        application = self.repo.get_application(assignment.application_id)
        if application is None:
            raise EntityNotFoundException("Application", assignment.application_id)
        call = self.repo.get_call(application.call_id)
        if call is None:
            raise EntityNotFoundException("FundingCall", application.call_id)
        return assignment, application, call

    def _editable_submission(
        self,
        assignment: Assignment,
        assessor_id: str,
        target: AssessmentStatus,
    ) -> Optional[AssessorSubmission]:
        if assignment.assessor_id != assessor_id:
            raise PermissionDeniedException(
                f"Assignment {assignment.assignment_id} belongs to another assessor"
            )
        existing = self.repo.get_submission_for_assignment(assignment.assignment_id)
        if existing is not None and not existing.is_editable:
            raise InvalidStateTransitionException(
                "Assessment", existing.status.value, target.value
            )
        return existing

    def _build(
        self,
        assignment: Assignment,
        existing: Optional[AssessorSubmission],
        scores: Sequence[CriterionScore],
        overall_comment: Optional[str],
        coi_confirmed: bool,
        coi_details: Optional[str],
    ) -> AssessorSubmission:
        now = datetime.now(timezone.utc)
        if existing is None:
            return AssessorSubmission(
                assessment_id=str(uuid4()),
                assignment_id=assignment.assignment_id,
                application_id=assignment.application_id,
                assessor_id=assignment.assessor_id,
                scores=list(scores),
                overall_comment=overall_comment,
                coi_confirmed=coi_confirmed,
                coi_details=coi_details,
                created_at=now,
                updated_at=now,
            )
        return existing.model_copy(
            update={
                "scores": list(scores),
                "overall_comment": overall_comment,
                "coi_confirmed": coi_confirmed,
                "coi_details": coi_details,
                "updated_at": now,
            }
        )

    def save_draft(
        self,
        assignment_id: str,
        assessor_id: str,
        scores: Sequence[CriterionScore] = (),
        overall_comment: Optional[str] = None,
        coi_confirmed: bool = False,
        coi_details: Optional[str] = None,
    ) -> AssessorSubmission:
        """Create or update a draft. Scores are not validated until submit."""
        assignment, application, call = self._load(assignment_id)
        existing = self._editable_submission(assignment, assessor_id, AssessmentStatus.DRAFT)

        draft = self._build(assignment, existing, scores, overall_comment, coi_confirmed, coi_details)
        draft = draft.model_copy(update={"status": AssessmentStatus.DRAFT})
        saved = self.repo.save_submission(draft)

        if assignment.status != AssignmentStatus.IN_PROGRESS:
            self.repo.update_assignment_status(assignment_id, AssignmentStatus.IN_PROGRESS)

        logger.info(
            "assessment_draft_saved",
            extra={"assignment_id": assignment_id, "call_id": call.call_id},
        )
        return saved

    def submit(
        self,
        assignment_id: str,
        assessor_id: str,
        scores: Sequence[CriterionScore],
        overall_comment: Optional[str] = None,
        coi_confirmed: bool = False,
        coi_details: Optional[str] = None,
    ) -> AssessorSubmission:
        """
        Validate and submit an assessment.

        Raises:
            ScoreValidationException: COI not confirmed, or any score rule failed
            InvalidStateTransitionException: assessment already submitted
            PermissionDeniedException: caller is not the assigned assessor
        """
        assignment, application, call = self._load(assignment_id)
        existing = self._editable_submission(assignment, assessor_id, AssessmentStatus.SUBMITTED)

        if not coi_confirmed:
            raise ScoreValidationException([COI_REQUIRED_MESSAGE])

        criteria = call.ordered_criteria()
        result = self.validator.validate(scores, criteria)
        if not result.valid:
            logger.info(
                "assessment_rejected",
                extra={"assignment_id": assignment_id, "errors": len(result.errors)},
            )
            raise ScoreValidationException(result.errors)

        totals = self.total_calculator.calculate(scores, criteria)
        submission = self._build(assignment, existing, scores, overall_comment, coi_confirmed, coi_details)
        submission = submission.model_copy(
            update={
                "status": AssessmentStatus.SUBMITTED,
                "overall_score": totals.total,
                "weighted_score": totals.weighted,
                "submitted_at": datetime.now(timezone.utc),
                "revision_reason": None,
            }
        )
        saved = self.repo.save_submission(submission)
        self.repo.update_assignment_status(assignment_id, AssignmentStatus.COMPLETED)
        invalidate_call(call.call_id)

        logger.info(
            "assessment_submitted",
            extra={
                "assignment_id": assignment_id,
                "application_id": application.application_id,
                "call_id": call.call_id,
                "overall_score": totals.total,
                "weighted_score": totals.weighted,
            },
        )
        return saved

    def return_for_revision(self, assignment_id: str, reason: Optional[str] = None) -> AssessorSubmission:
        """Coordinator reopens a submitted assessment."""
        assignment, application, call = self._load(assignment_id)

        existing = self.repo.get_submission_for_assignment(assignment_id)
        if existing is None:
            raise EntityNotFoundException("Assessment", assignment_id)
        if existing.status != AssessmentStatus.SUBMITTED:
            raise InvalidStateTransitionException(
                "Assessment", existing.status.value, AssessmentStatus.RETURNED.value
            )

        returned = existing.model_copy(
            update={
                "status": AssessmentStatus.RETURNED,
                "revision_reason": reason,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        saved = self.repo.save_submission(returned)
        self.repo.update_assignment_status(assignment_id, AssignmentStatus.RETURNED)
        invalidate_call(call.call_id)

        logger.info(
            "assessment_returned",
            extra={"assignment_id": assignment_id, "call_id": call.call_id},
        )
        return saved
