"""
Assignment Service - Grant Review Scoring Engine
grant_review/services/assignment_service.py

Manual assignment, unassignment and bulk distribution of applications
to a call's assessor pool, plus assignment listings and status summaries.
"""

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from grant_review.config import settings
from grant_review.core.exceptions import (
    AssignmentInProgressException,
    ConflictOfInterestException,
    DuplicateEntityException,
    EntityNotFoundException,
)
from grant_review.models.assignment import (
    Assignment,
    AssignmentSummaryResponse,
    DistributionResponse,
)
from grant_review.models.enumerations import DistributionStrategy
from grant_review.repositories.score_repository import ScoreRepository
from grant_review.scoring.distributor import AssignmentDistributor
from grant_review.scoring.progress_tracker import count_assignment_statuses, summarize_by_assessor
from grant_review.services.cache import invalidate_call

logger = logging.getLogger(__name__)


class AssignmentService:
    """Creates and removes assessor assignments."""

    def __init__(
        self,
        repository: ScoreRepository,
        distributor: Optional[AssignmentDistributor] = None,
    ):
        self.repo = repository
        if distributor is None:
            distributor = AssignmentDistributor(rng=random.Random(settings.DISTRIBUTION_RANDOM_SEED))
        self.distributor = distributor

    def assign(
        self,
        application_id: str,
        assessor_id: str,
        assigned_by: Optional[str] = None,
        due_at: Optional[datetime] = None,
    ) -> Assignment:
        application = self.repo.get_application(application_id)
        if application is None:
            raise EntityNotFoundException("Application", application_id)

        conflicts = self.repo.list_conflicts(application.call_id)
        if (application_id, assessor_id) in conflicts:
            raise ConflictOfInterestException(application_id, assessor_id)

        assignment = self.repo.create_assignment(application_id, assessor_id, assigned_by, due_at)
        if assignment is None:
            raise DuplicateEntityException(
                f"Assessor {assessor_id} is already assigned to application {application_id}"
            )

        invalidate_call(application.call_id)
        logger.info(
            "assessor_assigned",
            extra={
                "assignment_id": assignment.assignment_id,
                "application_id": application_id,
                "assessor_id": assessor_id,
            },
        )
        return assignment

    def unassign(self, assignment_id: str) -> None:
        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None:
            raise EntityNotFoundException("Assignment", assignment_id)

        if self.repo.get_submission_for_assignment(assignment_id) is not None:
            raise AssignmentInProgressException(assignment_id)

        self.repo.delete_assignment(assignment_id)

        application = self.repo.get_application(assignment.application_id)
        if application is not None:
            invalidate_call(application.call_id)
        logger.info("assessor_unassigned", extra={"assignment_id": assignment_id})

    def distribute(
        self,
        call_id: str,
        strategy: Optional[DistributionStrategy] = None,
        assessors_per_application: Optional[int] = None,
        assigned_by: Optional[str] = None,
        due_at: Optional[datetime] = None,
        application_ids: Optional[Sequence[str]] = None,
    ) -> DistributionResponse:
        """
        Distribute a call's submitted applications across its assessor pool.

        Args:
            call_id: Funding call to distribute
            strategy: Defaults to DEFAULT_DISTRIBUTION_STRATEGY
            assessors_per_application: Defaults to the call's requirement
            assigned_by: Coordinator recorded on every new assignment
            due_at: Due date recorded on every new assignment
            application_ids: Restrict to these submitted applications

        Returns:
            DistributionResponse with the assignments actually created
        """
        call = self.repo.get_call(call_id)
        if call is None:
            raise EntityNotFoundException("FundingCall", call_id)

        strategy = DistributionStrategy(strategy or settings.DEFAULT_DISTRIBUTION_STRATEGY)
        target = assessors_per_application or call.required_assessors_per_application

        submitted = [a.application_id for a in self.repo.list_applications(call_id)]
        if application_ids is not None:
            wanted = set(application_ids)
            submitted = [a for a in submitted if a in wanted]

        existing = [(a.application_id, a.assessor_id) for a in self.repo.list_assignments(call_id)]
        plan = self.distributor.distribute(
            submitted,
            self.repo.list_pool(call_id),
            strategy=strategy,
            assessors_per_application=target,
            existing=existing,
            conflicts=self.repo.list_conflicts(call_id),
        )

        created = []
        for pair in plan.pairs:
            assignment = self.repo.create_assignment(
                pair.application_id, pair.assessor_id, assigned_by, due_at
            )
            if assignment is not None:
                created.append(assignment)

        if created:
            invalidate_call(call_id)

        logger.info(
            "assignments_distributed",
            extra={
                "call_id": call_id,
                "strategy": strategy.value,
                "target": target,
                "created_count": len(created),
            },
        )

        return DistributionResponse(
            call_id=call_id,
            strategy=strategy,
            assessors_per_application=target,
            created=created,
            count=len(created),
            skipped_applications=plan.skipped_applications,
        )

    # ------------------------------------------------------------------
    # Listings and status
    # ------------------------------------------------------------------

    def _require_call(self, call_id: str) -> None:
        if self.repo.get_call(call_id) is None:
            raise EntityNotFoundException("FundingCall", call_id)

    def list_for_call(self, call_id: str) -> List[Assignment]:
        self._require_call(call_id)
        return self.repo.list_assignments(call_id)

    def list_for_application(self, application_id: str) -> List[Assignment]:
        application = self.repo.get_application(application_id)
        if application is None:
            raise EntityNotFoundException("Application", application_id)
        return [
            a for a in self.repo.list_assignments(application.call_id)
            if a.application_id == application_id
        ]

    def list_for_assessor(self, call_id: str, assessor_id: str) -> List[Assignment]:
        """An assessor's assignments in the call, soonest due first, undated last."""
        self._require_call(call_id)
        mine = [a for a in self.repo.list_assignments(call_id) if a.assessor_id == assessor_id]
        return sorted(mine, key=lambda a: (a.due_at is None, a.due_at.timestamp() if a.due_at else 0.0))

    def get_status_summary(
        self,
        call_id: str,
        now: Optional[datetime] = None,
    ) -> AssignmentSummaryResponse:
        """
        Count a call's assignments by status, overall and per assessor.

        Args:
            call_id: Funding call to summarize
            now: Instant overdue is judged against; defaults to the current UTC time

        Returns:
            AssignmentSummaryResponse
        """
        self._require_call(call_id)
        now = now or datetime.now(timezone.utc)
        assignments = self.repo.list_assignments(call_id)

        summary = AssignmentSummaryResponse(
            call_id=call_id,
            as_of=now,
            totals=count_assignment_statuses(assignments, now),
            by_assessor=summarize_by_assessor(
                assignments, now, self.repo.list_assessor_workloads(call_id)
            ),
        )
        if summary.totals.overdue:
            logger.info(
                "assignments_overdue",
                extra={"call_id": call_id, "overdue": summary.totals.overdue},
            )
        return summary
