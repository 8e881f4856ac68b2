"""
scoring/progress_tracker.py

Summarizes assessment completion for a whole call.

Formula:
    completion_percentage = completed / total_assignments × 100   (0 when no assignments)
    outstanding_count     = assigned_count − completed_count      (per assessor)
    overdue               = due_at < now and status != completed
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Sequence

from grant_review.models.assignment import (
    AssessorAssignmentSummary,
    Assignment,
    AssignmentStatusCounts,
)
from grant_review.models.call import FundingCall
from grant_review.models.enumerations import AssignmentStatus
from grant_review.models.progress import AssessorProgress, AssessorWorkload, CallProgress

logger = logging.getLogger(__name__)


class CallProgressTracker:
    """Build CallProgress from counts read out of the store."""

    def build(
        self,
        call: FundingCall,
        total_applications: int,
        total_assignments: int,
        completed_assessments: int,
        workloads: Sequence[AssessorWorkload],
    ) -> CallProgress:
        if completed_assessments > total_assignments:
            logger.warning(
                "progress_inconsistent",
                extra={
                    "call_id": call.call_id,
                    "completed_assessments": completed_assessments,
                    "total_assignments": total_assignments,
                },
            )

        completion = (
            round(completed_assessments / total_assignments * 100, 2)
            if total_assignments > 0
            else 0.0
        )

        assessor_progress = [
            AssessorProgress(
                **w.model_dump(exclude={"outstanding_count"}),
                outstanding_count=w.assigned_count - w.completed_count,
            )
            for w in workloads
        ]

        return CallProgress(
            call_id=call.call_id,
            call_name=call.name,
            status=call.status,
            total_applications=total_applications,
            total_assignments=total_assignments,
            completed_assessments=completed_assessments,
            outstanding_assessments=total_assignments - completed_assessments,
            completion_percentage=completion,
            assessor_progress=assessor_progress,
        )


def assessors_with_outstanding(progress: CallProgress) -> List[AssessorProgress]:
    """Assessors who still have work, for reminder notifications."""
    return [a for a in progress.assessor_progress if a.outstanding_count > 0]


# ---------------------------------------------------------------------------
# Assignment status
# ---------------------------------------------------------------------------

_STATUS_FIELDS = {
    AssignmentStatus.PENDING: "pending",
    AssignmentStatus.IN_PROGRESS: "in_progress",
    AssignmentStatus.COMPLETED: "completed",
    AssignmentStatus.RETURNED: "returned",
}


def is_overdue(assignment: Assignment, now: datetime) -> bool:
    """Strictly past due_at and not completed. Naive timestamps are read as UTC."""
    if assignment.due_at is None or assignment.status == AssignmentStatus.COMPLETED:
        return False
    due_at = assignment.due_at
    if due_at.tzinfo is None:
        due_at = due_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return due_at < now


def _tally(counts: AssignmentStatusCounts, assignment: Assignment, now: datetime) -> None:
    counts.total_assignments += 1
    field = _STATUS_FIELDS[AssignmentStatus(assignment.status)]
    setattr(counts, field, getattr(counts, field) + 1)
    if is_overdue(assignment, now):
        counts.overdue += 1


def count_assignment_statuses(
    assignments: Sequence[Assignment],
    now: datetime,
) -> AssignmentStatusCounts:
    counts = AssignmentStatusCounts()
    for assignment in assignments:
        _tally(counts, assignment, now)
    return counts


def summarize_by_assessor(
    assignments: Sequence[Assignment],
    now: datetime,
    workloads: Sequence[AssessorWorkload] = (),
) -> List[AssessorAssignmentSummary]:
    """
    Per-assessor status counts, most completed first.

    Only assessors holding at least one assignment appear. Ties keep pool
    order (from ``workloads``), then first appearance.
    """
    known = {w.assessor_id: w for w in workloads}
    pool_order = {w.assessor_id: i for i, w in enumerate(workloads)}

    summaries: Dict[str, AssessorAssignmentSummary] = {}
    for assignment in assignments:
        summary = summaries.get(assignment.assessor_id)
        if summary is None:
            workload = known.get(assignment.assessor_id)
            summary = AssessorAssignmentSummary(
                assessor_id=assignment.assessor_id,
                assessor_name=workload.assessor_name if workload else "",
                assessor_email=workload.assessor_email if workload else None,
            )
            summaries[assignment.assessor_id] = summary
        _tally(summary, assignment, now)

    appearance = {assessor_id: i for i, assessor_id in enumerate(summaries)}
    return sorted(
        summaries.values(),
        key=lambda s: (
            -s.completed,
            pool_order.get(s.assessor_id, len(pool_order)),
            appearance[s.assessor_id],
        ),
    )
