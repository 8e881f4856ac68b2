"""
Score Repository Contract - Grant Review Scoring Engine
grant_review/repositories/score_repository.py

The narrow read/write surface the engine needs from the store. Engine code
depends on this protocol only, so any backend (Snowflake, in-memory) can be
injected.
"""

from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from grant_review.models.assessment import AssessorSubmission
from grant_review.models.assignment import Assignment
from grant_review.models.call import Application, ApplicationSummary, FundingCall
from grant_review.models.enumerations import ApplicationStatus, AssignmentStatus
from grant_review.models.progress import AssessorWorkload


class ScoreRepository(Protocol):
    # Reads -----------------------------------------------------------------
    def get_call(self, call_id: str) -> Optional[FundingCall]: ...

    def get_application(self, application_id: str) -> Optional[Application]: ...

    def list_applications(
        self,
        call_id: str,
        status: Optional[ApplicationStatus] = ApplicationStatus.SUBMITTED,
    ) -> List[ApplicationSummary]: ...

    def get_completed_submissions(self, application_id: str) -> List[AssessorSubmission]: ...

    def list_pool(self, call_id: str) -> List[str]: ...

    def list_assignments(self, call_id: str) -> List[Assignment]: ...

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]: ...

    def list_conflicts(self, call_id: str) -> List[Tuple[str, str]]: ...

    def count_applications(self, call_id: str) -> int: ...

    def count_assignments(self, call_id: str) -> int: ...

    def count_completed(self, call_id: str) -> int: ...

    def list_assessor_workloads(self, call_id: str) -> List[AssessorWorkload]: ...

    def get_submission_for_assignment(self, assignment_id: str) -> Optional[AssessorSubmission]: ...

    # Writes ----------------------------------------------------------------
    def create_assignment(
        self,
        application_id: str,
        assessor_id: str,
        assigned_by: Optional[str] = None,
        due_at: Optional[datetime] = None,
    ) -> Optional[Assignment]:
        """Insert-or-ignore; returns None when the pair already exists."""
        ...

    def delete_assignment(self, assignment_id: str) -> bool: ...

    def update_assignment_status(
        self,
        assignment_id: str,
        status: AssignmentStatus,
    ) -> Optional[Assignment]: ...

    def save_submission(self, submission: AssessorSubmission) -> AssessorSubmission: ...
