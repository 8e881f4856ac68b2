"""
In-Memory Score Repository - Grant Review Scoring Engine
grant_review/repositories/memory_repository.py

Process-local implementation of ScoreRepository. Each instance owns its own
state; used for tests, demos and the default ``memory`` store backend.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple
from uuid import uuid4

from grant_review.models.assessment import AssessorSubmission
from grant_review.models.assignment import Assignment
from grant_review.models.call import Application, ApplicationSummary, FundingCall
from grant_review.models.enumerations import (
    ApplicationStatus,
    AssessmentStatus,
    AssignmentStatus,
)
from grant_review.models.progress import AssessorWorkload


class InMemoryScoreRepository:
    """Dict-backed store honouring the ScoreRepository contract."""

    def __init__(self) -> None:
        self.calls: Dict[str, FundingCall] = {}
        self.applications: Dict[str, Application] = {}
        self.assignments: Dict[str, Assignment] = {}
        self.submissions: Dict[str, AssessorSubmission] = {}   # keyed by assignment_id
        self.pools: Dict[str, List[str]] = {}
        self.users: Dict[str, Tuple[str, Optional[str]]] = {}   # id -> (name, email)
        self.conflicts: Set[Tuple[str, str]] = set()

    # Seeding ---------------------------------------------------------------
    def add_call(self, call: FundingCall) -> FundingCall:
        self.calls[call.call_id] = call
        self.pools.setdefault(call.call_id, [])
        return call

    def add_application(self, application: Application) -> Application:
        self.applications[application.application_id] = application
        return application

    def add_assessor(
        self,
        call_id: str,
        assessor_id: str,
        name: str = "",
        email: Optional[str] = None,
    ) -> None:
        self.users[assessor_id] = (name, email)
        pool = self.pools.setdefault(call_id, [])
        if assessor_id not in pool:
            pool.append(assessor_id)

    def add_conflict(self, application_id: str, assessor_id: str) -> None:
        self.conflicts.add((application_id, assessor_id))

    # Reads -----------------------------------------------------------------
    def get_call(self, call_id: str) -> Optional[FundingCall]:
        return self.calls.get(call_id)

    def get_application(self, application_id: str) -> Optional[Application]:
        return self.applications.get(application_id)

    def list_applications(
        self,
        call_id: str,
        status: Optional[ApplicationStatus] = ApplicationStatus.SUBMITTED,
    ) -> List[ApplicationSummary]:
        return [
            ApplicationSummary(**a.model_dump(include=set(ApplicationSummary.model_fields)))
            for a in self._call_applications(call_id)
            if status is None or a.status == status
        ]

    def get_completed_submissions(self, application_id: str) -> List[AssessorSubmission]:
        completed = []
        for submission in self.submissions.values():
            if submission.application_id != application_id:
                continue
            if submission.status != AssessmentStatus.SUBMITTED:
                continue
            name, _ = self.users.get(submission.assessor_id, ("", None))
            completed.append(submission.model_copy(update={"assessor_name": name or submission.assessor_name}))
        return completed

    def list_pool(self, call_id: str) -> List[str]:
        return list(self.pools.get(call_id, []))

    def list_assignments(self, call_id: str) -> List[Assignment]:
        app_ids = {a.application_id for a in self._call_applications(call_id)}
        return [a for a in self.assignments.values() if a.application_id in app_ids]

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        return self.assignments.get(assignment_id)

    def list_conflicts(self, call_id: str) -> List[Tuple[str, str]]:
        app_ids = {a.application_id for a in self._call_applications(call_id)}
        return sorted(c for c in self.conflicts if c[0] in app_ids)

    def count_applications(self, call_id: str) -> int:
        return len(self.list_applications(call_id))

    def count_assignments(self, call_id: str) -> int:
        return len(self.list_assignments(call_id))

    def count_completed(self, call_id: str) -> int:
        return sum(
            1
            for a in self.list_assignments(call_id)
            if self._is_submitted(a.assignment_id)
        )

    def list_assessor_workloads(self, call_id: str) -> List[AssessorWorkload]:
        assignments = self.list_assignments(call_id)
        workloads = []
        for assessor_id in self.pools.get(call_id, []):
            mine = [a for a in assignments if a.assessor_id == assessor_id]
            done = [
                self.submissions[a.assignment_id]
                for a in mine
                if self._is_submitted(a.assignment_id)
            ]
            stamps = [s.submitted_at for s in done if s.submitted_at is not None]
            name, email = self.users.get(assessor_id, ("", None))
            workloads.append(
                AssessorWorkload(
                    assessor_id=assessor_id,
                    assessor_name=name,
                    assessor_email=email,
                    assigned_count=len(mine),
                    completed_count=len(done),
                    last_activity=max(stamps) if stamps else None,
                )
            )
        return workloads

    def get_submission_for_assignment(self, assignment_id: str) -> Optional[AssessorSubmission]:
        return self.submissions.get(assignment_id)

    # Writes ----------------------------------------------------------------
    def create_assignment(
        self,
        application_id: str,
        assessor_id: str,
        assigned_by: Optional[str] = None,
        due_at: Optional[datetime] = None,
    ) -> Optional[Assignment]:
        for existing in self.assignments.values():
            if existing.application_id == application_id and existing.assessor_id == assessor_id:
                return None

        assignment = Assignment(
            assignment_id=str(uuid4()),
            application_id=application_id,
            assessor_id=assessor_id,
            assigned_by=assigned_by,
            due_at=due_at,
        )
        self.assignments[assignment.assignment_id] = assignment
        return assignment

    def delete_assignment(self, assignment_id: str) -> bool:
        return self.assignments.pop(assignment_id, None) is not None

    def update_assignment_status(
        self,
        assignment_id: str,
        status: AssignmentStatus,
    ) -> Optional[Assignment]:
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            return None

        now = datetime.now(timezone.utc)
        update = {"status": status}
        if status == AssignmentStatus.IN_PROGRESS and assignment.started_at is None:
            update["started_at"] = now
        if status == AssignmentStatus.COMPLETED:
            update["completed_at"] = now
        if status == AssignmentStatus.RETURNED:
            update["completed_at"] = None

        updated = assignment.model_copy(update=update)
        self.assignments[assignment_id] = updated
        return updated

    def save_submission(self, submission: AssessorSubmission) -> AssessorSubmission:
        self.submissions[submission.assignment_id] = submission
        return submission

    # Helpers ---------------------------------------------------------------
    def _call_applications(self, call_id: str) -> List[Application]:
        return [a for a in self.applications.values() if a.call_id == call_id]

    def _is_submitted(self, assignment_id: str) -> bool:
        submission = self.submissions.get(assignment_id)
        return submission is not None and submission.status == AssessmentStatus.SUBMITTED
