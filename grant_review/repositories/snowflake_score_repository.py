"""
Snowflake Score Repository - Grant Review Scoring Engine
grant_review/repositories/snowflake_score_repository.py

Snowflake-backed implementation of ScoreRepository.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import TypeAdapter

from grant_review.models.assessment import AssessorSubmission, CriterionScore
from grant_review.models.assignment import Assignment
from grant_review.models.call import Application, ApplicationSummary, Criterion, FundingCall
from grant_review.models.enumerations import (
    ApplicationStatus,
    AssessmentStatus,
    AssignmentStatus,
    CallStatus,
)
from grant_review.models.progress import AssessorWorkload
from grant_review.repositories.base import BaseRepository

_criteria_adapter = TypeAdapter(List[Criterion])
_scores_adapter = TypeAdapter(List[CriterionScore])


class SnowflakeScoreRepository(BaseRepository):
    """Repository for calls, applications, assignments and assessments."""

    # ------------------------------------------------------------------
    # Calls and applications
    # ------------------------------------------------------------------

    def get_call(self, call_id: str) -> Optional[FundingCall]:
        sql = """
            SELECT ID, NAME, DESCRIPTION, STATUS, OPEN_AT, CLOSE_AT,
                   CRITERIA_CONFIG, REQUIRED_ASSESSORS, VARIANCE_THRESHOLD, CREATED_BY
            FROM FUNDING_CALLS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (call_id,), fetch_one=True)
        if not row:
            return None

        r = self.row_to_dict(row)
        return FundingCall(
            call_id=r["id"],
            name=r["name"],
            description=r.get("description") or "",
            status=CallStatus(r["status"]),
            open_at=self.normalize_timestamp(r.get("open_at")),
            close_at=self.normalize_timestamp(r.get("close_at")),
            criteria=_criteria_adapter.validate_python(self.parse_variant(r.get("criteria_config"), [])),
            required_assessors_per_application=r.get("required_assessors") or 2,
            variance_threshold=(
                float(r["variance_threshold"]) if r.get("variance_threshold") is not None else None
            ),
            created_by=r.get("created_by"),
        )

    def get_application(self, application_id: str) -> Optional[Application]:
        sql = """
            SELECT ID, CALL_ID, REFERENCE_NUMBER, APPLICANT_NAME,
                   APPLICANT_ORGANISATION, STATUS, SUBMITTED_AT
            FROM APPLICATIONS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (application_id,), fetch_one=True)
        if not row:
            return None

        r = self.row_to_dict(row)
        return Application(
            application_id=r["id"],
            call_id=r["call_id"],
            reference_number=r["reference_number"],
            applicant_name=r["applicant_name"],
            applicant_organisation=r.get("applicant_organisation"),
            status=ApplicationStatus(r["status"]),
            submitted_at=self.normalize_timestamp(r.get("submitted_at")),
        )

    def list_applications(
        self,
        call_id: str,
        status: Optional[ApplicationStatus] = ApplicationStatus.SUBMITTED,
    ) -> List[ApplicationSummary]:
        where_clauses = ["CALL_ID = %s"]
        params: List[Any] = [call_id]

        if status:
            where_clauses.append("STATUS = %s")
            params.append(status.value)

        sql = f"""
            SELECT ID, REFERENCE_NUMBER, APPLICANT_NAME, STATUS
            FROM APPLICATIONS
            WHERE {" AND ".join(where_clauses)}
            ORDER BY REFERENCE_NUMBER
        """
        rows = self.execute_query(sql, tuple(params), fetch_all=True) or []

        return [
            ApplicationSummary(
                application_id=r["id"],
                reference_number=r["reference_number"],
                applicant_name=r["applicant_name"],
                status=ApplicationStatus(r["status"]),
            )
            for r in map(self.row_to_dict, rows)
        ]

    def count_applications(self, call_id: str) -> int:
        sql = """
            SELECT COUNT(*) AS TOTAL
            FROM APPLICATIONS
            WHERE CALL_ID = %s AND STATUS = %s
        """
        return self.count(sql, (call_id, ApplicationStatus.SUBMITTED.value))

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------

    _SUBMISSION_COLUMNS = """
        s.ID, s.ASSIGNMENT_ID, s.APPLICATION_ID, s.ASSESSOR_ID, u.NAME AS ASSESSOR_NAME,
        s.SCORES, s.OVERALL_SCORE, s.WEIGHTED_SCORE, s.OVERALL_COMMENT,
        s.COI_CONFIRMED, s.COI_DETAILS, s.REVISION_REASON, s.STATUS, s.SUBMITTED_AT, s.CREATED_AT, s.UPDATED_AT
    """

    def get_completed_submissions(self, application_id: str) -> List[AssessorSubmission]:
        sql = f"""
            SELECT {self._SUBMISSION_COLUMNS}
            FROM ASSESSMENTS s
            LEFT JOIN USERS u ON u.ID = s.ASSESSOR_ID
            WHERE s.APPLICATION_ID = %s AND s.STATUS = %s
            ORDER BY s.SUBMITTED_AT
        """
        rows = self.execute_query(
            sql, (application_id, AssessmentStatus.SUBMITTED.value), fetch_all=True
        ) or []
        return [self._row_to_submission(r) for r in rows]

    def get_submission_for_assignment(self, assignment_id: str) -> Optional[AssessorSubmission]:
        sql = f"""
            SELECT {self._SUBMISSION_COLUMNS}
            FROM ASSESSMENTS s
            LEFT JOIN USERS u ON u.ID = s.ASSESSOR_ID
            WHERE s.ASSIGNMENT_ID = %s
        """
        row = self.execute_query(sql, (assignment_id,), fetch_one=True)
        if not row:
            return None
        return self._row_to_submission(row)

    def save_submission(self, submission: AssessorSubmission) -> AssessorSubmission:
        """Upsert keyed on ASSIGNMENT_ID; one assessment per assignment."""
        scores_json = json.dumps([s.model_dump() for s in submission.scores])
        now = datetime.now(timezone.utc)

        sql = """
        MERGE INTO ASSESSMENTS t
        USING (SELECT %s AS assignment_id, PARSE_JSON(%s) AS scores) s
        ON t.assignment_id = s.assignment_id
        WHEN MATCHED THEN UPDATE SET
            scores = s.scores,
            overall_score = %s,
            weighted_score = %s,
            overall_comment = %s,
            coi_confirmed = %s,
            coi_details = %s,
            revision_reason = %s,
            status = %s,
            submitted_at = %s,
            updated_at = %s
        WHEN NOT MATCHED THEN INSERT (
            id, assignment_id, application_id, assessor_id, scores,
            overall_score, weighted_score, overall_comment,
            coi_confirmed, coi_details, revision_reason, status, submitted_at,
            created_at, updated_at
        ) VALUES (
            %s, s.assignment_id, %s, %s, s.scores,
            %s, %s, %s,
            %s, %s, %s, %s, %s,
            %s, %s
        )
        """
        update_params = (
            submission.overall_score,
            submission.weighted_score,
            submission.overall_comment,
            submission.coi_confirmed,
            submission.coi_details,
            submission.revision_reason,
            submission.status.value,
            submission.submitted_at,
            now,
        )
        insert_params = (
            submission.assessment_id,
            submission.application_id,
            submission.assessor_id,
            submission.overall_score,
            submission.weighted_score,
            submission.overall_comment,
            submission.coi_confirmed,
            submission.coi_details,
            submission.revision_reason,
            submission.status.value,
            submission.submitted_at,
            submission.created_at,
            now,
        )
        self.execute_query(
            sql,
            (submission.assignment_id, scores_json) + update_params + insert_params,
            commit=True,
        )
        return submission.model_copy(update={"updated_at": now})

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    _ASSIGNMENT_COLUMNS = """
        a.ID, a.APPLICATION_ID, a.ASSESSOR_ID, a.ASSIGNED_BY, a.ASSIGNED_AT,
        a.DUE_AT, a.STATUS, a.STARTED_AT, a.COMPLETED_AT
    """

    def list_assignments(self, call_id: str) -> List[Assignment]:
        sql = f"""
            SELECT {self._ASSIGNMENT_COLUMNS}
            FROM ASSIGNMENTS a
            JOIN APPLICATIONS app ON app.ID = a.APPLICATION_ID
            WHERE app.CALL_ID = %s
            ORDER BY a.ASSIGNED_AT
        """
        rows = self.execute_query(sql, (call_id,), fetch_all=True) or []
        return [self._row_to_assignment(r) for r in rows]

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        sql = f"""
            SELECT {self._ASSIGNMENT_COLUMNS}
            FROM ASSIGNMENTS a
            WHERE a.ID = %s
        """
        row = self.execute_query(sql, (assignment_id,), fetch_one=True)
        if not row:
            return None
        return self._row_to_assignment(row)

    def create_assignment(
        self,
        application_id: str,
        assessor_id: str,
        assigned_by: Optional[str] = None,
        due_at: Optional[datetime] = None,
    ) -> Optional[Assignment]:
        """Insert-or-ignore on (APPLICATION_ID, ASSESSOR_ID)."""
        assignment_id = str(uuid4())
        now = datetime.now(timezone.utc)

        sql = """
        MERGE INTO ASSIGNMENTS t
        USING (SELECT %s AS application_id, %s AS assessor_id) s
        ON t.application_id = s.application_id AND t.assessor_id = s.assessor_id
        WHEN NOT MATCHED THEN INSERT (
            id, application_id, assessor_id, assigned_by, assigned_at, due_at, status
        ) VALUES (
            %s, s.application_id, s.assessor_id, %s, %s, %s, %s
        )
        """
        inserted = self.execute_query(
            sql,
            (
                application_id,
                assessor_id,
                assignment_id,
                assigned_by,
                now,
                due_at,
                AssignmentStatus.PENDING.value,
            ),
            commit=True,
        )
        if not inserted:
            return None

        return Assignment(
            assignment_id=assignment_id,
            application_id=application_id,
            assessor_id=assessor_id,
            assigned_by=assigned_by,
            assigned_at=now,
            due_at=due_at,
        )

    def delete_assignment(self, assignment_id: str) -> bool:
        sql = "DELETE FROM ASSIGNMENTS WHERE ID = %s"
        return bool(self.execute_query(sql, (assignment_id,), commit=True))

    def update_assignment_status(
        self,
        assignment_id: str,
        status: AssignmentStatus,
    ) -> Optional[Assignment]:
        current = self.get_assignment(assignment_id)
        if current is None:
            return None

        now = datetime.now(timezone.utc)
        update_data: Dict[str, Any] = {"status": status.value}
        if status == AssignmentStatus.IN_PROGRESS and current.started_at is None:
            update_data["started_at"] = now
        if status == AssignmentStatus.COMPLETED:
            update_data["completed_at"] = now
        if status == AssignmentStatus.RETURNED:
            update_data["completed_at"] = None

        sql, params = self.build_update_query("ASSIGNMENTS", update_data, "ID", assignment_id)
        self.execute_query(sql, tuple(params), commit=True)
        return self.get_assignment(assignment_id)

    def count_assignments(self, call_id: str) -> int:
        sql = """
            SELECT COUNT(*) AS TOTAL
            FROM ASSIGNMENTS a
            JOIN APPLICATIONS app ON app.ID = a.APPLICATION_ID
            WHERE app.CALL_ID = %s
        """
        return self.count(sql, (call_id,))

    def count_completed(self, call_id: str) -> int:
        sql = """
            SELECT COUNT(*) AS TOTAL
            FROM ASSESSMENTS s
            JOIN APPLICATIONS app ON app.ID = s.APPLICATION_ID
            WHERE app.CALL_ID = %s AND s.STATUS = %s
        """
        return self.count(sql, (call_id, AssessmentStatus.SUBMITTED.value))

    # ------------------------------------------------------------------
    # Pool, conflicts and workload
    # ------------------------------------------------------------------

    def list_pool(self, call_id: str) -> List[str]:
        sql = """
            SELECT ASSESSOR_ID
            FROM ASSESSOR_POOL
            WHERE CALL_ID = %s
            ORDER BY ADDED_AT, ASSESSOR_ID
        """
        rows = self.execute_query(sql, (call_id,), fetch_all=True) or []
        return [self.row_to_dict(r)["assessor_id"] for r in rows]

    def list_conflicts(self, call_id: str) -> List[Tuple[str, str]]:
        sql = """
            SELECT c.APPLICATION_ID, c.ASSESSOR_ID
            FROM COI_DECLARATIONS c
            JOIN APPLICATIONS app ON app.ID = c.APPLICATION_ID
            WHERE app.CALL_ID = %s AND c.HAS_CONFLICT = TRUE
        """
        rows = self.execute_query(sql, (call_id,), fetch_all=True) or []
        return [
            (r["application_id"], r["assessor_id"])
            for r in map(self.row_to_dict, rows)
        ]

    def list_assessor_workloads(self, call_id: str) -> List[AssessorWorkload]:
        sql = """
            SELECT p.ASSESSOR_ID, u.NAME AS ASSESSOR_NAME, u.EMAIL AS ASSESSOR_EMAIL,
                   COUNT(DISTINCT a.ID) AS ASSIGNED_COUNT,
                   COUNT(DISTINCT IFF(s.STATUS = %s, s.ID, NULL)) AS COMPLETED_COUNT,
                   MAX(IFF(s.STATUS = %s, s.SUBMITTED_AT, NULL)) AS LAST_ACTIVITY
            FROM ASSESSOR_POOL p
            LEFT JOIN USERS u ON u.ID = p.ASSESSOR_ID
            LEFT JOIN APPLICATIONS app ON app.CALL_ID = p.CALL_ID
            LEFT JOIN ASSIGNMENTS a
                   ON a.APPLICATION_ID = app.ID AND a.ASSESSOR_ID = p.ASSESSOR_ID
            LEFT JOIN ASSESSMENTS s ON s.ASSIGNMENT_ID = a.ID
            WHERE p.CALL_ID = %s
            GROUP BY p.ASSESSOR_ID, u.NAME, u.EMAIL, p.ADDED_AT
            ORDER BY p.ADDED_AT, p.ASSESSOR_ID
        """
        submitted = AssessmentStatus.SUBMITTED.value
        rows = self.execute_query(sql, (submitted, submitted, call_id), fetch_all=True) or []

        return [
            AssessorWorkload(
                assessor_id=r["assessor_id"],
                assessor_name=r.get("assessor_name") or "",
                assessor_email=r.get("assessor_email"),
                assigned_count=int(r.get("assigned_count") or 0),
                completed_count=int(r.get("completed_count") or 0),
                last_activity=self.normalize_timestamp(r.get("last_activity")),
            )
            for r in map(self.row_to_dict, rows)
        ]

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _row_to_assignment(self, row: Dict[str, Any]) -> Assignment:
        r = self.row_to_dict(row)
        return Assignment(
            assignment_id=r["id"],
            application_id=r["application_id"],
            assessor_id=r["assessor_id"],
            assigned_by=r.get("assigned_by"),
            assigned_at=self.normalize_timestamp(r["assigned_at"]),
            due_at=self.normalize_timestamp(r.get("due_at")),
            status=AssignmentStatus(r["status"]),
            started_at=self.normalize_timestamp(r.get("started_at")),
            completed_at=self.normalize_timestamp(r.get("completed_at")),
        )

    def _row_to_submission(self, row: Dict[str, Any]) -> AssessorSubmission:
        r = self.row_to_dict(row)
        return AssessorSubmission(
            assessment_id=r["id"],
            assignment_id=r["assignment_id"],
            application_id=r["application_id"],
            assessor_id=r["assessor_id"],
            assessor_name=r.get("assessor_name") or "",
            scores=_scores_adapter.validate_python(self.parse_variant(r.get("scores"), [])),
            overall_score=float(r["overall_score"]) if r.get("overall_score") is not None else None,
            weighted_score=float(r["weighted_score"]) if r.get("weighted_score") is not None else None,
            overall_comment=r.get("overall_comment"),
            coi_confirmed=bool(r.get("coi_confirmed")),
            coi_details=r.get("coi_details"),
            revision_reason=r.get("revision_reason"),
            status=AssessmentStatus(r["status"]),
            submitted_at=self.normalize_timestamp(r.get("submitted_at")),
            created_at=self.normalize_timestamp(r["created_at"]),
            updated_at=self.normalize_timestamp(r["updated_at"]),
        )
