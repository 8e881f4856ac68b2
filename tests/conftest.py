# tests/conftest.py

"""
Pytest Fixtures - Shared test configuration and seed data

SEED DATA REFERENCE (call-1, variance threshold 20%, 2 assessors required):
- Criteria:     impact (w=2), feasibility (w=1), team (w=1, comment required); all max 10
- Pool:         asr-1 Ada, asr-2 Ben, asr-3 Cy
- app-1 REF-001 asr-1 (10, 5, 5)  asr-2 (8, 6, 6)    total 20/20, weighted 7.5/7.0
- app-2 REF-002 asr-1 (10,10,10)  asr-3 (0,10,10)    total 30/20, impact variance 25 -> flagged
- app-3 REF-003 asr-2 assigned, nothing submitted
- app-4 REF-004 draft application, never listed
"""

import os

# Tests never talk to Redis or Snowflake
os.environ["CACHE_ENABLED"] = "false"
os.environ["STORE_BACKEND"] = "memory"

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from grant_review.core.dependencies import get_score_repository
from grant_review.main import app
from grant_review.models.assessment import AssessorSubmission, CriterionScore
from grant_review.models.call import Application, Criterion, FundingCall
from grant_review.models.enumerations import ApplicationStatus, AssessmentStatus, AssignmentStatus
from grant_review.repositories.memory_repository import InMemoryScoreRepository

CALL_ID = "call-1"


# =============================================================================
# BUILDERS
# =============================================================================

def make_scores(values: Dict[str, float], comments: Optional[Dict[str, str]] = None) -> List[CriterionScore]:
    comments = comments or {}
    return [
        CriterionScore(criterion_id=cid, score=value, comment=comments.get(cid, "Reviewed"))
        for cid, value in values.items()
    ]


def make_submission(
    application_id: str,
    assessor_id: str,
    values: Dict[str, float],
    assignment_id: Optional[str] = None,
    **overrides,
) -> AssessorSubmission:
    data = dict(
        assessment_id=f"asm-{application_id}-{assessor_id}",
        assignment_id=assignment_id or f"asg-{application_id}-{assessor_id}",
        application_id=application_id,
        assessor_id=assessor_id,
        assessor_name=assessor_id,
        scores=make_scores(values),
        status=AssessmentStatus.SUBMITTED,
        coi_confirmed=True,
        submitted_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return AssessorSubmission(**data)


# =============================================================================
# CRITERIA / CALL FIXTURES
# =============================================================================

@pytest.fixture
def criteria():
    return [
        Criterion(criterion_id="impact", name="Impact", max_points=10, weight=2, order=1),
        Criterion(criterion_id="feasibility", name="Feasibility", max_points=10, weight=1, order=2),
        Criterion(
            criterion_id="team", name="Team", max_points=10, weight=1,
            comments_required=True, order=3,
        ),
    ]


@pytest.fixture
def unweighted_criteria():
    return [
        Criterion(criterion_id="a", name="A", max_points=10),
        Criterion(criterion_id="b", name="B", max_points=10),
    ]


@pytest.fixture
def call(criteria):
    return FundingCall(
        call_id=CALL_ID,
        name="Community Innovation Fund 2026",
        criteria=criteria,
        required_assessors_per_application=2,
        variance_threshold=20.0,
    )


@pytest.fixture
def application():
    return Application(
        application_id="app-1",
        call_id=CALL_ID,
        reference_number="REF-001",
        applicant_name="Green Streets",
        applicant_organisation="Green Streets CIC",
    )


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def empty_repo(call):
    """Store with the call and pool but no applications."""
    repo = InMemoryScoreRepository()
    repo.add_call(call)
    repo.add_assessor(CALL_ID, "asr-1", "Ada", "ada@example.org")
    repo.add_assessor(CALL_ID, "asr-2", "Ben", "ben@example.org")
    repo.add_assessor(CALL_ID, "asr-3", "Cy", "cy@example.org")
    return repo


def _record(repo: InMemoryScoreRepository, application_id: str, assessor_id: str, values):
    assignment = repo.create_assignment(application_id, assessor_id, assigned_by="coord-1")
    repo.save_submission(
        make_submission(application_id, assessor_id, values, assignment_id=assignment.assignment_id)
    )
    repo.update_assignment_status(assignment.assignment_id, AssignmentStatus.COMPLETED)
    return assignment


@pytest.fixture
def seeded_repo(empty_repo):
    repo = empty_repo
    for i, name in enumerate(["Green Streets", "River Trust", "Code Club"], start=1):
        repo.add_application(
            Application(
                application_id=f"app-{i}",
                call_id=CALL_ID,
                reference_number=f"REF-00{i}",
                applicant_name=name,
            )
        )
    repo.add_application(
        Application(
            application_id="app-4",
            call_id=CALL_ID,
            reference_number="REF-004",
            applicant_name="Unfinished",
            status=ApplicationStatus.DRAFT,
        )
    )

    _record(repo, "app-1", "asr-1", {"impact": 10, "feasibility": 5, "team": 5})
    _record(repo, "app-1", "asr-2", {"impact": 8, "feasibility": 6, "team": 6})
    _record(repo, "app-2", "asr-1", {"impact": 10, "feasibility": 10, "team": 10})
    _record(repo, "app-2", "asr-3", {"impact": 0, "feasibility": 10, "team": 10})
    repo.create_assignment("app-3", "asr-2", assigned_by="coord-1")
    return repo


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(seeded_repo):
    """TestClient bound to the seeded in-memory store."""
    app.dependency_overrides[get_score_repository] = lambda: seeded_repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
