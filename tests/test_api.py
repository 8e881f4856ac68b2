# tests/test_api.py

"""
API Endpoint Tests - Tests for all FastAPI endpoints against the seeded in-memory store
"""

import json

from fastapi import status

from conftest import CALL_ID

API = "/api/v1"


def scores(impact=5, feasibility=5, team=5, team_comment="Strong team"):
    return [
        {"criterion_id": "impact", "score": impact},
        {"criterion_id": "feasibility", "score": feasibility},
        {"criterion_id": "team", "score": team, "comment": team_comment},
    ]


def pending_assignment_id(client):
    progress = client.get(f"{API}/calls/{CALL_ID}/progress").json()
    assert progress["total_assignments"] == 5
    from grant_review.core.dependencies import get_score_repository
    from grant_review.main import app

    repo = app.dependency_overrides[get_score_repository]()
    return next(a.assignment_id for a in repo.list_assignments(CALL_ID) if a.application_id == "app-3")


# ROOT / HEALTH


class TestRootAndHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "running"

    def test_health_memory_store(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["dependencies"]["store"].startswith("healthy")
        assert data["dependencies"]["redis"] == "disabled"


# RESULTS


class TestResultsEndpoints:

    def test_master_results(self, client):
        response = client.get(f"{API}/calls/{CALL_ID}/results")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["call_id"] == CALL_ID
        assert len(data["results"]) == 3
        assert data["summary"]["fully_assessed"] == 2
        assert data["summary"]["not_assessed"] == 1

    def test_unknown_call_returns_404(self, client):
        response = client.get(f"{API}/calls/missing/results")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["error_code"] == "CALL_NOT_FOUND"

    def test_ranking(self, client):
        response = client.get(f"{API}/calls/{CALL_ID}/results/ranking", params={"basis": "weighted"})
        assert response.status_code == status.HTTP_200_OK
        entries = response.json()["entries"]
        assert [e["application_id"] for e in entries] == ["app-2", "app-1"]
        assert entries[0]["rank"] == 1

    def test_ranking_invalid_basis(self, client):
        response = client.get(f"{API}/calls/{CALL_ID}/results/ranking", params={"basis": "median"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["message"] == "Ranking basis must be one of: total, weighted"

    def test_variance_flags(self, client):
        data = client.get(f"{API}/calls/{CALL_ID}/results/variance-flags").json()
        assert data["count"] == 1
        assert data["results"][0]["reference_number"] == "REF-002"

    def test_export(self, client):
        data = client.get(f"{API}/calls/{CALL_ID}/results/export", params={"detailed": "true"}).json()
        assert data["detailed"] is True
        assert len(data["rows"]) == 12

    def test_application_result(self, client):
        data = client.get(f"{API}/applications/app-1/results").json()
        assert data["total_average"] == 20.0
        assert data["weighted_average"] == 7.25

    def test_breakdown(self, client):
        response = client.get(f"{API}/applications/app-2/breakdown")
        assert response.status_code == status.HTTP_200_OK
        impact = response.json()[0]
        assert impact["criterion_id"] == "impact"
        assert impact["high_variance"] is True

    def test_unknown_application_returns_404(self, client):
        response = client.get(f"{API}/applications/missing/breakdown")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["error_code"] == "APPLICATION_NOT_FOUND"


# PROGRESS


class TestProgressEndpoints:

    def test_progress(self, client):
        data = client.get(f"{API}/calls/{CALL_ID}/progress").json()
        assert data["completion_percentage"] == 80.0
        assert len(data["assessor_progress"]) == 3

    def test_outstanding(self, client):
        data = client.get(f"{API}/calls/{CALL_ID}/progress/outstanding").json()
        assert [a["assessor_id"] for a in data] == ["asr-2"]


# ASSIGNMENTS


class TestAssignmentEndpoints:

    def test_distribute(self, client):
        response = client.post(
            f"{API}/calls/{CALL_ID}/assignments/distribute",
            json={"strategy": "balanced", "assigned_by": "coord-1"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["count"] == 1
        assert data["strategy"] == "balanced"

    def test_distribute_invalid_strategy(self, client):
        response = client.post(
            f"{API}/calls/{CALL_ID}/assignments/distribute",
            json={"strategy": "alphabetical"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"]["field"] == "strategy"

    def test_create_and_delete_assignment(self, client):
        response = client.post(f"{API}/assignments", json={"application_id": "app-3", "assessor_id": "asr-3"})
        assert response.status_code == status.HTTP_201_CREATED
        assignment_id = response.json()["assignment_id"]

        response = client.delete(f"{API}/assignments/{assignment_id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.delete(f"{API}/assignments/{assignment_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_duplicate_assignment_conflict(self, client):
        response = client.post(f"{API}/assignments", json={"application_id": "app-3", "assessor_id": "asr-2"})
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"]["error_code"] == "DUPLICATE_ASSIGNMENT"

    def test_missing_assessor_id(self, client):
        response = client.post(f"{API}/assignments", json={"application_id": "app-3"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["message"] == "Assessor ID is required"

    def test_malformed_json(self, client):
        response = client.post(
            f"{API}/assignments",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_list_call_assignments(self, client):
        response = client.get(f"{API}/calls/{CALL_ID}/assignments")
        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 5

        response = client.get(f"{API}/calls/missing/assignments")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["error_code"] == "CALL_NOT_FOUND"

    def test_list_application_assignments(self, client):
        data = client.get(f"{API}/applications/app-2/assignments").json()
        assert sorted(a["assessor_id"] for a in data) == ["asr-1", "asr-3"]

        response = client.get(f"{API}/applications/missing/assignments")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["error_code"] == "APPLICATION_NOT_FOUND"

    def test_list_assessor_assignments(self, client):
        response = client.get(f"{API}/calls/{CALL_ID}/assessors/asr-2/assignments")
        assert response.status_code == status.HTTP_200_OK
        assert sorted(a["application_id"] for a in response.json()) == ["app-1", "app-3"]

    def test_assignment_summary_overdue_boundary(self, client):
        client.post(
            f"{API}/assignments",
            json={"application_id": "app-3", "assessor_id": "asr-1", "due_at": "2026-03-31T12:00:00Z"},
        )
        client.post(
            f"{API}/assignments",
            json={"application_id": "app-3", "assessor_id": "asr-3", "due_at": "2026-04-01T12:00:00Z"},
        )

        response = client.get(
            f"{API}/calls/{CALL_ID}/assignments/summary",
            params={"as_of": "2026-04-01T12:00:00Z"},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["totals"]["total_assignments"] == 7
        assert data["totals"]["pending"] == 3
        assert data["totals"]["completed"] == 4
        assert data["totals"]["overdue"] == 1
        overdue = {a["assessor_id"]: a["overdue"] for a in data["by_assessor"]}
        assert overdue == {"asr-1": 1, "asr-2": 0, "asr-3": 0}

    def test_assignment_summary_unknown_call(self, client):
        response = client.get(f"{API}/calls/missing/assignments/summary")
        assert response.status_code == status.HTTP_404_NOT_FOUND


# ASSESSMENTS


class TestAssessmentEndpoints:

    def test_draft_then_submit(self, client):
        assignment_id = pending_assignment_id(client)
        url = f"{API}/assignments/{assignment_id}/assessment"

        response = client.put(url, json={"assessor_id": "asr-2", "scores": scores(impact=3)})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "draft"

        response = client.post(
            f"{url}/submit",
            json={"assessor_id": "asr-2", "scores": scores(impact=10), "coi_confirmed": True},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "submitted"
        assert data["overall_score"] == 20
        assert data["weighted_score"] == 7.5

        progress = client.get(f"{API}/calls/{CALL_ID}/progress").json()
        assert progress["completed_assessments"] == 5

    def test_submit_validation_errors(self, client):
        assignment_id = pending_assignment_id(client)
        response = client.post(
            f"{API}/assignments/{assignment_id}/assessment/submit",
            json={"assessor_id": "asr-2", "scores": scores(impact=-1, team_comment=""), "coi_confirmed": True},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        detail = response.json()["detail"]
        assert detail["error_code"] == "SCORE_VALIDATION_FAILED"
        assert detail["details"]["errors"] == [
            "Score for Impact cannot be negative",
            "Comment required for criterion: Team",
        ]

    def test_submit_by_other_assessor_forbidden(self, client):
        assignment_id = pending_assignment_id(client)
        response = client.post(
            f"{API}/assignments/{assignment_id}/assessment/submit",
            json={"assessor_id": "asr-1", "scores": scores(), "coi_confirmed": True},
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_return_unsubmitted_is_not_found(self, client):
        assignment_id = pending_assignment_id(client)
        response = client.post(f"{API}/assignments/{assignment_id}/assessment/return", json={})
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["error_code"] == "ASSESSMENT_NOT_FOUND"


# SCORING HELPERS


class TestScoringEndpoints:

    CRITERIA = [
        {"criterion_id": "a", "name": "A", "max_points": 10, "weight": 2},
        {"criterion_id": "b", "name": "B", "max_points": 10, "weight": 1},
        {"criterion_id": "c", "name": "C", "max_points": 10, "weight": 1},
    ]

    def test_validate(self, client):
        response = client.post(
            f"{API}/scoring/validate",
            json={"scores": [{"criterion_id": "a", "score": 12}], "criteria": self.CRITERIA},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["valid"] is False
        assert len(data["errors"]) == 3

    def test_validate_rejects_nan(self, client):
        body = (
            '{"scores": [{"criterion_id": "a", "score": NaN}, '
            '{"criterion_id": "b", "score": 5}, {"criterion_id": "c", "score": 5}], '
            '"criteria": ' + json.dumps(self.CRITERIA) + '}'
        )
        response = client.post(
            f"{API}/scoring/validate",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"valid": False, "errors": ["Score for A must be a finite number"]}

    def test_total(self, client):
        response = client.post(
            f"{API}/scoring/total",
            json={
                "scores": [
                    {"criterion_id": "a", "score": 10},
                    {"criterion_id": "b", "score": 5},
                    {"criterion_id": "c", "score": 5},
                ],
                "criteria": self.CRITERIA,
            },
        )
        assert response.json() == {"total": 20.0, "weighted": 7.5}
