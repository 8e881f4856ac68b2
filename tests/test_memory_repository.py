# tests/test_memory_repository.py

"""
In-Memory Score Repository Tests
"""

from grant_review.models.enumerations import AssessmentStatus, AssignmentStatus
from grant_review.repositories.memory_repository import InMemoryScoreRepository

from conftest import CALL_ID, make_submission


class TestInMemoryScoreRepository:

    def test_instances_do_not_share_state(self, call):
        first = InMemoryScoreRepository()
        second = InMemoryScoreRepository()
        first.add_call(call)
        assert second.get_call(call.call_id) is None

    def test_lists_only_submitted_applications(self, seeded_repo):
        ids = [a.application_id for a in seeded_repo.list_applications(CALL_ID)]
        assert ids == ["app-1", "app-2", "app-3"]
        assert len(seeded_repo.list_applications(CALL_ID, status=None)) == 4

    def test_create_assignment_is_insert_or_ignore(self, seeded_repo):
        assert seeded_repo.create_assignment("app-3", "asr-2") is None
        assert seeded_repo.create_assignment("app-3", "asr-3") is not None

    def test_completed_submissions_resolve_names(self, seeded_repo):
        names = sorted(s.assessor_name for s in seeded_repo.get_completed_submissions("app-1"))
        assert names == ["Ada", "Ben"]

    def test_drafts_are_not_completed(self, seeded_repo):
        assignment = seeded_repo.list_assignments(CALL_ID)[-1]
        seeded_repo.save_submission(
            make_submission(
                "app-3", "asr-2", {"impact": 1},
                assignment_id=assignment.assignment_id, status=AssessmentStatus.DRAFT,
            )
        )
        assert seeded_repo.get_completed_submissions("app-3") == []
        assert seeded_repo.count_completed(CALL_ID) == 4

    def test_counts(self, seeded_repo):
        assert seeded_repo.count_applications(CALL_ID) == 3
        assert seeded_repo.count_assignments(CALL_ID) == 5
        assert seeded_repo.count_completed(CALL_ID) == 4

    def test_workloads_follow_pool_order(self, seeded_repo):
        workloads = seeded_repo.list_assessor_workloads(CALL_ID)
        assert [(w.assessor_id, w.assigned_count, w.completed_count) for w in workloads] == [
            ("asr-1", 2, 2),
            ("asr-2", 2, 1),
            ("asr-3", 1, 1),
        ]
        assert workloads[0].assessor_email == "ada@example.org"
        assert workloads[0].last_activity is not None

    def test_status_updates_stamp_times(self, seeded_repo):
        assignment = seeded_repo.create_assignment("app-3", "asr-1")
        started = seeded_repo.update_assignment_status(assignment.assignment_id, AssignmentStatus.IN_PROGRESS)
        assert started.started_at is not None
        done = seeded_repo.update_assignment_status(assignment.assignment_id, AssignmentStatus.COMPLETED)
        assert done.completed_at is not None
        assert seeded_repo.update_assignment_status("missing", AssignmentStatus.COMPLETED) is None

    def test_conflicts_scoped_to_call(self, seeded_repo):
        seeded_repo.add_conflict("app-1", "asr-3")
        seeded_repo.add_conflict("other-app", "asr-1")
        assert seeded_repo.list_conflicts(CALL_ID) == [("app-1", "asr-3")]

    def test_delete_assignment(self, seeded_repo):
        assignment = seeded_repo.create_assignment("app-3", "asr-3")
        assert seeded_repo.delete_assignment(assignment.assignment_id) is True
        assert seeded_repo.delete_assignment(assignment.assignment_id) is False
