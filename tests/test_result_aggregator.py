# tests/test_result_aggregator.py

"""
Application Result Aggregator Tests
"""

import pytest

from grant_review.models.call import Criterion, FundingCall
from grant_review.models.enumerations import MissingWeightedPolicy
from grant_review.scoring.result_aggregator import ApplicationResultAggregator

from conftest import make_submission


@pytest.fixture
def aggregator():
    return ApplicationResultAggregator()


@pytest.fixture
def single_criterion_call():
    return FundingCall(
        call_id="call-x",
        name="Single",
        criteria=[Criterion(criterion_id="q", name="Quality", max_points=10)],
        required_assessors_per_application=2,
        variance_threshold=20.0,
    )


class TestApplicationResultAggregator:

    def test_high_variance_flagged(self, aggregator, application, single_criterion_call):
        submissions = [
            make_submission("app-1", "asr-1", {"q": 10}),
            make_submission("app-1", "asr-2", {"q": 0}),
        ]
        result = aggregator.aggregate(application, single_criterion_call, submissions)
        aggregate = result.criterion_aggregates[0]
        assert aggregate.variance == pytest.approx(25.0)
        assert aggregate.normalized_variance_pct == pytest.approx(25.0)
        assert aggregate.high_variance is True
        assert result.high_variance_flag is True
        assert result.total_average == pytest.approx(5.0)
        assert result.total_variance == pytest.approx(25.0)

    def test_threshold_is_strict(self, aggregator, application, single_criterion_call):
        call = single_criterion_call.model_copy(update={"variance_threshold": 25.0})
        submissions = [
            make_submission("app-1", "asr-1", {"q": 10}),
            make_submission("app-1", "asr-2", {"q": 0}),
        ]
        result = aggregator.aggregate(application, call, submissions)
        assert result.high_variance_flag is False

    def test_no_threshold_never_flags(self, aggregator, application, single_criterion_call):
        call = single_criterion_call.model_copy(update={"variance_threshold": None})
        submissions = [
            make_submission("app-1", "asr-1", {"q": 10}),
            make_submission("app-1", "asr-2", {"q": 0}),
        ]
        assert aggregator.aggregate(application, call, submissions).high_variance_flag is False

    def test_default_threshold_used_when_call_has_none(self, application, single_criterion_call):
        call = single_criterion_call.model_copy(update={"variance_threshold": None})
        aggregator = ApplicationResultAggregator(default_variance_threshold=10.0)
        submissions = [
            make_submission("app-1", "asr-1", {"q": 10}),
            make_submission("app-1", "asr-2", {"q": 0}),
        ]
        assert aggregator.aggregate(application, call, submissions).high_variance_flag is True

    def test_single_submission(self, aggregator, application, call):
        submission = make_submission("app-1", "asr-1", {"impact": 10, "feasibility": 5, "team": 5})
        result = aggregator.aggregate(application, call, [submission])
        assert result.assessments_completed == 1
        assert result.assessments_required == 2
        assert result.total_variance == 0
        assert result.high_variance_flag is False
        assert all(a.variance == 0 for a in result.criterion_aggregates)
        assert result.total_average == pytest.approx(20.0)
        assert result.weighted_average == pytest.approx(7.5)

    def test_no_submissions(self, aggregator, application, call):
        result = aggregator.aggregate(application, call, [])
        assert result.assessments_completed == 0
        assert result.total_average == 0
        assert result.weighted_average is None
        assert result.high_variance_flag is False
        assert [a.criterion_id for a in result.criterion_aggregates] == ["impact", "feasibility", "team"]
        assert all(a.scores == [] for a in result.criterion_aggregates)

    def test_criteria_follow_display_order(self, aggregator, application):
        call = FundingCall(
            call_id="call-o",
            name="Ordered",
            criteria=[
                Criterion(criterion_id="z", name="Z", max_points=5, order=2),
                Criterion(criterion_id="y", name="Y", max_points=5, order=1),
            ],
        )
        result = aggregator.aggregate(application, call, [])
        assert [a.criterion_id for a in result.criterion_aggregates] == ["y", "z"]

    def test_per_criterion_statistics(self, aggregator, application, call):
        submissions = [
            make_submission("app-1", "asr-1", {"impact": 10, "feasibility": 5, "team": 5}),
            make_submission("app-1", "asr-2", {"impact": 8, "feasibility": 6, "team": 6}),
        ]
        result = aggregator.aggregate(application, call, submissions)
        impact = result.criterion_aggregates[0]
        assert impact.scores == [10, 8]
        assert impact.average == pytest.approx(9.0)
        assert impact.min == 8
        assert impact.max == 10
        assert impact.variance == pytest.approx(1.0)
        assert result.weighted_average == pytest.approx(7.25)

    def test_stored_totals_are_used(self, aggregator, application, call):
        submission = make_submission(
            "app-1", "asr-1", {"impact": 1, "feasibility": 1, "team": 1},
            overall_score=99.0, weighted_score=42.0,
        )
        result = aggregator.aggregate(application, call, [submission])
        assert result.assessor_scores[0].overall_score == 99.0
        assert result.total_average == 99.0
        assert result.weighted_average == 42.0

    def test_idempotent(self, aggregator, application, call):
        submissions = [
            make_submission("app-1", "asr-1", {"impact": 10, "feasibility": 5, "team": 5}),
            make_submission("app-1", "asr-2", {"impact": 2, "feasibility": 6, "team": 6}),
        ]
        first = aggregator.aggregate(application, call, submissions)
        second = aggregator.aggregate(application, call, submissions)
        assert first == second

    def test_over_complete_is_reported_not_clamped(self, aggregator, application, call):
        submissions = [
            make_submission("app-1", f"asr-{i}", {"impact": 5, "feasibility": 5, "team": 5})
            for i in range(3)
        ]
        result = aggregator.aggregate(application, call, submissions)
        assert result.assessments_completed == 3
        assert result.assessments_required == 2
        assert any("exceed" in w for w in result.warnings)

    def test_unknown_criterion_warns_and_keeps_data(self, aggregator, application, call):
        submission = make_submission(
            "app-1", "asr-1", {"impact": 5, "feasibility": 5, "team": 5, "legacy": 4}
        )
        result = aggregator.aggregate(application, call, [submission])
        assert result.warnings == ["Assessor asr-1 scored unknown criterion legacy"]
        assert result.assessor_scores[0].overall_score == 19
        assert "legacy" not in [a.criterion_id for a in result.criterion_aggregates]


class TestMissingWeightedPolicy:

    @pytest.fixture
    def mixed(self):
        return [
            make_submission("app-1", "asr-1", {"q": 8}, weighted_score=8.0, overall_score=8.0),
            make_submission("app-1", "asr-2", {"q": 4}, overall_score=4.0, weighted_score=None),
        ]

    def test_ignore_missing(self, application, single_criterion_call, mixed):
        # Single unweighted criterion: the second assessor has no weighted total
        aggregator = ApplicationResultAggregator(MissingWeightedPolicy.IGNORE_MISSING)
        result = aggregator.aggregate(application, single_criterion_call, mixed)
        assert result.weighted_average == pytest.approx(8.0)

    def test_treat_missing_as_zero(self, application, single_criterion_call, mixed):
        aggregator = ApplicationResultAggregator(MissingWeightedPolicy.TREAT_MISSING_AS_ZERO)
        result = aggregator.aggregate(application, single_criterion_call, mixed)
        assert result.weighted_average == pytest.approx(4.0)
