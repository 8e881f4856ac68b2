# tests/test_property_based.py
"""
Property-Based Tests

Hypothesis tests with max_examples=300, covering:
  - statistics helpers (variance, weighted mean)
  - AssessorTotalCalculator
  - ranking
  - AssignmentDistributor
"""

import random
from collections import Counter

from hypothesis import given, settings
from hypothesis import strategies as st

from grant_review.models.assessment import CriterionScore
from grant_review.models.call import Criterion
from grant_review.models.enumerations import DistributionStrategy, RankingBasis
from grant_review.models.results import ApplicationResult
from grant_review.scoring.assessor_total import calculate_assessor_total
from grant_review.scoring.distributor import AssignmentDistributor
from grant_review.scoring.ranking import build_leaderboard, rank_results, ranking_score
from grant_review.scoring.utils import population_variance, weighted_mean

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

score_st = st.floats(min_value=0.0, max_value=100.0, allow_nan=False, allow_infinity=False)
weight_st = st.floats(min_value=0.1, max_value=10.0, allow_nan=False, allow_infinity=False)


@st.composite
def scored_criteria(draw):
    """Draw a criteria set with one in-range score per criterion."""
    n = draw(st.integers(min_value=1, max_value=8))
    criteria, scores = [], []
    for i in range(n):
        max_points = draw(st.integers(min_value=1, max_value=100))
        criteria.append(
            Criterion(
                criterion_id=f"c{i}",
                name=f"C{i}",
                max_points=max_points,
                weight=draw(weight_st),
                order=i,
            )
        )
        scores.append(
            CriterionScore(criterion_id=f"c{i}", score=draw(st.integers(min_value=0, max_value=max_points)))
        )
    return criteria, scores


@st.composite
def application_results(draw):
    n = draw(st.integers(min_value=0, max_value=12))
    return [
        ApplicationResult(
            application_id=f"app-{i}",
            reference_number=f"REF-{i}",
            applicant_name=f"Applicant {i}",
            total_average=draw(st.integers(min_value=0, max_value=50)),
            weighted_average=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=10))),
            assessments_completed=draw(st.integers(min_value=0, max_value=3)),
            assessments_required=2,
        )
        for i in range(n)
    ]


ids_st = st.lists(st.sampled_from([f"app-{i}" for i in range(10)]), max_size=10)
pool_st = st.lists(st.sampled_from(["A", "B", "C", "D", "E"]), min_size=1, max_size=5, unique=True)
strategy_st = st.sampled_from(list(DistributionStrategy))


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class TestStatisticsPropertyBased:

    @given(st.lists(score_st, max_size=20))
    @settings(max_examples=300)
    def test_variance_is_non_negative(self, values):
        assert population_variance(values) >= -1e-9

    @given(score_st)
    @settings(max_examples=300)
    def test_single_value_has_zero_variance(self, value):
        assert population_variance([value]) == 0.0

    @given(st.lists(st.tuples(score_st, weight_st), min_size=1, max_size=20))
    @settings(max_examples=300)
    def test_weighted_mean_is_bounded(self, pairs):
        values = [v for v, _ in pairs]
        weights = [w for _, w in pairs]
        result = weighted_mean(values, weights)
        assert min(values) - 1e-6 <= result <= max(values) + 1e-6


# ---------------------------------------------------------------------------
# Assessor totals
# ---------------------------------------------------------------------------


class TestAssessorTotalPropertyBased:

    @given(scored_criteria())
    @settings(max_examples=300)
    def test_total_is_sum_of_scores(self, drawn):
        criteria, scores = drawn
        assert calculate_assessor_total(scores, criteria).total == sum(s.score for s in scores)

    @given(scored_criteria())
    @settings(max_examples=300)
    def test_weighted_lies_between_lowest_and_highest_score(self, drawn):
        criteria, scores = drawn
        weighted = calculate_assessor_total(scores, criteria).weighted
        values = [s.score for s in scores]
        assert weighted is not None
        assert min(values) - 1e-6 <= weighted <= max(values) + 1e-6


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


class TestRankingPropertyBased:

    @given(application_results(), st.sampled_from(list(RankingBasis)))
    @settings(max_examples=300)
    def test_rank_results_is_sorted_permutation(self, results, basis):
        snapshot = list(results)
        ranked = rank_results(results, basis)

        assert results == snapshot
        assert sorted(r.application_id for r in ranked) == sorted(r.application_id for r in results)
        keys = [ranking_score(r, basis) for r in ranked]
        assert keys == sorted(keys, reverse=True)

    @given(application_results(), st.sampled_from(list(RankingBasis)))
    @settings(max_examples=300)
    def test_leaderboard_competition_ranks(self, results, basis):
        entries = build_leaderboard(results, basis)

        assert len(entries) == sum(1 for r in results if r.assessments_completed > 0)
        for position, entry in enumerate(entries, start=1):
            assert 1 <= entry.rank <= position
            if position > 1 and entry.score == entries[position - 2].score:
                assert entry.rank == entries[position - 2].rank
            elif position > 1:
                assert entry.rank == position


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------


class TestDistributorPropertyBased:

    @given(ids_st, pool_st, strategy_st, st.integers(min_value=1, max_value=6), st.integers(0, 2**16))
    @settings(max_examples=300)
    def test_no_duplicate_pairs_and_capped_per_application(self, apps, pool, strategy, target, seed):
        plan = AssignmentDistributor(random.Random(seed)).distribute(apps, pool, strategy, target)

        pairs = [(p.application_id, p.assessor_id) for p in plan.pairs]
        assert len(pairs) == len(set(pairs))

        per_app = Counter(p.application_id for p in plan.pairs)
        for application_id in set(apps):
            assert per_app[application_id] == min(target, len(pool))

    @given(ids_st, pool_st, strategy_st, st.integers(min_value=1, max_value=6), st.integers(0, 2**16))
    @settings(max_examples=300)
    def test_conflicts_never_assigned(self, apps, pool, strategy, target, seed):
        conflicts = [(a, pool[0]) for a in apps]
        plan = AssignmentDistributor(random.Random(seed)).distribute(
            apps, pool, strategy, target, conflicts=conflicts
        )
        assert all(p.assessor_id != pool[0] for p in plan.pairs)

    @given(ids_st, pool_st, st.integers(min_value=1, max_value=6))
    @settings(max_examples=300)
    def test_balanced_load_spread_within_one(self, apps, pool, target):
        plan = AssignmentDistributor().distribute(apps, pool, DistributionStrategy.BALANCED, target)
        loads = [plan.load()[a] for a in pool]
        assert max(loads) - min(loads) <= 1
