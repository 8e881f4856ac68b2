"""
scoring/assessor_total.py

Reduces one assessor's criterion scores to a total and, when the call's
criteria carry weights, a weighted average.

Formula:
    total    = Σ score_i
    weighted = Σ (score_i × w_i) / Σ w_i     over criteria that were scored
    w_i      = criterion weight, or 1 when the weight is absent or 0
"""

import logging
from typing import List, Sequence

from grant_review.models.assessment import AssessorTotal, CriterionScore
from grant_review.models.call import Criterion
from grant_review.scoring.score_validator import index_scores
from grant_review.scoring.utils import weighted_mean

logger = logging.getLogger(__name__)


def has_weights(criteria: Sequence[Criterion]) -> bool:
    """True when at least one criterion defines a positive weight."""
    return any(c.is_weighted for c in criteria)


class AssessorTotalCalculator:
    """Compute an assessor's total and weighted score."""

    def calculate(
        self,
        scores: Sequence[CriterionScore],
        criteria: Sequence[Criterion],
    ) -> AssessorTotal:
        """
        Completeness is not enforced here; unscored criteria simply do not
        contribute. Run ScoreValidator first when completeness matters.

        Examples:
            >>> calc = AssessorTotalCalculator()
            >>> crit = [Criterion(criterion_id=i, name=i, max_points=10, weight=w)
            ...         for i, w in (("a", 2), ("b", 1), ("c", 1))]
            >>> calc.calculate([CriterionScore(criterion_id="a", score=10),
            ...                 CriterionScore(criterion_id="b", score=5),
            ...                 CriterionScore(criterion_id="c", score=5)], crit).weighted
            7.5
        """
        by_criterion = index_scores(scores)
        total = float(sum(s.score for s in by_criterion.values()))

        if not has_weights(criteria):
            return AssessorTotal(total=total, weighted=None)

        values: List[float] = []
        weights: List[float] = []
        for criterion in criteria:
            score = by_criterion.get(criterion.criterion_id)
            if score is None:
                continue
            values.append(score.score)
            weights.append(criterion.effective_weight)

        weighted = weighted_mean(values, weights)

        logger.debug(
            "assessor_total_calculated",
            extra={"total": total, "weighted": weighted, "scored_criteria": len(values)},
        )

        return AssessorTotal(total=total, weighted=weighted)


def calculate_assessor_total(
    scores: Sequence[CriterionScore],
    criteria: Sequence[Criterion],
) -> AssessorTotal:
    return AssessorTotalCalculator().calculate(scores, criteria)
