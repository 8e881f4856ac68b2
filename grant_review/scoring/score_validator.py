"""
scoring/score_validator.py

Checks one assessor's criterion scores against a call's criteria before
they are accepted. Every problem is collected; nothing short-circuits.
"""

import logging
import math
from typing import Dict, List, Sequence

from grant_review.models.assessment import CriterionScore, ValidationResult
from grant_review.models.call import Criterion

logger = logging.getLogger(__name__)


def index_scores(scores: Sequence[CriterionScore]) -> Dict[str, CriterionScore]:
    """Map criterion_id -> score. A repeated criterion_id keeps the last entry."""
    return {s.criterion_id: s for s in scores}


class ScoreValidator:
    """Validate criterion scores for range, completeness and comments."""

    def validate(
        self,
        scores: Sequence[CriterionScore],
        criteria: Sequence[Criterion],
    ) -> ValidationResult:
        """
        Args:
            scores: Scores submitted by one assessor.
            criteria: The owning call's criteria.

        Returns:
            ValidationResult with ``valid`` and every error message found.
        """
        errors: List[str] = []
        by_criterion = index_scores(scores)

        for criterion in criteria:
            score = by_criterion.get(criterion.criterion_id)

            if score is None:
                errors.append(f"Missing score for criterion: {criterion.name}")
                continue

            if not math.isfinite(score.score):
                errors.append(f"Score for {criterion.name} must be a finite number")
                continue

            if score.score < 0:
                errors.append(f"Score for {criterion.name} cannot be negative")

            if score.score > criterion.max_points:
                errors.append(
                    f"Score for {criterion.name} exceeds maximum ({criterion.max_points})"
                )

            if criterion.comments_required and not (score.comment or "").strip():
                errors.append(f"Comment required for criterion: {criterion.name}")

        known = {c.criterion_id for c in criteria}
        for criterion_id in by_criterion:
            if criterion_id not in known:
                errors.append(f"Score references unknown criterion: {criterion_id}")

        if errors:
            logger.debug("scores_rejected", extra={"error_count": len(errors)})

        return ValidationResult(valid=not errors, errors=errors)


def validate_scores(
    scores: Sequence[CriterionScore],
    criteria: Sequence[Criterion],
) -> ValidationResult:
    return ScoreValidator().validate(scores, criteria)
