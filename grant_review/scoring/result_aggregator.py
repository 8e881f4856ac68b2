# grant_review/scoring/result_aggregator.py
"""
Application Result Aggregator
-----------------------------
Combines every completed submission for one application into an
ApplicationResult: per-assessor totals, per-criterion statistics and the
application-level averages and variance flag.

Per criterion:
    average, min, max        over the scores assessors gave it
    variance                 population variance (divisor N), 0 when N < 2
    normalized %             variance / max_points² × 100
    high_variance            normalized % > variance_threshold (strict)

Per application:
    total_average            mean of assessors' overall scores
    weighted_average         mean of assessors' weighted totals (see policy)
    total_variance           population variance of overall scores
    high_variance_flag       any criterion flagged

The aggregator is pure: same inputs, same output, no writes.
"""
import structlog
from typing import Dict, List, Optional, Sequence

from grant_review.models.assessment import AssessorSubmission
from grant_review.models.call import Application, Criterion, FundingCall
from grant_review.models.enumerations import MissingWeightedPolicy
from grant_review.models.results import ApplicationResult, AssessorScore, CriterionAggregate
from grant_review.scoring.assessor_total import AssessorTotalCalculator
from grant_review.scoring.score_validator import index_scores
from grant_review.scoring.utils import (
    exceeds_threshold,
    mean,
    normalized_variance_pct,
    population_variance,
)

logger = structlog.get_logger(__name__)


class ApplicationResultAggregator:
    """Aggregate completed submissions into an ApplicationResult."""

    def __init__(
        self,
        missing_weighted_policy: MissingWeightedPolicy = MissingWeightedPolicy.IGNORE_MISSING,
        default_variance_threshold: Optional[float] = None,
        total_calculator: Optional[AssessorTotalCalculator] = None,
    ) -> None:
        """
        Args:
            missing_weighted_policy: How assessors without a weighted total
                are treated when averaging weighted totals.
            default_variance_threshold: Used only when the call sets none.
                None disables high-variance flagging for such calls.
        """
        self.missing_weighted_policy = MissingWeightedPolicy(missing_weighted_policy)
        self.default_variance_threshold = default_variance_threshold
        self.total_calculator = total_calculator or AssessorTotalCalculator()

    def aggregate(
        self,
        application: Application,
        call: FundingCall,
        submissions: Sequence[AssessorSubmission],
    ) -> ApplicationResult:
        warnings: List[str] = []
        criteria = call.ordered_criteria()
        known_ids = {c.criterion_id for c in criteria}

        assessor_scores = [self._assessor_score(s, criteria) for s in submissions]
        score_maps = [index_scores(s.scores) for s in submissions]

        for submission, score_map in zip(submissions, score_maps):
            for criterion_id in score_map:
                if criterion_id not in known_ids:
                    warnings.append(
                        f"Assessor {submission.assessor_id} scored unknown criterion {criterion_id}"
                    )

        threshold = self._threshold_for(call)
        aggregates = [self._criterion_aggregate(c, score_maps, threshold) for c in criteria]

        overall = [a.overall_score for a in assessor_scores]
        total_average = mean(overall)
        total_variance = population_variance(overall)
        weighted_average = self._weighted_average([a.weighted_score for a in assessor_scores])

        completed = len(submissions)
        required = call.required_assessors_per_application
        if completed > required:
            warnings.append(
                f"{completed} completed assessments exceed the {required} required"
            )

        result = ApplicationResult(
            application_id=application.application_id,
            reference_number=application.reference_number,
            applicant_name=application.applicant_name,
            applicant_organisation=application.applicant_organisation,
            assessor_scores=assessor_scores,
            criterion_aggregates=aggregates,
            total_average=total_average,
            weighted_average=weighted_average,
            total_variance=total_variance,
            high_variance_flag=any(a.high_variance for a in aggregates),
            assessments_completed=completed,
            assessments_required=required,
            warnings=warnings,
        )

        for message in warnings:
            logger.warning(
                "application_result_inconsistent",
                application_id=application.application_id,
                call_id=call.call_id,
                detail=message,
            )

        logger.info(
            "application_result_calculated",
            application_id=application.application_id,
            call_id=call.call_id,
            assessments_completed=completed,
            assessments_required=required,
            total_average=total_average,
            weighted_average=weighted_average,
            total_variance=total_variance,
            high_variance_flag=result.high_variance_flag,
        )

        return result

    # ------------------------------------------------------------------ #

    def _assessor_score(
        self,
        submission: AssessorSubmission,
        criteria: Sequence[Criterion],
    ) -> AssessorScore:
        overall = submission.overall_score
        weighted = submission.weighted_score
        if overall is None or weighted is None:
            computed = self.total_calculator.calculate(submission.scores, criteria)
            if overall is None:
                overall = computed.total
            if weighted is None:
                weighted = computed.weighted

        return AssessorScore(
            assessor_id=submission.assessor_id,
            assessor_name=submission.assessor_name,
            scores=list(submission.scores),
            overall_score=overall,
            weighted_score=weighted,
            overall_comment=submission.overall_comment,
            submitted_at=submission.submitted_at,
        )

    def _threshold_for(self, call: FundingCall) -> Optional[float]:
        if call.variance_threshold is not None:
            return call.variance_threshold
        return self.default_variance_threshold

    def _criterion_aggregate(
        self,
        criterion: Criterion,
        score_maps: Sequence[Dict],
        threshold: Optional[float],
    ) -> CriterionAggregate:
        scores = [
            m[criterion.criterion_id].score
            for m in score_maps
            if criterion.criterion_id in m
        ]

        variance = population_variance(scores)
        normalized = normalized_variance_pct(variance, criterion.max_points)

        return CriterionAggregate(
            criterion_id=criterion.criterion_id,
            criterion_name=criterion.name,
            max_points=criterion.max_points,
            weight=criterion.weight,
            scores=scores,
            average=mean(scores),
            min=min(scores) if scores else 0.0,
            max=max(scores) if scores else 0.0,
            variance=variance,
            normalized_variance_pct=normalized,
            high_variance=len(scores) >= 2 and exceeds_threshold(normalized, threshold),
        )

    def _weighted_average(self, weighted: Sequence[Optional[float]]) -> Optional[float]:
        present = [w for w in weighted if w is not None]
        if not present:
            return None
        if self.missing_weighted_policy == MissingWeightedPolicy.TREAT_MISSING_AS_ZERO:
            return mean([w if w is not None else 0.0 for w in weighted])
        return mean(present)
