"""
Results Service - Grant Review Scoring Engine
grant_review/services/results_service.py

Read-side orchestration: pulls calls, applications and completed submissions
from the store, runs the aggregator/ranking/progress calculators and serves
the consumer-facing views (master results, leaderboard, variance flags,
score breakdown, export rows and call progress).

Nothing here writes to the store. Master results and progress are cached
per call in Redis when available; workflow writes invalidate them.
"""

import logging
from typing import Any, Dict, List, Optional

from grant_review.config import settings
from grant_review.core.exceptions import EntityNotFoundException
from grant_review.models.call import Application, FundingCall
from grant_review.models.enumerations import MissingWeightedPolicy, RankingBasis
from grant_review.models.progress import AssessorProgress, CallProgress
from grant_review.models.results import (
    ApplicationResult,
    CriterionAggregate,
    MasterResultsResponse,
    RankingResponse,
    ResultsExport,
    ResultsSummary,
    VarianceFlagsResponse,
)
from grant_review.repositories.score_repository import ScoreRepository
from grant_review.scoring.progress_tracker import CallProgressTracker, assessors_with_outstanding
from grant_review.scoring.ranking import build_leaderboard
from grant_review.scoring.result_aggregator import ApplicationResultAggregator
from grant_review.services.cache import (
    TTL_PROGRESS,
    TTL_RESULTS,
    cache_get,
    cache_set,
    progress_key,
    results_key,
)

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "rank",
    "reference_number",
    "applicant_name",
    "applicant_organisation",
    "assessments_completed",
    "assessments_required",
    "total_average",
    "weighted_average",
    "total_variance",
    "high_variance_flag",
]

DETAILED_COLUMNS = [
    "reference_number",
    "applicant_name",
    "assessor_id",
    "assessor_name",
    "criterion_id",
    "criterion_name",
    "max_points",
    "score",
    "comment",
    "overall_score",
    "weighted_score",
    "overall_comment",
]


class ResultsService:
    """Results, ranking and progress views for a funding call."""

    def __init__(
        self,
        repository: ScoreRepository,
        aggregator: Optional[ApplicationResultAggregator] = None,
        tracker: Optional[CallProgressTracker] = None,
        use_cache: bool = True,
    ):
        self.repo = repository
        self.aggregator = aggregator or ApplicationResultAggregator(
            missing_weighted_policy=MissingWeightedPolicy(settings.MISSING_WEIGHTED_POLICY),
            default_variance_threshold=settings.DEFAULT_VARIANCE_THRESHOLD,
        )
        self.tracker = tracker or CallProgressTracker()
        self.use_cache = use_cache

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require_call(self, call_id: str) -> FundingCall:
        call = self.repo.get_call(call_id)
        if call is None:
            raise EntityNotFoundException("FundingCall", call_id)
        return call

    def _require_application(self, application_id: str) -> Application:
        application = self.repo.get_application(application_id)
        if application is None:
            raise EntityNotFoundException("Application", application_id)
        return application

    # ------------------------------------------------------------------
    # Application results
    # ------------------------------------------------------------------

    def calculate_application_result(self, application_id: str) -> ApplicationResult:
        """Aggregate one application from its current completed submissions."""
        application = self._require_application(application_id)
        call = self._require_call(application.call_id)
        return self._aggregate(application, call)

    def _aggregate(self, application: Application, call: FundingCall) -> ApplicationResult:
        submissions = self.repo.get_completed_submissions(application.application_id)
        return self.aggregator.aggregate(application, call, submissions)

    def get_score_breakdown(self, application_id: str) -> List[CriterionAggregate]:
        return self.calculate_application_result(application_id).criterion_aggregates

    # ------------------------------------------------------------------
    # Call-level views
    # ------------------------------------------------------------------

    def get_master_results(self, call_id: str) -> MasterResultsResponse:
        """
        Aggregate every submitted application in the call.

        Args:
            call_id: Funding call to report on

        Returns:
            MasterResultsResponse with per-application results and summary counters
        """
        key = results_key(call_id)
        if self.use_cache:
            cached = cache_get(key, MasterResultsResponse)
            if cached:
                return cached

        call = self._require_call(call_id)

        results: List[ApplicationResult] = []
        for summary in self.repo.list_applications(call_id):
            application = self.repo.get_application(summary.application_id)
            if application is None:
                application = Application(**summary.model_dump(), call_id=call_id)
            results.append(self._aggregate(application, call))

        response = MasterResultsResponse(
            call_id=call.call_id,
            call_name=call.name,
            results=results,
            summary=self._summarize(results),
        )

        logger.info(
            "master_results_calculated",
            extra={
                "call_id": call_id,
                "applications": response.summary.total_applications,
                "high_variance": response.summary.high_variance_count,
            },
        )

        if self.use_cache:
            cache_set(key, response, TTL_RESULTS)
        return response

    @staticmethod
    def _summarize(results: List[ApplicationResult]) -> ResultsSummary:
        summary = ResultsSummary(total_applications=len(results))
        for r in results:
            if r.assessments_completed == 0:
                summary.not_assessed += 1
            elif r.assessments_completed >= r.assessments_required:
                # Over-complete applications are reported with a warning
                # and still count as fully assessed.
                summary.fully_assessed += 1
            else:
                summary.partially_assessed += 1
            if r.high_variance_flag:
                summary.high_variance_count += 1
        return summary

    def get_ranking(
        self,
        call_id: str,
        basis: RankingBasis = RankingBasis.TOTAL,
    ) -> RankingResponse:
        master = self.get_master_results(call_id)
        basis = RankingBasis(basis)
        return RankingResponse(
            call_id=call_id,
            basis=basis,
            entries=build_leaderboard(master.results, basis),
        )

    def get_variance_flags(self, call_id: str) -> VarianceFlagsResponse:
        """High-variance results only, largest total variance first."""
        master = self.get_master_results(call_id)
        flagged = sorted(
            (r for r in master.results if r.high_variance_flag),
            key=lambda r: r.total_variance,
            reverse=True,
        )
        return VarianceFlagsResponse(call_id=call_id, count=len(flagged), results=flagged)

    def export_rows(self, call_id: str, detailed: bool = False) -> ResultsExport:
        """Row-structured result set for spreadsheet/CSV rendering."""
        master = self.get_master_results(call_id)

        if detailed:
            rows = self._detailed_rows(master)
            columns = DETAILED_COLUMNS
        else:
            rows = self._summary_rows(master)
            columns = SUMMARY_COLUMNS

        return ResultsExport(
            call_id=master.call_id,
            call_name=master.call_name,
            detailed=detailed,
            columns=columns,
            rows=rows,
        )

    @staticmethod
    def _summary_rows(master: MasterResultsResponse) -> List[Dict[str, Any]]:
        ranks = {e.application_id: e.rank for e in build_leaderboard(master.results)}
        return [
            {
                "rank": ranks.get(r.application_id),
                "reference_number": r.reference_number,
                "applicant_name": r.applicant_name,
                "applicant_organisation": r.applicant_organisation or "",
                "assessments_completed": r.assessments_completed,
                "assessments_required": r.assessments_required,
                "total_average": round(r.total_average, 2),
                "weighted_average": (
                    round(r.weighted_average, 2) if r.weighted_average is not None else None
                ),
                "total_variance": round(r.total_variance, 2),
                "high_variance_flag": r.high_variance_flag,
            }
            for r in master.results
        ]

    @staticmethod
    def _detailed_rows(master: MasterResultsResponse) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for result in master.results:
            criteria = {c.criterion_id: c for c in result.criterion_aggregates}
            for assessor in result.assessor_scores:
                for score in assessor.scores:
                    criterion = criteria.get(score.criterion_id)
                    rows.append(
                        {
                            "reference_number": result.reference_number,
                            "applicant_name": result.applicant_name,
                            "assessor_id": assessor.assessor_id,
                            "assessor_name": assessor.assessor_name,
                            "criterion_id": score.criterion_id,
                            "criterion_name": criterion.criterion_name if criterion else "",
                            "max_points": criterion.max_points if criterion else None,
                            "score": score.score,
                            "comment": score.comment or "",
                            "overall_score": assessor.overall_score,
                            "weighted_score": assessor.weighted_score,
                            "overall_comment": assessor.overall_comment or "",
                        }
                    )
        return rows

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_call_progress(self, call_id: str) -> CallProgress:
        key = progress_key(call_id)
        if self.use_cache:
            cached = cache_get(key, CallProgress)
            if cached:
                return cached

        call = self._require_call(call_id)
        progress = self.tracker.build(
            call,
            total_applications=self.repo.count_applications(call_id),
            total_assignments=self.repo.count_assignments(call_id),
            completed_assessments=self.repo.count_completed(call_id),
            workloads=self.repo.list_assessor_workloads(call_id),
        )

        if self.use_cache:
            cache_set(key, progress, TTL_PROGRESS)
        return progress

    def get_assessors_with_outstanding(self, call_id: str) -> List[AssessorProgress]:
        return assessors_with_outstanding(self.get_call_progress(call_id))
