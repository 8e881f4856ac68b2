"""
scoring/ranking.py

Orders application results into a leaderboard.

Sorting is descending and stable: equal scores keep their input order.
With the ``weighted`` basis a result lacking a weighted average is compared
by its total average instead; its displayed values are left untouched.
"""

from typing import List, Sequence

from grant_review.models.enumerations import RankingBasis
from grant_review.models.results import ApplicationResult, RankedResult


def ranking_score(result: ApplicationResult, basis: RankingBasis = RankingBasis.TOTAL) -> float:
    """Value a result is compared by under the given basis."""
    if RankingBasis(basis) == RankingBasis.WEIGHTED and result.weighted_average is not None:
        return result.weighted_average
    return result.total_average


def rank_results(
    results: Sequence[ApplicationResult],
    basis: RankingBasis = RankingBasis.TOTAL,
) -> List[ApplicationResult]:
    """Return a new list sorted by score, highest first. The input is not mutated."""
    basis = RankingBasis(basis)
    return sorted(results, key=lambda r: ranking_score(r, basis), reverse=True)


def build_leaderboard(
    results: Sequence[ApplicationResult],
    basis: RankingBasis = RankingBasis.TOTAL,
) -> List[RankedResult]:
    """
    Rank results with competition ranking (1, 2, 2, 4).

    Results without any completed assessment carry no score and are left out.
    """
    basis = RankingBasis(basis)
    ordered = rank_results([r for r in results if r.assessments_completed > 0], basis)

    entries: List[RankedResult] = []
    previous_score = None
    rank = 0
    for position, result in enumerate(ordered, start=1):
        score = ranking_score(result, basis)
        if score != previous_score:
            rank = position
            previous_score = score
        entries.append(
            RankedResult(
                rank=rank,
                score=score,
                application_id=result.application_id,
                reference_number=result.reference_number,
                applicant_name=result.applicant_name,
                total_average=result.total_average,
                weighted_average=result.weighted_average,
                assessments_completed=result.assessments_completed,
                high_variance_flag=result.high_variance_flag,
            )
        )
    return entries
