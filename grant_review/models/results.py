from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any

from grant_review.models.assessment import CriterionScore
from grant_review.models.enumerations import RankingBasis


class AssessorScore(BaseModel):
    """
    One assessor's contribution to an application result.
    """

    assessor_id: str
    assessor_name: str = ""
    scores: List[CriterionScore] = Field(default_factory=list)
    overall_score: float
    weighted_score: Optional[float] = None
    overall_comment: Optional[str] = None
    submitted_at: Optional[datetime] = None


class CriterionAggregate(BaseModel):
    """
    Cross-assessor statistics for one criterion.
    """

    criterion_id: str
    criterion_name: str
    max_points: int
    weight: Optional[float] = None
    scores: List[float] = Field(default_factory=list)
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    variance: float = Field(default=0.0, description="Population variance (divisor N)")
    normalized_variance_pct: float = Field(
        default=0.0,
        description="variance / max_points^2 * 100",
    )
    high_variance: bool = False


class ApplicationResult(BaseModel):
    """
    Aggregate view of one application, recomputed from completed submissions.
    """

    application_id: str
    reference_number: str
    applicant_name: str
    applicant_organisation: Optional[str] = None
    assessor_scores: List[AssessorScore] = Field(default_factory=list)
    criterion_aggregates: List[CriterionAggregate] = Field(default_factory=list)
    total_average: float = 0.0
    weighted_average: Optional[float] = None
    total_variance: float = 0.0
    high_variance_flag: bool = False
    assessments_completed: int = 0
    assessments_required: int = 0
    warnings: List[str] = Field(
        default_factory=list,
        description="Inconsistent-state conditions found while aggregating",
    )


class ResultsSummary(BaseModel):
    total_applications: int = 0
    fully_assessed: int = 0
    partially_assessed: int = 0
    not_assessed: int = 0
    high_variance_count: int = 0


class MasterResultsResponse(BaseModel):
    """
    Consumer-facing results for a whole call.
    """

    call_id: str
    call_name: str
    results: List[ApplicationResult] = Field(default_factory=list)
    summary: ResultsSummary = Field(default_factory=ResultsSummary)


class RankedResult(BaseModel):
    """
    One leaderboard row.
    """

    rank: int = Field(..., ge=1, description="Competition rank; ties share a rank")
    score: float = Field(..., description="Value used for ordering")
    application_id: str
    reference_number: str
    applicant_name: str
    total_average: float
    weighted_average: Optional[float] = None
    assessments_completed: int
    high_variance_flag: bool = False


class RankingResponse(BaseModel):
    call_id: str
    basis: RankingBasis
    entries: List[RankedResult] = Field(default_factory=list)


class VarianceFlagsResponse(BaseModel):
    call_id: str
    count: int
    results: List[ApplicationResult] = Field(default_factory=list)


class ResultsExport(BaseModel):
    """
    Row-structured result set handed to the spreadsheet/CSV renderer.
    """

    call_id: str
    call_name: str
    detailed: bool = False
    columns: List[str]
    rows: List[Dict[str, Any]] = Field(default_factory=list)
