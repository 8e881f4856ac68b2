from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional, List

from grant_review.models.call import Criterion
from grant_review.models.enumerations import AssessmentStatus


class CriterionScore(BaseModel):
    """
    One criterion score submitted by one assessor.

    Range and comment rules are checked by ScoreValidator so that every
    problem is reported at once, not by field constraints here.
    """

    criterion_id: str = Field(..., min_length=1)
    score: float = Field(..., description="Points awarded, expected within [0, max_points]")
    comment: Optional[str] = Field(default=None, description="Assessor comment for this criterion")


class AssessorSubmission(BaseModel):
    """
    One assessor's submission against one assignment.
    """

    assessment_id: str
    assignment_id: str
    application_id: str
    assessor_id: str
    assessor_name: str = Field(default="", description="Resolved display name of the assessor")
    scores: List[CriterionScore] = Field(default_factory=list)
    overall_score: Optional[float] = Field(
        default=None,
        description="Stored total; recomputed from scores when absent",
    )
    weighted_score: Optional[float] = Field(
        default=None,
        description="Stored weighted total; recomputed from scores when absent",
    )
    overall_comment: Optional[str] = None
    coi_confirmed: bool = False
    coi_details: Optional[str] = None
    revision_reason: Optional[str] = Field(default=None, description="Set when a coordinator returns the assessment")
    status: AssessmentStatus = AssessmentStatus.DRAFT
    submitted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_editable(self) -> bool:
        return self.status in (AssessmentStatus.DRAFT, AssessmentStatus.RETURNED)

    class Config:
        from_attributes = True


class AssessmentDraftRequest(BaseModel):
    """
    Body for saving a draft assessment.
    """

    assessor_id: str = Field(..., min_length=1)
    scores: List[CriterionScore] = Field(default_factory=list)
    overall_comment: Optional[str] = None
    coi_confirmed: bool = False
    coi_details: Optional[str] = None


class AssessmentSubmitRequest(AssessmentDraftRequest):
    """
    Body for submitting an assessment; conflict-of-interest confirmation required.
    """

    coi_confirmed: bool = Field(..., description="Must be true to submit")


class ReturnForRevisionRequest(BaseModel):
    """
    Coordinator request to reopen a submitted assessment.
    """

    reason: Optional[str] = Field(default=None, max_length=2000)


class ScoreCheckRequest(BaseModel):
    """
    Stateless score check against a criteria set.
    """

    scores: List[CriterionScore]
    criteria: List[Criterion]


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class AssessorTotal(BaseModel):
    total: float
    weighted: Optional[float] = None


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")
