from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List, Dict

from grant_review.models.enumerations import CallStatus, ApplicationStatus


class Criterion(BaseModel):
    """
    One scored dimension of a funding call.
    """

    criterion_id: str = Field(..., min_length=1, description="Stable criterion identifier")
    name: str = Field(..., min_length=1, max_length=255, description="Criterion display name")
    description: str = Field(default="", description="Guidance shown to assessors")
    max_points: int = Field(..., gt=0, description="Maximum points an assessor may award")
    weight: Optional[float] = Field(
        default=None,
        ge=0,
        description="Relative weight; absent or 0 means unweighted",
    )
    comments_required: bool = Field(default=False, description="Assessor must leave a non-blank comment")
    order: int = Field(default=0, description="Display order within the call")

    @property
    def is_weighted(self) -> bool:
        return self.weight is not None and self.weight > 0

    @property
    def effective_weight(self) -> float:
        # Absent and explicit-zero weights both fall back to 1. A criterion
        # weighted at 0 is therefore NOT excluded from weighted averages;
        # whether that is intended is still open with the call owners.
        return self.weight if self.weight else 1.0


class FundingCall(BaseModel):
    """
    A time-boxed funding round with its criteria and review configuration.
    """

    call_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="")
    status: CallStatus = Field(default=CallStatus.OPEN)
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None
    criteria: List[Criterion] = Field(default_factory=list)
    required_assessors_per_application: int = Field(default=2, ge=1)
    variance_threshold: Optional[float] = Field(
        default=None,
        ge=0,
        description="High-variance threshold as a percentage of max_points squared",
    )
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def validate_unique_criteria(self):
        """Criterion ids must be unique within a call."""
        ids = [c.criterion_id for c in self.criteria]
        if len(ids) != len(set(ids)):
            raise ValueError("criterion_id values must be unique within a call")
        return self

    def criteria_by_id(self) -> Dict[str, Criterion]:
        return {c.criterion_id: c for c in self.criteria}

    def ordered_criteria(self) -> List[Criterion]:
        return sorted(self.criteria, key=lambda c: c.order)


class ApplicationSummary(BaseModel):
    """
    Lightweight application row returned by call listings.
    """

    application_id: str
    reference_number: str
    applicant_name: str
    status: ApplicationStatus = ApplicationStatus.SUBMITTED


class Application(ApplicationSummary):
    """
    Full application record as needed by the results engine.
    """

    call_id: str
    applicant_organisation: Optional[str] = None
    submitted_at: Optional[datetime] = None

    class Config:
        from_attributes = True
