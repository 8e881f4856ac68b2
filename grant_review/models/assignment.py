from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional, List

from grant_review.models.enumerations import AssignmentStatus, DistributionStrategy


class Assignment(BaseModel):
    """
    Pairing of one application and one assessor.
    """

    assignment_id: str
    application_id: str
    assessor_id: str
    assigned_by: Optional[str] = None
    assigned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    due_at: Optional[datetime] = None
    status: AssignmentStatus = AssignmentStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssignmentCreate(BaseModel):
    """
    Model for creating a single manual assignment.
    """

    application_id: str = Field(..., min_length=1)
    assessor_id: str = Field(..., min_length=1)
    assigned_by: Optional[str] = Field(default=None, description="Coordinator creating the assignment")
    due_at: Optional[datetime] = None


class DistributionRequest(BaseModel):
    """
    Model for distributing a call's applications across its assessor pool.
    """

    strategy: Optional[DistributionStrategy] = Field(
        default=None,
        description="round_robin, random or balanced; defaults to the configured strategy",
    )
    assessors_per_application: Optional[int] = Field(
        default=None,
        ge=1,
        description="Target assessors per application; defaults to the call's requirement",
    )
    application_ids: Optional[List[str]] = Field(
        default=None,
        description="Restrict to these applications; defaults to every submitted application",
    )
    assigned_by: Optional[str] = None
    due_at: Optional[datetime] = None


class DistributionResponse(BaseModel):
    """
    Result of a distribution run.
    """

    call_id: str
    strategy: DistributionStrategy
    assessors_per_application: int
    created: List[Assignment]
    count: int
    skipped_applications: List[str] = Field(
        default_factory=list,
        description="Applications that already had their full target of assignments",
    )


class AssignmentStatusCounts(BaseModel):
    """
    Assignment counts by status. Overdue assignments also count under their status.
    """

    total_assignments: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    returned: int = 0
    overdue: int = Field(default=0, description="Past due_at and not completed")


class AssessorAssignmentSummary(AssignmentStatusCounts):
    assessor_id: str
    assessor_name: str = ""
    assessor_email: Optional[str] = None


class AssignmentSummaryResponse(BaseModel):
    """
    Assignment status summary for a call, overall and per assessor.
    """

    call_id: str
    as_of: datetime = Field(..., description="Instant overdue was evaluated against")
    totals: AssignmentStatusCounts
    by_assessor: List[AssessorAssignmentSummary] = Field(default_factory=list)
