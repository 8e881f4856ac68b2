from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from grant_review.models.enumerations import CallStatus


class AssessorWorkload(BaseModel):
    """
    Per-assessor counts as read from the store.
    """

    assessor_id: str
    assessor_name: str = ""
    assessor_email: Optional[str] = None
    assigned_count: int = Field(default=0, ge=0)
    completed_count: int = Field(default=0, ge=0)
    last_activity: Optional[datetime] = None


class AssessorProgress(AssessorWorkload):
    outstanding_count: int = 0


class CallProgress(BaseModel):
    """
    Completion summary for a whole call.
    """

    call_id: str
    call_name: str
    status: CallStatus
    total_applications: int = 0
    total_assignments: int = 0
    completed_assessments: int = 0
    outstanding_assessments: int = 0
    completion_percentage: float = 0.0
    assessor_progress: List[AssessorProgress] = Field(default_factory=list)
