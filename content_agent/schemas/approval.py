from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import enum


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalRequest(BaseModel):
    id: str
    session_id: str
    kind: str  # overwrite_content, use_search_results, generate_content
    payload: dict = Field(default_factory=dict)
    status: ApprovalStatus = ApprovalStatus.PENDING
    response: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApproveRequest(BaseModel):
    approval_request_id: str = Field(..., description="ID of the pending approval request")
    approved: bool = Field(..., description="Whether the reviewer approves continuing the workflow")
    response: Optional[str] = Field(None, max_length=2000, description="Optional reviewer comment")
