from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class SessionRecord(BaseModel):
    """A content session as persisted by the session store."""
    session_id: str
    title: Optional[str] = None
    prompt: Optional[str] = None
    content: Optional[str] = None
    formatted_content: Optional[dict] = None
    status: str = "idle"
    charts: List[dict] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
