from sqlalchemy import Column, String, Text, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from content_agent.db.session import Base
from content_agent.models.session import _utcnow


class ApprovalRequestRecord(Base):
    """Human-in-the-loop approval request for a paused workflow."""
    __tablename__ = "approval_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(64), ForeignKey("content_sessions.id"), nullable=False, index=True)
    kind = Column(String(64), nullable=False)       # overwrite_content, use_search_results, generate_content
    payload = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False, default="pending")  # pending, approved, rejected
    response = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    session = relationship("ContentSession", back_populates="approval_requests")
