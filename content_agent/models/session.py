from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
import uuid

from content_agent.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentSession(Base):
    __tablename__ = "content_sessions"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=True)
    prompt = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    formatted_content = Column(JSON, nullable=True)
    status = Column(String(32), nullable=False, default="idle")
    # "metadata" is reserved on declarative classes
    session_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow)

    # Relationships
    charts = relationship("Chart", back_populates="session", cascade="all, delete-orphan", order_by="Chart.position")
    approval_requests = relationship("ApprovalRequestRecord", back_populates="session", cascade="all, delete-orphan")


class Chart(Base):
    __tablename__ = "charts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(64), ForeignKey("content_sessions.id"), nullable=False, index=True)
    chart_key = Column(String(64), nullable=False)  # chart id referenced by the document's chart block
    chart_type = Column(String(32), nullable=False, default="bar")
    data = Column(JSON, nullable=True)
    config = Column(JSON, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    # Relationships
    session = relationship("ContentSession", back_populates="charts")
