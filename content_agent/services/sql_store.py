"""SQLAlchemy-backed session store (PostgreSQL in production, SQLite in tests)."""

from typing import Optional
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from content_agent.constants import STATUS_WAITING_APPROVAL
from content_agent.models import ApprovalRequestRecord, Chart, ContentSession
from content_agent.schemas.approval import ApprovalRequest, ApprovalStatus
from content_agent.schemas.session import SessionRecord
from content_agent.services.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    StoreError,
)
from content_agent.services.store import SessionStore, utcnow, validate_patch

logger = logging.getLogger(__name__)


def _to_record(row: ContentSession) -> SessionRecord:
    return SessionRecord(
        session_id=row.id,
        title=row.title,
        prompt=row.prompt,
        content=row.content,
        formatted_content=row.formatted_content,
        status=row.status,
        charts=[
            {
                "id": chart.chart_key,
                "chart_type": chart.chart_type,
                "data": chart.data,
                "config": chart.config or {},
                "position": chart.position,
            }
            for chart in row.charts
        ],
        metadata=row.session_metadata or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_approval(row: ApprovalRequestRecord) -> ApprovalRequest:
    return ApprovalRequest(
        id=row.id,
        session_id=row.session_id,
        kind=row.kind,
        payload=row.payload or {},
        status=ApprovalStatus(row.status),
        response=row.response,
        created_at=row.created_at,
        resolved_at=row.resolved_at,
    )


def _chart_row(chart: dict, index: int) -> Chart:
    return Chart(
        chart_key=str(chart.get("id") or f"chart-{index + 1}"),
        chart_type=chart.get("chart_type") or "bar",
        data=chart.get("data"),
        config=chart.get("config") or {},
        position=chart.get("position", index),
    )


class SqlSessionStore(SessionStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _get_session_row(self, db: AsyncSession, session_id: str) -> Optional[ContentSession]:
        result = await db.execute(
            select(ContentSession)
            .options(selectinload(ContentSession.charts))
            .where(ContentSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def load(self, session_id: str) -> Optional[SessionRecord]:
        try:
            async with self._session_factory() as db:
                row = await self._get_session_row(db, session_id)
                return _to_record(row) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load session {session_id}: {e}") from e

    async def save(self, session_id: str, patch: dict) -> None:
        validate_patch(patch)
        try:
            async with self._session_factory() as db:
                row = await self._get_session_row(db, session_id)
                if row is None:
                    row = ContentSession(id=session_id, charts=[])
                    db.add(row)

                for key, value in patch.items():
                    if key == "charts":
                        row.charts = [_chart_row(chart, i) for i, chart in enumerate(value or [])]
                    elif key == "metadata":
                        row.session_metadata = value
                    else:
                        setattr(row, key, value)
                row.updated_at = utcnow()

                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to save session {session_id}: {e}") from e

        logger.debug(f"Session {session_id}: Saved fields {sorted(patch)}")

    async def create_approval_request(self, session_id: str, kind: str, payload: dict) -> ApprovalRequest:
        try:
            async with self._session_factory() as db:
                if await db.get(ContentSession, session_id) is None:
                    db.add(ContentSession(id=session_id, status=STATUS_WAITING_APPROVAL))
                    await db.flush()

                row = ApprovalRequestRecord(
                    id=str(uuid.uuid4()),
                    session_id=session_id,
                    kind=kind,
                    payload=payload,
                    status=ApprovalStatus.PENDING.value,
                    created_at=utcnow(),
                )
                db.add(row)
                await db.commit()
                return _to_approval(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create approval request for session {session_id}: {e}") from e

    async def get_approval_request(self, approval_request_id: str) -> ApprovalRequest:
        try:
            async with self._session_factory() as db:
                row = await db.get(ApprovalRequestRecord, approval_request_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load approval request {approval_request_id}: {e}") from e

        if row is None:
            raise ApprovalNotFoundError(f"Approval request {approval_request_id} not found")
        return _to_approval(row)

    async def resolve_approval_request(
        self,
        approval_request_id: str,
        status: ApprovalStatus,
        response: Optional[str] = None,
    ) -> ApprovalRequest:
        try:
            async with self._session_factory() as db:
                # Row lock so two reviewers cannot resolve the same request
                result = await db.execute(
                    select(ApprovalRequestRecord)
                    .where(ApprovalRequestRecord.id == approval_request_id)
                    .with_for_update()
                )
                row = result.scalar_one_or_none()
                if row is None:
                    raise ApprovalNotFoundError(f"Approval request {approval_request_id} not found")
                if row.status != ApprovalStatus.PENDING.value:
                    raise ApprovalAlreadyResolvedError(
                        f"Approval request {approval_request_id} is already {row.status}"
                    )

                row.status = ApprovalStatus(status).value
                row.response = response
                row.resolved_at = utcnow()
                await db.commit()
                return _to_approval(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to resolve approval request {approval_request_id}: {e}") from e

    async def list_approval_requests(self, session_id: str) -> list[ApprovalRequest]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(ApprovalRequestRecord)
                    .where(ApprovalRequestRecord.session_id == session_id)
                    .order_by(ApprovalRequestRecord.created_at.asc())
                )
                return [_to_approval(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list approval requests for session {session_id}: {e}") from e
