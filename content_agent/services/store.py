"""
Session store contract and the in-memory implementation.

The workflow only relies on this interface; ``SqlSessionStore`` in
``sql_store.py`` is the production implementation.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional
import uuid

from content_agent.constants import SESSION_PATCH_FIELDS
from content_agent.schemas.approval import ApprovalRequest, ApprovalStatus
from content_agent.schemas.session import SessionRecord
from content_agent.services.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    StoreError,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_patch(patch: dict) -> dict:
    unknown = set(patch) - SESSION_PATCH_FIELDS
    if unknown:
        raise StoreError(f"Unknown session fields: {', '.join(sorted(unknown))}")
    return patch


class SessionStore(ABC):

    @abstractmethod
    async def load(self, session_id: str) -> Optional[SessionRecord]:
        """Return the session record, or None if it does not exist."""

    @abstractmethod
    async def save(self, session_id: str, patch: dict) -> None:
        """Create or update a session. ``charts`` in the patch replace the session's charts."""

    @abstractmethod
    async def create_approval_request(self, session_id: str, kind: str, payload: dict) -> ApprovalRequest:
        ...

    @abstractmethod
    async def get_approval_request(self, approval_request_id: str) -> ApprovalRequest:
        """Raises ApprovalNotFoundError for unknown ids."""

    @abstractmethod
    async def resolve_approval_request(
        self,
        approval_request_id: str,
        status: ApprovalStatus,
        response: Optional[str] = None,
    ) -> ApprovalRequest:
        """Move a pending request to APPROVED or REJECTED.

        Raises ApprovalNotFoundError or ApprovalAlreadyResolvedError.
        """

    @abstractmethod
    async def list_approval_requests(self, session_id: str) -> list[ApprovalRequest]:
        ...


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._sessions: dict[str, SessionRecord] = {}
        self._approvals: dict[str, ApprovalRequest] = {}

    async def load(self, session_id: str) -> Optional[SessionRecord]:
        record = self._sessions.get(session_id)
        return record.model_copy(deep=True) if record else None

    async def save(self, session_id: str, patch: dict) -> None:
        validate_patch(patch)
        now = utcnow()
        existing = self._sessions.get(session_id)
        if existing is None:
            data = {"session_id": session_id, "created_at": now}
        else:
            data = existing.model_dump()
        data.update(patch)
        data["updated_at"] = now
        self._sessions[session_id] = SessionRecord.model_validate(data)

    async def create_approval_request(self, session_id: str, kind: str, payload: dict) -> ApprovalRequest:
        request = ApprovalRequest(
            id=str(uuid.uuid4()),
            session_id=session_id,
            kind=kind,
            payload=payload,
            created_at=utcnow(),
        )
        self._approvals[request.id] = request
        return request.model_copy(deep=True)

    async def get_approval_request(self, approval_request_id: str) -> ApprovalRequest:
        request = self._approvals.get(approval_request_id)
        if request is None:
            raise ApprovalNotFoundError(f"Approval request {approval_request_id} not found")
        return request.model_copy(deep=True)

    async def resolve_approval_request(
        self,
        approval_request_id: str,
        status: ApprovalStatus,
        response: Optional[str] = None,
    ) -> ApprovalRequest:
        request = await self.get_approval_request(approval_request_id)
        if request.status != ApprovalStatus.PENDING:
            raise ApprovalAlreadyResolvedError(
                f"Approval request {approval_request_id} is already {request.status.value}"
            )
        resolved = request.model_copy(update={
            "status": ApprovalStatus(status),
            "response": response,
            "resolved_at": utcnow(),
        })
        self._approvals[approval_request_id] = resolved
        return resolved.model_copy(deep=True)

    async def list_approval_requests(self, session_id: str) -> list[ApprovalRequest]:
        requests = [r for r in self._approvals.values() if r.session_id == session_id]
        return [r.model_copy(deep=True) for r in sorted(requests, key=lambda r: r.created_at)]
