from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ppa_audit.core.errors import SessionNotFound
from ppa_audit.services.billing.billing_models import BillingLineItem
from ppa_audit.services.extraction.schedule_models import ContractSchedule


class AuditSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    created_at: datetime
    schedule: Optional[ContractSchedule] = None
    contract_filename: Optional[str] = None
    billing: List[BillingLineItem] = Field(default_factory=list)
    billing_source: Optional[str] = None
    selected_year: Optional[int] = None


class AuditSessionRepository:
    """
    Process-local session store. Sessions are replaced whole on every
    update and disappear with the process.
    """

    def __init__(self):
        self._sessions: Dict[str, AuditSession] = {}
        self._lock = threading.Lock()

    def create(self) -> AuditSession:
        session = AuditSession(
            session_id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> AuditSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def update(self, session_id: str, **changes) -> AuditSession:
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise SessionNotFound(session_id)
            updated = current.model_copy(update=changes)
            self._sessions[session_id] = updated
        return updated

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)


_store: AuditSessionRepository | None = None


def get_session_repo() -> AuditSessionRepository:
    global _store
    if _store is None:
        _store = AuditSessionRepository()
    return _store
