from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Optional, TypeVar

from .legend import visible_total
from .session import SessionState

T = TypeVar("T")


@dataclass
class SessionRecord:
    session_id: str
    session: SessionState
    palette_id: Optional[str] = None
    lock: Lock = field(default_factory=Lock, repr=False)
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def to_dict(self) -> dict:
        session = self.session
        pattern = session.pattern
        return {
            "session_id": self.session_id,
            "palette_id": self.palette_id,
            "width": pattern.width if pattern else 0,
            "height": pattern.height if pattern else 0,
            "counts": dict(pattern.counts) if pattern else {},
            "hidden_ids": sorted(session.hidden_ids),
            "visible_total": visible_total(pattern, session.hidden_ids) if pattern else 0,
            "can_undo": session.can_undo,
            "can_redo": session.can_redo,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SessionStore:
    """Open editing sessions keyed by id.

    Each session is single-writer: :meth:`run` serialises operations on one
    session while different sessions proceed independently.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = Lock()

    def create(self, session_id: str, session: SessionState, palette_id: Optional[str] = None) -> SessionRecord:
        record = SessionRecord(session_id=session_id, session=session, palette_id=palette_id)
        with self._lock:
            self._sessions[session_id] = record
        return record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._sessions.get(session_id)

    def run(self, session_id: str, operation: Callable[[SessionState], T]) -> T:
        """Apply ``operation`` to a session under its lock. Unknown ids raise ``KeyError``."""
        record = self.get(session_id)
        if record is None:
            raise KeyError(session_id)
        with record.lock:
            result = operation(record.session)
            record.updated_at = time.time()
            return result

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list(self) -> List[SessionRecord]:
        with self._lock:
            records = list(self._sessions.values())
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records


store = SessionStore()
