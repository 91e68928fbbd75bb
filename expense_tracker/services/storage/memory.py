"""
In-Memory Audit Storage

Keeps the most recent audit events for the "recent activity" view.
Events are not persisted; the structured log is the durable record.
"""

from collections import deque

from expense_tracker.models.audit import AuditEvent
from expense_tracker.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded, append-only audit history. Oldest events fall off first."""

    def __init__(self, max_events: int = 100):
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        newest_first = list(reversed(self._events))
        return newest_first[:limit]

    def __len__(self) -> int:
        return len(self._events)
