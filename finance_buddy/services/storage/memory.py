"""
In-Memory Audit Storage

Keeps audit events for the lifetime of the process. Used by the frontend's
activity view and by tests.
"""

from finance_buddy.models.audit import AuditEvent
from finance_buddy.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Append-only list of audit events.

    Events are kept in the order they were appended.
    """

    def __init__(self, max_events: int = 1000):
        self._events: list[AuditEvent] = []
        self._max_events = max_events

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        # Oldest events fall off once the cap is reached
        if len(self._events) > self._max_events:
            del self._events[: len(self._events) - self._max_events]
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        return [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    def __len__(self) -> int:
        return len(self._events)
