"""
Abstract Storage Interface

DESIGN DECISION: The ledger engine never touches files directly. Storage
goes through these interfaces so that:
1. The flat-file snapshot can be swapped for another backend later
2. Tests can use in-memory storage
3. The engine stays decoupled from persistence details

The interface is intentionally simple: a ledger snapshot is written and
read as a whole, and audit events are only ever appended.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

from finance_buddy.models.audit import AuditEvent
from finance_buddy.models.ledger import Account

if TYPE_CHECKING:
    from finance_buddy.services.storage.codec import DecodedLedger


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Undo history is never part of a snapshot.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the snapshot lives."""
        pass

    @abstractmethod
    def save(self, accounts: Iterable[Account]) -> int:
        """
        Write a full snapshot of the given accounts.

        Args:
            accounts: Every account in the ledger, with its history

        Returns:
            Number of records written

        Raises:
            FileUnavailableError: If the snapshot cannot be written
        """
        pass

    @abstractmethod
    def load(self) -> "DecodedLedger":
        """
        Read the snapshot back.

        A missing snapshot is not an error: it yields an empty ledger
        with ``source_found=False``. Malformed records are skipped and
        reported in ``skipped``.

        Raises:
            FileUnavailableError: If the snapshot exists but cannot be read
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class FileUnavailableError(StorageError):
    """Snapshot file could not be read or written."""
    pass


class MalformedRecordError(StorageError):
    """A snapshot line does not match any record schema."""
    pass
