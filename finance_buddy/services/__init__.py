"""Services package."""

from finance_buddy.services.storage import (
    AuditStorageInterface,
    FileUnavailableError,
    FlatFileLedgerStorage,
    InMemoryAuditStorage,
    LedgerStorageInterface,
    MalformedRecordError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "FileUnavailableError",
    "FlatFileLedgerStorage",
    "InMemoryAuditStorage",
    "LedgerStorageInterface",
    "MalformedRecordError",
    "StorageError",
]
