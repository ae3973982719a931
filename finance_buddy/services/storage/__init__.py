"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The ledger snapshot is a flat text file; audit events are kept in memory.
"""

from finance_buddy.services.storage.interface import (
    AuditStorageInterface,
    FileUnavailableError,
    LedgerStorageInterface,
    MalformedRecordError,
    StorageError,
)
from finance_buddy.services.storage.codec import (
    AccountRecord,
    DecodedLedger,
    SkippedRecord,
    TransactionRecord,
    decode_line,
    decode_lines,
    encode_ledger,
)
from finance_buddy.services.storage.flat_file import FlatFileLedgerStorage
from finance_buddy.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "FileUnavailableError",
    "MalformedRecordError",
    "StorageError",
    # Codec
    "AccountRecord",
    "DecodedLedger",
    "SkippedRecord",
    "TransactionRecord",
    "decode_line",
    "decode_lines",
    "encode_ledger",
    # Implementations
    "FlatFileLedgerStorage",
    "InMemoryAuditStorage",
]
