"""
Data Models Package

This package contains all Pydantic models used in Finance Buddy.
All data held by the ledger must conform to these schemas.
"""

from finance_buddy.models.ledger import (
    Account,
    LedgerErrorCode,
    OperationResult,
    Transaction,
    TransactionKind,
    UndoEntry,
    UndoOperation,
)
from finance_buddy.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Account",
    "LedgerErrorCode",
    "OperationResult",
    "Transaction",
    "TransactionKind",
    "UndoEntry",
    "UndoOperation",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
