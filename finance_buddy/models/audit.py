"""
Audit Models for Finance Buddy

Every ledger mutation, undo, save and load is recorded as an audit event.
This provides:
1. A readable history of what the operator did
2. Debugging information when a load skips records or a save fails
3. The activity view in the frontend

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
The audit trail is separate from the undo journal and is never used to
reverse operations.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


# Longer descriptions are shortened; full text stays in details/error_message
DESCRIPTION_MAX_LENGTH = 500


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    ACCOUNT_CREATED = "account_created"
    DEPOSIT_RECORDED = "deposit_recorded"
    WITHDRAWAL_RECORDED = "withdrawal_recorded"
    TRANSFER_RECORDED = "transfer_recorded"
    OPERATION_REJECTED = "operation_rejected"

    # Undo
    UNDO_APPLIED = "undo_applied"
    UNDO_FAILED = "undo_failed"

    # Persistence
    LEDGER_SAVED = "ledger_saved"
    LEDGER_LOADED = "ledger_loaded"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"
    RECORD_SKIPPED = "record_skipped"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'ledger_file')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Account ID this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one frontend session)"
    )

    description: str = Field(
        ...,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator('description', mode='before')
    @classmethod
    def shorten_description(cls, v: Any) -> Any:
        """Names, amounts and paths come from the operator and can be any length."""
        if isinstance(v, str) and len(v) > DESCRIPTION_MAX_LENGTH:
            return v[:DESCRIPTION_MAX_LENGTH - 3] + "..."
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account_id, name, balance)
        event = AuditEventBuilder.undo_applied(operation, account_id, message)
    """

    @staticmethod
    def account_created(
        account_id: int,
        name: str,
        opening_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Created account {name} with ID {account_id}",
            details={
                "name": name,
                "opening_balance": _money(opening_balance),
            },
        )

    @staticmethod
    def deposit_recorded(
        account_id: int,
        amount: Decimal,
        balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_RECORDED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Deposited {_money(amount)} to account {account_id}",
            details={
                "amount": _money(amount),
                "balance": _money(balance),
            },
        )

    @staticmethod
    def withdrawal_recorded(
        account_id: int,
        amount: Decimal,
        balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_RECORDED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Withdrawn {_money(amount)} from account {account_id}",
            details={
                "amount": _money(amount),
                "balance": _money(balance),
            },
        )

    @staticmethod
    def transfer_recorded(
        from_id: int,
        to_id: int,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_RECORDED,
            entity_type="account",
            entity_id=from_id,
            correlation_id=correlation_id,
            description=f"Transferred {_money(amount)} from {from_id} to {to_id}",
            details={
                "from_account_id": from_id,
                "to_account_id": to_id,
                "amount": _money(amount),
            },
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error_code: str,
        message: str,
        account_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account" if account_id is not None else None,
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"{operation.capitalize()} rejected: {message}",
            details={
                "operation": operation,
            },
            error_code=error_code,
            error_message=message,
        )

    @staticmethod
    def undo_applied(
        operation: str,
        account_id: int,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNDO_APPLIED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def undo_failed(
        error_code: str,
        message: str,
        operation: Optional[str] = None,
        account_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNDO_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account" if account_id is not None else None,
            entity_id=account_id,
            correlation_id=correlation_id,
            description=message,
            details={
                "operation": operation,
            },
            error_code=error_code,
            error_message=message,
        )

    @staticmethod
    def ledger_saved(
        path: str,
        records_written: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            entity_type="ledger_file",
            correlation_id=correlation_id,
            description=f"Data saved to {path}",
            details={
                "path": path,
                "records_written": records_written,
            },
        )

    @staticmethod
    def ledger_loaded(
        path: str,
        account_count: int,
        records_skipped: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.WARNING if records_skipped else AuditSeverity.INFO,
            entity_type="ledger_file",
            correlation_id=correlation_id,
            description=f"Loaded {account_count} accounts from {path}",
            details={
                "path": path,
                "account_count": account_count,
                "records_skipped": records_skipped,
            },
        )

    @staticmethod
    def persistence_failed(
        action: str,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.SAVE_FAILED
            if action == "save"
            else AuditEventType.LOAD_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            entity_type="ledger_file",
            correlation_id=correlation_id,
            description=f"Could not {action} {path}",
            details={
                "path": path,
            },
            error_code="file_unavailable",
            error_message=error_message,
        )

    @staticmethod
    def record_skipped(
        path: str,
        line_number: int,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger_file",
            correlation_id=correlation_id,
            description=f"Skipped malformed line {line_number} in {path}",
            details={
                "path": path,
                "line_number": line_number,
                "reason": reason,
            },
            error_code="malformed_record",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
