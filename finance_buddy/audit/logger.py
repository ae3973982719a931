"""
Audit Logger

DESIGN DECISION: Every ledger mutation, undo, save and load is logged.
This provides:
1. A traceable history of what the operator did
2. Debugging capability when a load skips lines or a save fails
3. The recent-activity view in the frontend

The audit logger:
- Never raises: a failing audit store must not break a ledger operation
- Supports correlation IDs to tie events to one frontend session
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_buddy.models.audit import AuditEvent, AuditEventBuilder
from finance_buddy.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog.

    Runs once at import with INFO; the frontend calls it again with the
    configured level.
    """
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            correlation_id: Attached to every event that does not carry one.
        """
        self._storage = storage
        self._correlation_id = correlation_id
        self._logger = structlog.get_logger("finance_buddy.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        if event.correlation_id is None and self._correlation_id is not None:
            event.correlation_id = self._correlation_id

        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_account_created(self, account_id: int, name: str, opening_balance: Decimal) -> None:
        self.log(AuditEventBuilder.account_created(
            account_id=account_id,
            name=name,
            opening_balance=opening_balance,
        ))

    def log_deposit(self, account_id: int, amount: Decimal, balance: Decimal) -> None:
        self.log(AuditEventBuilder.deposit_recorded(
            account_id=account_id,
            amount=amount,
            balance=balance,
        ))

    def log_withdrawal(self, account_id: int, amount: Decimal, balance: Decimal) -> None:
        self.log(AuditEventBuilder.withdrawal_recorded(
            account_id=account_id,
            amount=amount,
            balance=balance,
        ))

    def log_transfer(self, from_id: int, to_id: int, amount: Decimal) -> None:
        self.log(AuditEventBuilder.transfer_recorded(
            from_id=from_id,
            to_id=to_id,
            amount=amount,
        ))

    def log_rejected(
        self,
        operation: str,
        error_code: str,
        message: str,
        account_id: Optional[int] = None,
    ) -> None:
        """Log a refused operation (missing account, insufficient funds, ...)."""
        self.log(AuditEventBuilder.operation_rejected(
            operation=operation,
            error_code=error_code,
            message=message,
            account_id=account_id,
        ))

    def log_undo_applied(self, operation: str, account_id: int, message: str) -> None:
        self.log(AuditEventBuilder.undo_applied(
            operation=operation,
            account_id=account_id,
            message=message,
        ))

    def log_undo_failed(
        self,
        error_code: str,
        message: str,
        operation: Optional[str] = None,
        account_id: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.undo_failed(
            error_code=error_code,
            message=message,
            operation=operation,
            account_id=account_id,
        ))

    def log_saved(self, path: str, records_written: int) -> None:
        self.log(AuditEventBuilder.ledger_saved(
            path=path,
            records_written=records_written,
        ))

    def log_loaded(self, path: str, account_count: int, records_skipped: int) -> None:
        self.log(AuditEventBuilder.ledger_loaded(
            path=path,
            account_count=account_count,
            records_skipped=records_skipped,
        ))

    def log_record_skipped(self, path: str, line_number: int, reason: str) -> None:
        self.log(AuditEventBuilder.record_skipped(
            path=path,
            line_number=line_number,
            reason=reason,
        ))

    def log_persistence_failed(self, action: str, path: str, error_message: str) -> None:
        """Log a save or load that could not reach the file."""
        self.log(AuditEventBuilder.persistence_failed(
            action=action,
            path=path,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this once per frontend session and pass it to the AuditLogger.
    """
    return uuid4()
