"""
Main Orchestrator for Finance Buddy

This module ties the ledger engine, the snapshot storage and the audit
logger together behind one service the frontend talks to.

DESIGN DECISION: The service is the error boundary.
- The engine raises LedgerError subclasses, storage raises StorageError
- The service turns every one of them into a failed OperationResult
- The frontend never sees a domain exception, only outcomes

Every outcome, successful or not, is audited.
"""

from pathlib import Path
from typing import Optional, Union

from finance_buddy.audit import AuditLogger, create_correlation_id
from finance_buddy.config import get_settings
from finance_buddy.ledger import (
    LedgerError,
    LedgerStore,
    NothingToUndoError,
    UndoEngine,
)
from finance_buddy.ledger.store import AmountLike
from finance_buddy.models.ledger import LedgerErrorCode, OperationResult
from finance_buddy.services.storage import (
    FlatFileLedgerStorage,
    InMemoryAuditStorage,
    LedgerStorageInterface,
    StorageError,
)


class LedgerService:
    """
    Collaborator-facing ledger API.

    Operations:
        create_account, list_accounts, deposit, withdraw, transfer,
        show_transactions, undo_last, save, load, shutdown

    Each returns an OperationResult; none raises for a domain failure.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        save_attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ):
        """
        Args:
            store: Ledger to operate on (default: a fresh empty one)
            storage: Default snapshot location for save()/load()
            audit_logger: Where outcomes are audited (default: local log only)
            save_attempts: Write attempts for snapshots opened by path
            retry_wait_seconds: Pause between those attempts
        """
        self._store = store if store is not None else LedgerStore()
        self._undo = UndoEngine(self._store)
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._save_attempts = save_attempts
        self._retry_wait_seconds = retry_wait_seconds

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def create_account(self, name: str, opening_balance: AmountLike) -> OperationResult:
        try:
            account = self._store.create_account(name, opening_balance)
        except LedgerError as e:
            return self._rejected("create", e)

        self._audit_logger.log_account_created(account.id, account.name, account.balance)
        return OperationResult.ok(
            f"Created account {account.name} with ID {account.id}",
            account=account,
        )

    def list_accounts(self) -> OperationResult:
        accounts = self._store.list_accounts()
        message = f"{len(accounts)} accounts" if accounts else "(no accounts yet)"
        return OperationResult.ok(message, accounts=accounts)

    def deposit(self, account_id: int, amount: AmountLike) -> OperationResult:
        try:
            account = self._store.deposit(account_id, amount)
        except LedgerError as e:
            return self._rejected("deposit", e)

        deposited = account.transactions[0].amount
        self._audit_logger.log_deposit(account.id, deposited, account.balance)
        return OperationResult.ok(
            f"Deposited {deposited:.2f} to account {account.id}",
            account=account,
        )

    def withdraw(self, account_id: int, amount: AmountLike) -> OperationResult:
        try:
            account = self._store.withdraw(account_id, amount)
        except LedgerError as e:
            return self._rejected("withdraw", e)

        withdrawn = account.transactions[0].amount
        self._audit_logger.log_withdrawal(account.id, withdrawn, account.balance)
        return OperationResult.ok(
            f"Withdrawn {withdrawn:.2f} from account {account.id}",
            account=account,
        )

    def transfer(self, from_id: int, to_id: int, amount: AmountLike) -> OperationResult:
        try:
            source, destination = self._store.transfer(from_id, to_id, amount)
        except LedgerError as e:
            return self._rejected("transfer", e)

        moved = source.transactions[0].amount
        self._audit_logger.log_transfer(source.id, destination.id, moved)
        return OperationResult.ok(
            f"Transferred {moved:.2f} from {source.id} to {destination.id}",
            account=source,
            counterpart=destination,
        )

    def show_transactions(self, account_id: int) -> OperationResult:
        """History of one account, newest first."""
        account = self._store.lookup(account_id)
        if account is None:
            return OperationResult.failed(
                LedgerErrorCode.ACCOUNT_NOT_FOUND,
                "Account not found.",
            )

        transactions = list(account.transactions)
        if transactions:
            message = f"Transactions for {account.name} (ID {account.id}) [newest first]:"
        else:
            message = "(no transactions)"
        return OperationResult.ok(message, account=account, transactions=transactions)

    def undo_last(self) -> OperationResult:
        """
        Reverse the most recent operation.

        A refused reversal still consumes the journal entry; the result
        carries it so the operator can see what was given up.
        """
        try:
            entry, message = self._undo.undo_last()
        except NothingToUndoError as e:
            return OperationResult.failed(e.code, str(e))
        except LedgerError as e:
            operation = e.undo_entry.operation.value if e.undo_entry else None
            self._audit_logger.log_undo_failed(
                error_code=e.code.value,
                message=str(e),
                operation=operation,
                account_id=e.account_id,
            )
            return OperationResult.failed(e.code, str(e), undo_entry=e.undo_entry)

        self._audit_logger.log_undo_applied(entry.operation.value, entry.account_id, message)
        return OperationResult.ok(
            message,
            undo_entry=entry,
            account=self._store.lookup(entry.account_id),
        )

    # ========================================================================
    # PERSISTENCE
    # ========================================================================

    def save(self, path: Union[str, Path, None] = None) -> OperationResult:
        """Write the whole ledger (without undo history) to the snapshot."""
        storage = self._storage_for(path)
        if storage is None:
            return self._no_storage()

        try:
            written = storage.save(self._store.list_accounts())
        except StorageError as e:
            self._audit_logger.log_persistence_failed("save", storage.location, str(e))
            return OperationResult.failed(LedgerErrorCode.FILE_UNAVAILABLE, str(e))
        except Exception as e:
            return self._storage_crashed("save", storage, e)

        self._audit_logger.log_saved(storage.location, written)
        return OperationResult.ok(
            f"Data saved to {storage.location}",
            records_written=written,
        )

    def load(self, path: Union[str, Path, None] = None) -> OperationResult:
        """
        Replace the in-memory ledger with the snapshot.

        A missing file gives an empty ledger. A file that exists but cannot
        be read leaves memory untouched.

        Unlike save, a successful load also empties the undo journal, since
        its entries refer to the ledger that was just replaced.
        """
        storage = self._storage_for(path)
        if storage is None:
            return self._no_storage()

        try:
            decoded = storage.load()
        except StorageError as e:
            self._audit_logger.log_persistence_failed("load", storage.location, str(e))
            return OperationResult.failed(LedgerErrorCode.FILE_UNAVAILABLE, str(e))
        except Exception as e:
            return self._storage_crashed("load", storage, e)

        self._store.replace_all(
            decoded.accounts,
            decoded.next_account_id,
            decoded.next_transaction_id,
        )

        for skipped in decoded.skipped:
            self._audit_logger.log_record_skipped(
                storage.location,
                skipped.line_number,
                skipped.reason,
            )
        self._audit_logger.log_loaded(
            storage.location,
            len(decoded.accounts),
            len(decoded.skipped),
        )

        if not decoded.source_found:
            message = f"No data file at {storage.location}; starting with an empty ledger"
        else:
            message = f"Data loaded from {storage.location}: {len(decoded.accounts)} accounts"
            if decoded.skipped:
                message += f", {len(decoded.skipped)} malformed lines skipped"

        return OperationResult.ok(
            message,
            accounts=self._store.list_accounts(),
            records_skipped=len(decoded.skipped),
        )

    def shutdown(self, save: bool = True) -> OperationResult:
        """
        End the session: optionally save, then release the ledger.

        If the save fails the ledger is kept so the operator can retry.
        """
        if save:
            result = self.save()
            if not result.success:
                return result
        else:
            result = OperationResult.ok("Exiting without saving.")

        self._store.clear()
        return result

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _storage_for(
        self,
        path: Union[str, Path, None],
    ) -> Optional[LedgerStorageInterface]:
        if path is None:
            return self._storage
        return FlatFileLedgerStorage(
            path,
            attempts=self._save_attempts,
            retry_wait_seconds=self._retry_wait_seconds,
        )

    def _no_storage(self) -> OperationResult:
        return OperationResult.failed(
            LedgerErrorCode.FILE_UNAVAILABLE,
            "No data file configured",
        )

    def _storage_crashed(
        self,
        action: str,
        storage: LedgerStorageInterface,
        error: Exception,
    ) -> OperationResult:
        # A storage backend failing outside StorageError; memory is untouched
        self._audit_logger.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details={"action": action, "path": storage.location},
        )
        return OperationResult.failed(
            LedgerErrorCode.FILE_UNAVAILABLE,
            f"Unexpected error during {action}: {error}",
        )

    def _rejected(self, operation: str, error: LedgerError) -> OperationResult:
        self._audit_logger.log_rejected(
            operation=operation,
            error_code=error.code.value,
            message=str(error),
            account_id=error.account_id,
        )
        return OperationResult.failed(error.code, str(error))


def create_app_components(
    data_file: Union[str, Path, None] = None,
) -> LedgerService:
    """
    Factory function to create the service the frontend uses.

    Args:
        data_file: Snapshot path; defaults to the configured data file.

    Returns:
        A LedgerService with flat-file storage and in-memory audit storage
    """
    settings = get_settings()
    ledger_settings = settings.ledger

    storage = FlatFileLedgerStorage(
        data_file or ledger_settings.data_file,
        attempts=ledger_settings.save_attempts,
        retry_wait_seconds=ledger_settings.save_retry_wait_seconds,
    )
    audit_logger = AuditLogger(
        InMemoryAuditStorage(),
        correlation_id=create_correlation_id(),
    )

    return LedgerService(
        storage=storage,
        audit_logger=audit_logger,
        save_attempts=ledger_settings.save_attempts,
        retry_wait_seconds=ledger_settings.save_retry_wait_seconds,
    )
