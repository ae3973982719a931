"""
Undo Engine

A single last-in-first-out journal shared by all accounts, and the logic
that reverses its top entry.

Undo is one step at a time with no redo. The popped entry is discarded
whether or not the reversal succeeds, so a refused undo cannot be retried.
Reversals append UNDO_* records but never push journal entries themselves.
"""

from typing import TYPE_CHECKING, Callable, Optional

import structlog

from finance_buddy.ledger.errors import (
    LedgerError,
    NothingToUndoError,
    UndoNotReversibleError,
)
from finance_buddy.models.ledger import (
    TransactionKind,
    UndoEntry,
    UndoOperation,
)

if TYPE_CHECKING:
    from finance_buddy.ledger.store import LedgerStore


logger = structlog.get_logger(__name__)


class UndoJournal:
    """Last-in-first-out sequence of undo entries."""

    def __init__(self):
        self._entries: list[UndoEntry] = []

    def push(self, entry: UndoEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> UndoEntry:
        """Remove and return the newest entry."""
        if not self._entries:
            raise NothingToUndoError()
        return self._entries.pop()

    def peek(self) -> Optional[UndoEntry]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


class UndoEngine:
    """
    Reverses the most recent journal entry against a ledger store.

    Reversal rules:
        DEPOSIT   - only if the account still holds at least the deposited amount
        WITHDRAW  - always; adding money back cannot overdraw anything
        TRANSFER  - only if the destination still holds the transferred amount;
                    both sides are reversed or neither is
        CREATE    - removes the account and its entire history, regardless of
                    activity since creation
    """

    def __init__(self, store: "LedgerStore"):
        self._store = store
        self._handlers: dict[UndoOperation, Callable[[UndoEntry], str]] = {
            UndoOperation.DEPOSIT: self._undo_deposit,
            UndoOperation.WITHDRAW: self._undo_withdraw,
            UndoOperation.TRANSFER: self._undo_transfer,
            UndoOperation.CREATE: self._undo_create,
        }

    def undo_last(self) -> tuple[UndoEntry, str]:
        """
        Pop the newest entry and try to reverse it.

        Returns:
            (entry, message) describing the reversal

        Raises:
            NothingToUndoError: the journal is empty
            UndoNotReversibleError / AccountNotFoundError: the entry was
                popped but could not be applied; the error carries it
                as ``undo_entry``
        """
        entry = self._store.journal.pop()
        try:
            message = self._handlers[entry.operation](entry)
        except LedgerError as e:
            e.undo_entry = entry
            logger.info(
                "undo_refused",
                operation=entry.operation.value,
                account_id=entry.account_id,
                reason=str(e),
            )
            raise
        return entry, message

    def _undo_deposit(self, entry: UndoEntry) -> str:
        account = self._store.get_account(entry.account_id)
        if account.balance < entry.amount:
            raise UndoNotReversibleError(
                f"Cannot undo deposit: insufficient balance in account {entry.account_id}",
                account_id=entry.account_id,
            )
        self._store.adjust(account, -entry.amount, TransactionKind.UNDO_DEPOSIT)
        return f"Undid deposit of {entry.amount:.2f} from account {entry.account_id}"

    def _undo_withdraw(self, entry: UndoEntry) -> str:
        account = self._store.get_account(entry.account_id)
        self._store.adjust(account, entry.amount, TransactionKind.UNDO_WITHDRAW)
        return f"Undid withdraw of {entry.amount:.2f} to account {entry.account_id}"

    def _undo_transfer(self, entry: UndoEntry) -> str:
        source = self._store.get_account(entry.account_id)
        destination = self._store.get_account(entry.counterpart_account_id)
        if destination.balance < entry.amount:
            raise UndoNotReversibleError(
                "Cannot undo transfer automatically: "
                f"account {destination.id} no longer holds {entry.amount:.2f}",
                account_id=destination.id,
            )
        self._store.move_back(source, destination, entry.amount, TransactionKind.UNDO_TRANSFER)
        return (
            f"Undid transfer of {entry.amount:.2f} "
            f"from {entry.account_id} to {entry.counterpart_account_id}"
        )

    def _undo_create(self, entry: UndoEntry) -> str:
        self._store.remove_account(entry.account_id)
        return f"Undid creation of account {entry.account_id}"
