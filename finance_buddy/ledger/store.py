"""
Ledger Store

Owns every account, its transaction history and the two ID counters.
It is the only module that mutates balances.

DESIGN DECISION: Every balance change is paired with exactly one
transaction record, and every successful public mutation pushes exactly
one undo entry. All checks run before anything is touched, so a failed
operation leaves the store exactly as it was.

Not thread-safe. One store belongs to one interactive session.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional, Union

import structlog
from pydantic import ValidationError

from finance_buddy.ledger.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidNameError,
    SameAccountError,
)
from finance_buddy.ledger.undo import UndoJournal
from finance_buddy.models.ledger import (
    Account,
    Transaction,
    TransactionKind,
    UndoEntry,
    UndoOperation,
)


logger = structlog.get_logger(__name__)

AmountLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_amount(value: AmountLike) -> Decimal:
    """
    Normalize a user-supplied amount.

    Floats go through str() so 0.1 stays 0.1. Negative, NaN and
    infinite values are rejected, and so is anything finer than a cent,
    since the data file keeps two decimal places.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Not a valid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"Not a valid amount: {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount cannot be negative: {amount}")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation:
        raise InvalidAmountError(f"Amount is too large: {amount}")
    if cents != amount:
        raise InvalidAmountError(f"Amount cannot have more than 2 decimal places: {amount}")
    return cents


class LedgerStore:
    """
    In-memory ledger: accounts keyed by ID, each with a newest-first history.

    Lifecycle:
        store = LedgerStore()          # empty ledger, counters at 1
        store.replace_all(...)         # full replace after a load
        store.clear()                  # back to the empty state

    Example:
        store = LedgerStore()
        acc = store.create_account("Alice", Decimal("100"))
        store.deposit(acc.id, Decimal("50"))
        store.withdraw(acc.id, Decimal("20"))
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        journal: Optional[UndoJournal] = None,
    ):
        """
        Create an empty ledger.

        Args:
            clock: Source of transaction timestamps (default: datetime.now)
            journal: Undo journal to record into (default: a fresh one)
        """
        self._clock = clock or datetime.now
        self._accounts: dict[int, Account] = {}
        self._next_account_id = 1
        self._next_transaction_id = 1
        self.journal = journal if journal is not None else UndoJournal()

    # ========================================================================
    # READ ACCESS
    # ========================================================================

    @property
    def next_account_id(self) -> int:
        return self._next_account_id

    @property
    def next_transaction_id(self) -> int:
        return self._next_transaction_id

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: int) -> bool:
        return account_id in self._accounts

    def lookup(self, account_id: int) -> Optional[Account]:
        """Find an account by ID; None if it does not exist."""
        return self._accounts.get(account_id)

    def get_account(self, account_id: int) -> Account:
        """Find an account by ID or raise AccountNotFoundError."""
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def list_accounts(self) -> list[Account]:
        """All accounts in ID order."""
        return [self._accounts[key] for key in sorted(self._accounts)]

    # ========================================================================
    # PUBLIC OPERATIONS (each pushes one undo entry on success)
    # ========================================================================

    def create_account(self, name: str, opening_balance: AmountLike) -> Account:
        """
        Open a new account.

        The opening balance is recorded as a DEPOSIT so the history
        explains the balance from the first entry.
        """
        amount = to_amount(opening_balance)
        try:
            account = Account(id=self._next_account_id, name=name, balance=amount)
        except ValidationError as e:
            raise InvalidNameError(f"Invalid account name {name!r}: {e.errors()[0]['msg']}")

        self._next_account_id += 1
        self._accounts[account.id] = account
        self._append(account, TransactionKind.DEPOSIT, amount)
        self.journal.push(UndoEntry(
            operation=UndoOperation.CREATE,
            account_id=account.id,
            amount=amount,
        ))

        logger.debug("account_created", account_id=account.id, balance=str(amount))
        return account

    def deposit(self, account_id: int, amount: AmountLike) -> Account:
        amount = to_amount(amount)
        account = self.get_account(account_id)

        account.balance += amount
        self._append(account, TransactionKind.DEPOSIT, amount)
        self.journal.push(UndoEntry(
            operation=UndoOperation.DEPOSIT,
            account_id=account_id,
            amount=amount,
        ))
        return account

    def withdraw(self, account_id: int, amount: AmountLike) -> Account:
        """
        Take money out of an account.

        Withdrawing the entire balance is allowed; only amounts strictly
        greater than the balance are refused.
        """
        amount = to_amount(amount)
        account = self.get_account(account_id)
        if account.balance < amount:
            raise InsufficientFundsError(account_id, account.balance, amount)

        account.balance -= amount
        self._append(account, TransactionKind.WITHDRAW, amount)
        self.journal.push(UndoEntry(
            operation=UndoOperation.WITHDRAW,
            account_id=account_id,
            amount=amount,
        ))
        return account

    def transfer(
        self,
        from_id: int,
        to_id: int,
        amount: AmountLike,
    ) -> tuple[Account, Account]:
        """
        Move money between two accounts.

        Each side gets its own TRANSFER record naming the other account.
        The self-transfer check runs before either account is looked up.

        Returns:
            (source, destination)
        """
        if from_id == to_id:
            raise SameAccountError(from_id)
        amount = to_amount(amount)
        source = self.get_account(from_id)
        destination = self.get_account(to_id)
        if source.balance < amount:
            raise InsufficientFundsError(from_id, source.balance, amount)

        self.move(source, destination, amount, TransactionKind.TRANSFER)
        self.journal.push(UndoEntry(
            operation=UndoOperation.TRANSFER,
            account_id=from_id,
            counterpart_account_id=to_id,
            amount=amount,
        ))
        return source, destination

    # ========================================================================
    # MUTATION PRIMITIVES (no undo entry; shared with the undo engine)
    # ========================================================================

    def adjust(
        self,
        account: Account,
        delta: Decimal,
        kind: TransactionKind,
    ) -> Transaction:
        """Change one balance and record it; the amount recorded is |delta|."""
        account.balance += delta
        return self._append(account, kind, abs(delta))

    def move(
        self,
        source: Account,
        destination: Account,
        amount: Decimal,
        kind: TransactionKind,
    ) -> tuple[Transaction, Transaction]:
        """Move amount from source to destination, one record on each side."""
        source.balance -= amount
        destination.balance += amount
        outgoing = self._append(source, kind, amount, counterpart=destination.id)
        incoming = self._append(destination, kind, amount, counterpart=source.id)
        return outgoing, incoming

    def move_back(
        self,
        source: Account,
        destination: Account,
        amount: Decimal,
        kind: TransactionKind,
    ) -> tuple[Transaction, Transaction]:
        """
        Return amount from destination to the original source.

        The source side is recorded first, so it keeps the lower
        transaction ID just as it did for the forward transfer.
        """
        destination.balance -= amount
        source.balance += amount
        returned = self._append(source, kind, amount, counterpart=destination.id)
        given_back = self._append(destination, kind, amount, counterpart=source.id)
        return returned, given_back

    def remove_account(self, account_id: int) -> Account:
        """Drop an account together with its whole history."""
        account = self.get_account(account_id)
        del self._accounts[account_id]
        return account

    def replace_all(
        self,
        accounts: Iterable[Account],
        next_account_id: int,
        next_transaction_id: int,
    ) -> None:
        """
        Discard the current ledger and install a restored one.

        The undo journal is cleared too: its entries describe operations on
        the state that was just thrown away.
        """
        self._accounts = {account.id: account for account in accounts}
        self._next_account_id = max(next_account_id, 1)
        self._next_transaction_id = max(next_transaction_id, 1)
        self.journal.clear()

    def clear(self) -> None:
        """Back to an empty ledger with fresh counters."""
        self.replace_all([], 1, 1)

    def _append(
        self,
        account: Account,
        kind: TransactionKind,
        amount: Decimal,
        counterpart: Optional[int] = None,
    ) -> Transaction:
        transaction = Transaction(
            id=self._next_transaction_id,
            kind=kind,
            amount=amount,
            counterpart_account_id=counterpart,
            timestamp=self._clock(),
        )
        self._next_transaction_id += 1
        account.record(transaction)
        return transaction
