"""Tests for the undo journal and the undo engine."""

import pytest
from decimal import Decimal

from finance_buddy.ledger import (
    AccountNotFoundError,
    NothingToUndoError,
    UndoEngine,
    UndoJournal,
    UndoNotReversibleError,
)
from finance_buddy.models.ledger import TransactionKind, UndoEntry, UndoOperation


@pytest.fixture
def engine(store):
    return UndoEngine(store)


class TestUndoJournal:
    """Tests for the LIFO journal."""

    def test_pop_returns_newest(self):
        journal = UndoJournal()
        first = UndoEntry(operation=UndoOperation.DEPOSIT, account_id=1, amount=Decimal("1"))
        second = UndoEntry(operation=UndoOperation.WITHDRAW, account_id=1, amount=Decimal("2"))
        journal.push(first)
        journal.push(second)
        assert journal.pop() == second
        assert journal.pop() == first
        assert not journal

    def test_pop_empty_raises(self):
        with pytest.raises(NothingToUndoError):
            UndoJournal().pop()

    def test_peek_does_not_remove(self):
        journal = UndoJournal()
        assert journal.peek() is None
        entry = UndoEntry(operation=UndoOperation.CREATE, account_id=1, amount=Decimal("0"))
        journal.push(entry)
        assert journal.peek() == entry
        assert len(journal) == 1


class TestUndoDeposit:
    """Tests for reversing deposits."""

    def test_restores_pre_deposit_balance(self, store, engine):
        account = store.create_account("Alice", 100)
        store.deposit(account.id, 50)
        entry, message = engine.undo_last()
        assert entry.operation == UndoOperation.DEPOSIT
        assert account.balance == Decimal("100")
        assert account.transactions[0].kind == TransactionKind.UNDO_DEPOSIT
        assert account.transactions[0].amount == Decimal("50")
        assert message == "Undid deposit of 50.00 from account 1"

    def test_refused_when_balance_too_low(self, store, engine):
        account = store.create_account("Alice", 0)
        store.deposit(account.id, 50)
        # Spend the deposit behind the journal's back
        store.adjust(account, Decimal("-30"), TransactionKind.WITHDRAW)
        with pytest.raises(UndoNotReversibleError) as exc_info:
            engine.undo_last()
        assert exc_info.value.undo_entry.operation == UndoOperation.DEPOSIT
        assert account.balance == Decimal("20")
        assert account.transactions[0].kind == TransactionKind.WITHDRAW

    def test_refused_entry_is_discarded(self, store, engine):
        account = store.create_account("Alice", 0)
        store.deposit(account.id, 50)
        store.adjust(account, Decimal("-30"), TransactionKind.WITHDRAW)
        with pytest.raises(UndoNotReversibleError):
            engine.undo_last()
        # Next undo reaches the CREATE entry, not the failed deposit again
        entry, _ = engine.undo_last()
        assert entry.operation == UndoOperation.CREATE


class TestUndoWithdraw:
    """Tests for reversing withdrawals."""

    def test_always_restores(self, store, engine):
        account = store.create_account("Alice", 100)
        store.withdraw(account.id, 100)
        entry, message = engine.undo_last()
        assert account.balance == Decimal("100")
        assert account.transactions[0].kind == TransactionKind.UNDO_WITHDRAW
        assert message == "Undid withdraw of 100.00 to account 1"

    def test_undo_pushes_no_entry(self, store, engine):
        account = store.create_account("Alice", 100)
        store.withdraw(account.id, 10)
        engine.undo_last()
        assert len(store.journal) == 1


class TestUndoTransfer:
    """Tests for reversing transfers."""

    def test_moves_money_back(self, store, engine):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 0)
        store.transfer(a.id, b.id, 40)
        entry, message = engine.undo_last()
        assert (a.balance, b.balance) == (Decimal("100"), Decimal("0"))
        assert a.transactions[0].kind == TransactionKind.UNDO_TRANSFER
        assert b.transactions[0].kind == TransactionKind.UNDO_TRANSFER
        assert a.transactions[0].counterpart_account_id == b.id
        assert b.transactions[0].counterpart_account_id == a.id
        assert message == "Undid transfer of 40.00 from 1 to 2"

    def test_source_side_recorded_first(self, store, engine):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 0)
        store.transfer(a.id, b.id, 40)
        engine.undo_last()
        assert a.transactions[0].id < b.transactions[0].id
        assert b.transactions[0].id == store.next_transaction_id - 1

    def test_refused_when_destination_spent_it(self, store, engine):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 0)
        store.transfer(a.id, b.id, 40)
        store.adjust(b, Decimal("-10"), TransactionKind.WITHDRAW)
        with pytest.raises(UndoNotReversibleError):
            engine.undo_last()
        # Neither side was touched
        assert (a.balance, b.balance) == (Decimal("60"), Decimal("30"))
        assert a.transactions[0].kind == TransactionKind.TRANSFER

    def test_missing_account_reported(self, store, engine):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 0)
        store.transfer(a.id, b.id, 40)
        store.remove_account(b.id)
        with pytest.raises(AccountNotFoundError) as exc_info:
            engine.undo_last()
        assert exc_info.value.undo_entry.operation == UndoOperation.TRANSFER
        assert a.balance == Decimal("60")


class TestUndoCreate:
    """Tests for reversing account creation."""

    def test_removes_untouched_account(self, store, engine):
        account = store.create_account("Alice", 100)
        entry, message = engine.undo_last()
        assert entry.operation == UndoOperation.CREATE
        assert store.lookup(account.id) is None
        assert message == "Undid creation of account 1"

    def test_removes_account_after_activity(self, store, engine):
        """Create, deposit, undo, undo leaves no accounts."""
        account = store.create_account("A", 100)
        store.deposit(account.id, 50)
        engine.undo_last()
        assert account.balance == Decimal("100")
        engine.undo_last()
        assert len(store) == 0
        assert not store.journal

    def test_ids_not_reused_after_undo(self, store, engine):
        store.create_account("Alice", 100)
        engine.undo_last()
        account = store.create_account("Bob", 5)
        assert account.id == 2
        assert account.transactions[0].id == 2

    def test_nothing_left_to_undo(self, store, engine):
        store.create_account("Alice", 100)
        engine.undo_last()
        with pytest.raises(NothingToUndoError):
            engine.undo_last()
