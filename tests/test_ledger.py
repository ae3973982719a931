"""Tests for the ledger store: accounts, balances, histories and undo entries."""

import pytest
from decimal import Decimal

from finance_buddy.ledger import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidNameError,
    LedgerStore,
    SameAccountError,
    to_amount,
)
from finance_buddy.models.ledger import LedgerErrorCode, TransactionKind, UndoOperation


class TestToAmount:
    """Tests for amount normalization."""

    def test_float_goes_through_str(self):
        assert to_amount(0.1) == Decimal("0.1")

    def test_accepts_int_str_and_decimal(self):
        assert to_amount(5) == Decimal("5")
        assert to_amount(" 12.50 ") == Decimal("12.50")
        assert to_amount(Decimal("3.25")) == Decimal("3.25")

    def test_zero_is_allowed(self):
        assert to_amount(0) == Decimal("0")

    def test_result_has_cent_precision(self):
        assert to_amount("1.500") == Decimal("1.50")
        assert str(to_amount(7)) == "7.00"

    @pytest.mark.parametrize("value", [Decimal("0.005"), "1.001", 0.015, "1e30"])
    def test_rejects_finer_than_a_cent_or_too_large(self, value):
        with pytest.raises(InvalidAmountError):
            to_amount(value)

    @pytest.mark.parametrize("value", [-1, "-0.01", "abc", "NaN", "Infinity", float("inf")])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_amount(value)
        assert exc_info.value.code == LedgerErrorCode.INVALID_AMOUNT


class TestCreateAccount:
    """Tests for account creation."""

    def test_assigns_sequential_ids(self, store):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 0)
        assert (a.id, b.id) == (1, 2)
        assert store.next_account_id == 3

    def test_opening_balance_recorded_as_deposit(self, store):
        account = store.create_account("Alice", Decimal("100"))
        assert account.balance == Decimal("100")
        assert account.transaction_count == 1
        opening = account.transactions[0]
        assert opening.kind == TransactionKind.DEPOSIT
        assert opening.amount == Decimal("100")
        assert opening.counterpart_account_id is None

    def test_pushes_create_entry(self, store):
        account = store.create_account("Alice", 100)
        entry = store.journal.peek()
        assert entry.operation == UndoOperation.CREATE
        assert entry.account_id == account.id
        assert len(store.journal) == 1

    def test_invalid_name_consumes_nothing(self, store):
        with pytest.raises(InvalidNameError):
            store.create_account("Bad|Name", 10)
        assert len(store) == 0
        assert len(store.journal) == 0
        assert store.next_account_id == 1
        assert store.next_transaction_id == 1

    def test_negative_opening_balance_rejected(self, store):
        with pytest.raises(InvalidAmountError):
            store.create_account("Alice", -10)
        assert len(store) == 0


class TestLookup:
    """Tests for account lookup and listing."""

    def test_lookup_missing_returns_none(self, store):
        assert store.lookup(42) is None

    def test_get_account_missing_raises(self, store):
        with pytest.raises(AccountNotFoundError) as exc_info:
            store.get_account(42)
        assert exc_info.value.account_id == 42

    def test_list_accounts_in_id_order(self, store):
        store.create_account("Alice", 1)
        store.create_account("Bob", 2)
        store.create_account("Carol", 3)
        assert [a.name for a in store.list_accounts()] == ["Alice", "Bob", "Carol"]
        assert 2 in store


class TestDepositWithdraw:
    """Tests for deposits and withdrawals."""

    def test_deposit_increases_balance(self, store):
        account = store.create_account("Alice", 100)
        store.deposit(account.id, Decimal("50.25"))
        assert account.balance == Decimal("150.25")
        assert account.transactions[0].kind == TransactionKind.DEPOSIT
        assert store.journal.peek().operation == UndoOperation.DEPOSIT

    def test_deposit_missing_account(self, store):
        with pytest.raises(AccountNotFoundError):
            store.deposit(9, 10)
        assert len(store.journal) == 0

    def test_withdraw_decreases_balance(self, store):
        account = store.create_account("Alice", 100)
        store.withdraw(account.id, 30)
        assert account.balance == Decimal("70")
        assert account.transactions[0].kind == TransactionKind.WITHDRAW
        assert store.journal.peek().operation == UndoOperation.WITHDRAW

    def test_withdraw_entire_balance_allowed(self, store):
        account = store.create_account("Alice", 100)
        store.withdraw(account.id, 100)
        assert account.balance == Decimal("0")

    def test_withdraw_more_than_balance_refused(self, store):
        account = store.create_account("Alice", 100)
        with pytest.raises(InsufficientFundsError):
            store.withdraw(account.id, Decimal("100.01"))
        assert account.balance == Decimal("100")
        assert account.transaction_count == 1
        assert len(store.journal) == 1

    def test_sequence_balance_matches_sum(self, store):
        """Final balance = opening + deposits - withdrawals."""
        account = store.create_account("Alice", Decimal("10"))
        deposits = [Decimal("5.50"), Decimal("20"), Decimal("0.25")]
        withdrawals = [Decimal("3"), Decimal("12.75")]
        for amount in deposits:
            store.deposit(account.id, amount)
        for amount in withdrawals:
            store.withdraw(account.id, amount)
        assert account.balance == Decimal("10") + sum(deposits) - sum(withdrawals)
        assert account.transaction_count == 1 + len(deposits) + len(withdrawals)
        assert len(store.journal) == 1 + len(deposits) + len(withdrawals)

    def test_history_is_newest_first(self, store):
        account = store.create_account("Alice", 10)
        store.deposit(account.id, 1)
        store.withdraw(account.id, 2)
        ids = [tx.id for tx in account.transactions]
        assert ids == sorted(ids, reverse=True)
        assert account.transactions[0].kind == TransactionKind.WITHDRAW

    def test_transaction_ids_unique_across_accounts(self, store):
        a = store.create_account("Alice", 10)
        b = store.create_account("Bob", 10)
        store.deposit(a.id, 1)
        store.deposit(b.id, 1)
        ids = [tx.id for acc in (a, b) for tx in acc.transactions]
        assert sorted(ids) == [1, 2, 3, 4]

    def test_timestamps_come_from_clock(self, store):
        account = store.create_account("Alice", 10)
        store.deposit(account.id, 1)
        assert account.transactions[0].timestamp_text == "2024-12-15 10:30:01"


class TestTransfer:
    """Tests for transfers."""

    def test_transfer_moves_money(self, store):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 20)
        source, destination = store.transfer(a.id, b.id, Decimal("40"))
        assert source is a and destination is b
        assert a.balance == Decimal("60")
        assert b.balance == Decimal("60")

    def test_transfer_records_both_sides(self, store):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 20)
        store.transfer(a.id, b.id, 40)
        out, into = a.transactions[0], b.transactions[0]
        assert out.kind == into.kind == TransactionKind.TRANSFER
        assert out.counterpart_account_id == b.id
        assert into.counterpart_account_id == a.id
        assert out.id != into.id
        assert a.transaction_count == 2 and b.transaction_count == 2

    def test_transfer_pushes_one_entry(self, store):
        a = store.create_account("Alice", 100)
        b = store.create_account("Bob", 20)
        store.transfer(a.id, b.id, 40)
        entry = store.journal.peek()
        assert entry.operation == UndoOperation.TRANSFER
        assert (entry.account_id, entry.counterpart_account_id) == (a.id, b.id)
        assert len(store.journal) == 3

    def test_same_account_checked_before_lookup(self, store):
        """Self-transfer is refused even for an account that does not exist."""
        with pytest.raises(SameAccountError):
            store.transfer(7, 7, 10)

    def test_same_account_regardless_of_balance(self, store):
        a = store.create_account("Alice", 1000)
        with pytest.raises(SameAccountError):
            store.transfer(a.id, a.id, 1)

    def test_missing_destination(self, store):
        a = store.create_account("Alice", 100)
        with pytest.raises(AccountNotFoundError):
            store.transfer(a.id, 99, 10)
        assert a.balance == Decimal("100")
        assert len(store.journal) == 1

    def test_insufficient_funds_changes_nothing(self, store):
        a = store.create_account("Alice", 10)
        b = store.create_account("Bob", 10)
        with pytest.raises(InsufficientFundsError):
            store.transfer(a.id, b.id, 11)
        assert (a.balance, b.balance) == (Decimal("10"), Decimal("10"))
        assert (a.transaction_count, b.transaction_count) == (1, 1)
        assert len(store.journal) == 2


class TestReplaceAll:
    """Tests for the restore primitive used by load."""

    def test_replace_all_discards_state_and_journal(self, store):
        store.create_account("Alice", 10)
        store.replace_all([], next_account_id=5, next_transaction_id=9)
        assert len(store) == 0
        assert len(store.journal) == 0
        account = store.create_account("Bob", 1)
        assert account.id == 5
        assert account.transactions[0].id == 9

    def test_clear_resets_counters(self, store):
        store.create_account("Alice", 10)
        store.clear()
        assert store.next_account_id == 1
        assert store.next_transaction_id == 1
        assert LedgerStore().next_account_id == 1
