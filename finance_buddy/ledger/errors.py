"""
Ledger Exceptions

Raised inside the ledger engine. The service layer catches every one of
them and turns it into a failed OperationResult, so none of these ever
reaches the frontend as an exception.
"""

from decimal import Decimal
from typing import Optional

from finance_buddy.models.ledger import LedgerErrorCode, UndoEntry


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code: LedgerErrorCode
    # Set by the undo engine when a popped entry could not be reversed
    undo_entry: Optional[UndoEntry] = None

    def __init__(self, message: str, account_id: Optional[int] = None):
        super().__init__(message)
        self.account_id = account_id


class AccountNotFoundError(LedgerError):
    """No account with the requested ID exists."""

    code = LedgerErrorCode.ACCOUNT_NOT_FOUND

    def __init__(self, account_id: int):
        super().__init__(f"Account {account_id} not found", account_id=account_id)


class InsufficientFundsError(LedgerError):
    """Balance is lower than the requested amount."""

    code = LedgerErrorCode.INSUFFICIENT_FUNDS

    def __init__(self, account_id: int, balance: Decimal, amount: Decimal):
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"balance {balance:.2f}, requested {amount:.2f}",
            account_id=account_id,
        )
        self.balance = balance
        self.amount = amount


class SameAccountError(LedgerError):
    """Transfer source and destination are the same account."""

    code = LedgerErrorCode.SAME_ACCOUNT

    def __init__(self, account_id: int):
        super().__init__(
            "Source and destination cannot be same",
            account_id=account_id,
        )


class InvalidAmountError(LedgerError):
    """Amount is negative or not a finite number."""

    code = LedgerErrorCode.INVALID_AMOUNT


class InvalidNameError(LedgerError):
    """Account name cannot be stored."""

    code = LedgerErrorCode.INVALID_NAME


class NothingToUndoError(LedgerError):
    """The undo journal is empty."""

    code = LedgerErrorCode.NOTHING_TO_UNDO

    def __init__(self):
        super().__init__("Nothing to undo.")


class UndoNotReversibleError(LedgerError):
    """Current balances do not allow the last operation to be reversed."""

    code = LedgerErrorCode.UNDO_NOT_REVERSIBLE
