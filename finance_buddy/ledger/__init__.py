"""
Ledger Engine Package

Accounts, transaction histories, balance mutations and single-step undo.
"""

from finance_buddy.ledger.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidNameError,
    LedgerError,
    NothingToUndoError,
    SameAccountError,
    UndoNotReversibleError,
)
from finance_buddy.ledger.store import LedgerStore, to_amount
from finance_buddy.ledger.undo import UndoEngine, UndoJournal

__all__ = [
    # Engine
    "LedgerStore",
    "UndoEngine",
    "UndoJournal",
    "to_amount",
    # Exceptions
    "AccountNotFoundError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidNameError",
    "LedgerError",
    "NothingToUndoError",
    "SameAccountError",
    "UndoNotReversibleError",
]
