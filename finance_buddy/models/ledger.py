"""
Core Data Models for Finance Buddy

These models define the schemas for everything the ledger holds:
1. Accounts and their transaction histories
2. Undo journal entries
3. Operation outcomes returned to the frontend

DESIGN DECISION: Transactions are frozen once created. An account's
history only ever grows, and the newest record is always at the front,
so displaying it never requires a sort.
"""

from collections import deque
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Timestamps are recorded and persisted with second precision
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Longest name the data file accepts
MAX_NAME_LENGTH = 64

FORBIDDEN_NAME_CHARACTERS = ("|", "\n", "\r")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Kinds of monetary events recorded in an account's history."""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER = "TRANSFER"
    UNDO_DEPOSIT = "UNDO_DEPOSIT"
    UNDO_WITHDRAW = "UNDO_WITHDRAW"
    UNDO_TRANSFER = "UNDO_TRANSFER"

    @property
    def is_transfer(self) -> bool:
        """Transfer-family records carry a counterpart account."""
        return self in (TransactionKind.TRANSFER, TransactionKind.UNDO_TRANSFER)


class UndoOperation(str, Enum):
    """Operations that push an entry onto the undo journal."""
    CREATE = "CREATE"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER = "TRANSFER"


class LedgerErrorCode(str, Enum):
    """
    Every way an operation can fail.

    All of them are recoverable: the caller is told, the process keeps going.
    """
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SAME_ACCOUNT = "same_account"
    NOTHING_TO_UNDO = "nothing_to_undo"
    UNDO_NOT_REVERSIBLE = "undo_not_reversible"
    MALFORMED_RECORD = "malformed_record"
    FILE_UNAVAILABLE = "file_unavailable"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_NAME = "invalid_name"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single monetary event on one account.

    For transfers, each side gets its own record; the counterpart field
    points at the other account.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        gt=0,
        description="Ledger-wide unique transaction ID"
    )
    kind: TransactionKind = Field(
        ...,
        description="What kind of event this was"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Magnitude of the movement"
    )
    counterpart_account_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Other side of a transfer-family record"
    )
    timestamp: datetime = Field(
        ...,
        description="When the event was recorded (second precision)"
    )

    @field_validator('timestamp')
    @classmethod
    def truncate_to_seconds(cls, v: datetime) -> datetime:
        return v.replace(microsecond=0)

    @property
    def timestamp_text(self) -> str:
        return self.timestamp.strftime(TIMESTAMP_FORMAT)

    def describe(self, currency_symbol: str = "") -> str:
        """
        Single display line for this record.

        Transfer-family records also show the counterpart account.
        """
        line = f"[{self.timestamp_text}] {self.kind.value} {currency_symbol}{self.amount:.2f}"
        if self.kind.is_transfer:
            line += f"  to/from acc {self.counterpart_account_id}"
        return line


class Account(BaseModel):
    """
    An account and its transaction history.

    The balance is mutated in place by the ledger store. The history
    is kept newest-first: new records are inserted at the front.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(
        ...,
        gt=0,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_NAME_LENGTH,
        description="Account holder display name"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance"
    )
    transactions: deque[Transaction] = Field(
        default_factory=deque,
        description="Transaction history, newest first"
    )

    @field_validator('name')
    @classmethod
    def name_fits_flat_file(cls, v: str) -> str:
        """Names are persisted inside a '|'-delimited line."""
        if any(ch in v for ch in FORBIDDEN_NAME_CHARACTERS):
            raise ValueError("Account name cannot contain '|' or line breaks")
        return v

    def record(self, transaction: Transaction) -> None:
        """Add a transaction as the newest entry of the history."""
        self.transactions.appendleft(transaction)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    def describe(self, currency_symbol: str = "") -> str:
        return f"ID:{self.id}  Name:{self.name}  Balance:{currency_symbol}{self.balance:.2f}"


class UndoEntry(BaseModel):
    """
    One journal record: enough to apply the inverse of a completed operation.
    """
    model_config = ConfigDict(frozen=True)

    operation: UndoOperation
    account_id: int = Field(..., gt=0)
    counterpart_account_id: Optional[int] = Field(
        default=None,
        description="Destination account (transfers only)"
    )
    amount: Decimal = Field(..., ge=0)


# =============================================================================
# OPERATION OUTCOMES
# =============================================================================

class OperationResult(BaseModel):
    """
    Outcome of a ledger operation, as seen by the frontend.

    GUARANTEES:
    - Every public ledger operation returns one of these
    - success=False always carries an error code and a readable message
    """
    success: bool
    error: Optional[LedgerErrorCode] = None
    message: str = ""

    # Payload (operation-specific)
    account: Optional[Account] = None
    counterpart: Optional[Account] = None
    accounts: list[Account] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    undo_entry: Optional[UndoEntry] = None

    # Persistence statistics
    records_written: int = 0
    records_skipped: int = 0

    @classmethod
    def ok(cls, message: str = "", **payload) -> "OperationResult":
        return cls(success=True, message=message, **payload)

    @classmethod
    def failed(
        cls,
        error: LedgerErrorCode,
        message: str,
        **payload,
    ) -> "OperationResult":
        return cls(success=False, error=error, message=message, **payload)
