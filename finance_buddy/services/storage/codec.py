"""
Flat-File Ledger Codec

Encodes the ledger as '|'-delimited lines and decodes it back:

    ACC|<id>|<name>|<balance, 2dp>
    TX|<account_id>|<tx_id>|<kind>|<amount, 2dp>|<counterpart_id, 0 if none>|<YYYY-MM-DD HH:MM:SS>

DESIGN DECISION: Every line is validated against an explicit record
schema before it touches the ledger. A line that does not fit is skipped
and reported; it never aborts the rest of the load.

Record order is not significant. Accounts are collected first and
transactions attached afterwards, so a TX line may precede its ACC line.
"""

from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from finance_buddy.models.ledger import (
    FORBIDDEN_NAME_CHARACTERS,
    MAX_NAME_LENGTH,
    TIMESTAMP_FORMAT,
    Account,
    Transaction,
    TransactionKind,
)
from finance_buddy.services.storage.interface import MalformedRecordError


logger = structlog.get_logger(__name__)

FIELD_SEPARATOR = "|"
ACCOUNT_TAG = "ACC"
TRANSACTION_TAG = "TX"

# Field counts including the leading tag
ACCOUNT_FIELDS = 4
TRANSACTION_FIELDS = 7

# Written in place of a missing counterpart account
NO_COUNTERPART = 0


# =============================================================================
# RECORD SCHEMAS
# =============================================================================

class AccountRecord(BaseModel):
    """One ACC line."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    balance: Decimal

    @field_validator('name')
    @classmethod
    def name_is_single_field(cls, v: str) -> str:
        if any(ch in v for ch in FORBIDDEN_NAME_CHARACTERS):
            raise ValueError("name contains a reserved character")
        return v

    def to_account(self) -> Account:
        return Account(id=self.id, name=self.name, balance=self.balance)


class TransactionRecord(BaseModel):
    """One TX line."""
    model_config = ConfigDict(frozen=True)

    account_id: int = Field(..., gt=0)
    transaction_id: int = Field(..., gt=0)
    kind: TransactionKind
    amount: Decimal = Field(..., ge=0)
    counterpart_id: int = Field(default=NO_COUNTERPART, ge=0)
    timestamp: datetime

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp(cls, v):
        """Only the exact persisted format is accepted."""
        if isinstance(v, str):
            return datetime.strptime(v, TIMESTAMP_FORMAT)
        return v

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.transaction_id,
            kind=self.kind,
            amount=self.amount,
            counterpart_account_id=self.counterpart_id or None,
            timestamp=self.timestamp,
        )


LedgerRecord = Union[AccountRecord, TransactionRecord]


class SkippedRecord(BaseModel):
    """A line that was left out of a load, and why."""
    line_number: int
    reason: str


class DecodedLedger(BaseModel):
    """
    Result of decoding a snapshot.

    Counters are one past the highest ID of their kind found in the
    snapshot, so restored IDs are never handed out again.
    """
    accounts: list[Account] = Field(default_factory=list)
    next_account_id: int = 1
    next_transaction_id: int = 1
    skipped: list[SkippedRecord] = Field(default_factory=list)
    source_found: bool = True

    @property
    def transaction_count(self) -> int:
        return sum(account.transaction_count for account in self.accounts)


# =============================================================================
# ENCODING
# =============================================================================

def encode_account(account: Account) -> str:
    return FIELD_SEPARATOR.join([
        ACCOUNT_TAG,
        str(account.id),
        account.name,
        f"{account.balance:.2f}",
    ])


def encode_transaction(account_id: int, transaction: Transaction) -> str:
    return FIELD_SEPARATOR.join([
        TRANSACTION_TAG,
        str(account_id),
        str(transaction.id),
        transaction.kind.value,
        f"{transaction.amount:.2f}",
        str(transaction.counterpart_account_id or NO_COUNTERPART),
        transaction.timestamp_text,
    ])


def encode_ledger(accounts: Iterable[Account]) -> list[str]:
    """Each account line followed by its transactions, newest first."""
    lines = []
    for account in accounts:
        lines.append(encode_account(account))
        for transaction in account.transactions:
            lines.append(encode_transaction(account.id, transaction))
    return lines


# =============================================================================
# DECODING
# =============================================================================

def decode_line(line: str) -> Optional[LedgerRecord]:
    """
    Parse a single line.

    Returns:
        The record, or None for a blank line

    Raises:
        MalformedRecordError: If the line fits neither record schema
    """
    line = line.rstrip("\r\n")
    if not line.strip():
        return None

    fields = line.split(FIELD_SEPARATOR)
    tag = fields[0]

    try:
        if tag == ACCOUNT_TAG:
            if len(fields) != ACCOUNT_FIELDS:
                raise MalformedRecordError(
                    f"ACC record needs {ACCOUNT_FIELDS} fields, got {len(fields)}"
                )
            return AccountRecord(id=fields[1], name=fields[2], balance=fields[3])

        if tag == TRANSACTION_TAG:
            if len(fields) != TRANSACTION_FIELDS:
                raise MalformedRecordError(
                    f"TX record needs {TRANSACTION_FIELDS} fields, got {len(fields)}"
                )
            return TransactionRecord(
                account_id=fields[1],
                transaction_id=fields[2],
                kind=fields[3],
                amount=fields[4],
                counterpart_id=fields[5],
                timestamp=fields[6],
            )
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise MalformedRecordError(f"{tag} record: {location}: {error['msg']}")

    raise MalformedRecordError(f"Unknown record type: {tag[:20]!r}")


def decode_lines(lines: Iterable[str]) -> DecodedLedger:
    """
    Rebuild accounts and histories from snapshot lines.

    Skipped (and reported):
    - lines that fail their record schema
    - a second ACC record for an ID already seen
    - TX records for an account that is not in the snapshot
    - a second TX record for a transaction ID already seen
    """
    accounts: dict[int, Account] = {}
    pending: list[tuple[int, TransactionRecord]] = []
    skipped: list[SkippedRecord] = []
    max_account_id = 0
    max_transaction_id = 0

    def skip(line_number: int, reason: str) -> None:
        logger.warning("ledger_record_skipped", line_number=line_number, reason=reason)
        skipped.append(SkippedRecord(line_number=line_number, reason=reason))

    for line_number, line in enumerate(lines, start=1):
        try:
            record = decode_line(line)
        except MalformedRecordError as e:
            skip(line_number, str(e))
            continue

        if record is None:
            continue

        if isinstance(record, AccountRecord):
            max_account_id = max(max_account_id, record.id)
            if record.id in accounts:
                skip(line_number, f"Duplicate account ID {record.id}")
                continue
            accounts[record.id] = record.to_account()
        else:
            max_transaction_id = max(max_transaction_id, record.transaction_id)
            pending.append((line_number, record))

    seen_transaction_ids: set[int] = set()
    for line_number, record in pending:
        account = accounts.get(record.account_id)
        if account is None:
            skip(line_number, f"Transaction for unknown account {record.account_id}")
            continue
        if record.transaction_id in seen_transaction_ids:
            skip(line_number, f"Duplicate transaction ID {record.transaction_id}")
            continue
        seen_transaction_ids.add(record.transaction_id)
        account.transactions.append(record.to_transaction())

    for account in accounts.values():
        account.transactions = deque(
            sorted(account.transactions, key=lambda tx: tx.id, reverse=True)
        )

    return DecodedLedger(
        accounts=[accounts[key] for key in sorted(accounts)],
        next_account_id=max_account_id + 1,
        next_transaction_id=max_transaction_id + 1,
        skipped=skipped,
    )
