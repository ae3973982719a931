"""
Flat-File Snapshot Storage

DESIGN DECISION: The whole ledger lives in one small text file because:
1. The user can open and read it in any editor
2. No database setup required
3. A personal ledger is tiny; rewriting it on every save is fine

TRADEOFFS:
- One snapshot only, no history of saves
- No partial writes: the new snapshot is written next to the old one
  and swapped in, so a failed save leaves the previous file intact
"""

import os
from pathlib import Path
from typing import Iterable, Union

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from finance_buddy.models.ledger import Account
from finance_buddy.services.storage.codec import (
    DecodedLedger,
    decode_lines,
    encode_ledger,
)
from finance_buddy.services.storage.interface import (
    FileUnavailableError,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)


class FlatFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger snapshot kept in a single '|'-delimited text file.

    Writes are retried on OSError; reads are not (a missing file simply
    means there is nothing to restore).
    """

    def __init__(
        self,
        path: Union[str, Path],
        attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ):
        """
        Initialize flat-file storage.

        Args:
            path: Snapshot file location
            attempts: How many times a failing write is tried
            retry_wait_seconds: Pause between write attempts
        """
        self._path = Path(path)
        self._attempts = attempts
        self._retry_wait_seconds = retry_wait_seconds

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def save(self, accounts: Iterable[Account]) -> int:
        """Write every account and its history to the snapshot file."""
        lines = encode_ledger(accounts)
        payload = "".join(line + "\n" for line in lines)

        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_fixed(self._retry_wait_seconds),
            retry=retry_if_exception_type(OSError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write(payload)
        except OSError as e:
            raise FileUnavailableError(f"Error opening file to save: {e}") from e

        logger.info("ledger_file_written", path=self.location, records=len(lines))
        return len(lines)

    def load(self) -> DecodedLedger:
        """Read the snapshot file; a missing file yields an empty ledger."""
        try:
            text = self._path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.info("ledger_file_missing", path=self.location)
            return DecodedLedger(source_found=False)
        except OSError as e:
            raise FileUnavailableError(f"Error opening file to load: {e}") from e

        decoded = decode_lines(text.split("\n"))
        logger.info(
            "ledger_file_read",
            path=self.location,
            accounts=len(decoded.accounts),
            transactions=decoded.transaction_count,
            skipped=len(decoded.skipped),
        )
        return decoded

    def _write(self, payload: str) -> None:
        temporary = self._path.with_name(self._path.name + ".tmp")
        try:
            temporary.write_text(payload, encoding="utf-8")
            os.replace(temporary, self._path)
        except OSError:
            temporary.unlink(missing_ok=True)
            raise

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "ledger_file_write_retry",
            path=self.location,
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()),
        )
