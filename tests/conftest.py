"""Shared fixtures: fixed clock, fresh ledger, service with in-memory audit."""

from datetime import datetime, timedelta

import pytest

from finance_buddy.audit import AuditLogger
from finance_buddy.ledger import LedgerStore
from finance_buddy.orchestrator import LedgerService
from finance_buddy.services.storage import FlatFileLedgerStorage, InMemoryAuditStorage


START = datetime(2024, 12, 15, 10, 30, 0)


class TickingClock:
    """Returns START, START+1s, START+2s, ... on successive calls."""

    def __init__(self, start: datetime = START):
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next += timedelta(seconds=1)
        return now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return LedgerStore(clock=clock)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "finance_data.txt"


@pytest.fixture
def service(store, audit_storage, data_file):
    return LedgerService(
        store=store,
        storage=FlatFileLedgerStorage(data_file, attempts=1, retry_wait_seconds=0),
        audit_logger=AuditLogger(audit_storage),
        save_attempts=1,
        retry_wait_seconds=0,
    )
