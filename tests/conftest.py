"""
Shared fixtures.

No test talks to Google Sheets, Gemini or Telegram: the ledger is an
in-memory store and the oracle is a stub with canned answers.
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from dompetbot.agents import ClassificationOracle
from dompetbot.audit import AuditLogger
from dompetbot.config import AppSettings
from dompetbot.models import QueryIntent, Transaction, TransactionType
from dompetbot.orchestrator import TransactionOrchestrator
from dompetbot.services.storage import InMemoryTransactionStore, StorageError


# Thursday
NOW = datetime(2025, 6, 12, 14, 30, 0, tzinfo=ZoneInfo("Asia/Jakarta"))


class StubOracle(ClassificationOracle):
    """Deterministic oracle that records what it was asked."""

    def __init__(
        self,
        category: str = "Gaji",
        intent: Optional[QueryIntent] = None,
        fail: bool = False,
    ):
        self.category = category
        self.intent = intent
        self.fail = fail
        self.categorize_calls = []
        self.query_calls = []

    async def categorize(self, description, tx_type):
        self.categorize_calls.append((description, tx_type))
        if self.fail:
            raise RuntimeError("oracle down")
        return self.category

    async def interpret_query(self, text):
        self.query_calls.append(text)
        if self.fail:
            raise RuntimeError("oracle down")
        return self.intent


class FailingStore(InMemoryTransactionStore):
    """In-memory store whose reads and/or writes blow up on demand."""

    def __init__(self, rows=None, fail_reads=False, fail_appends_after=None):
        super().__init__(rows)
        self.fail_reads = fail_reads
        self.fail_appends_after = fail_appends_after

    async def append(self, transaction):
        if self.fail_appends_after is not None and self.append_count >= self.fail_appends_after:
            raise StorageError("sheet unavailable")
        return await super().append(transaction)

    async def read_range(self, start_row, end_row):
        if self.fail_reads:
            raise StorageError("sheet unavailable")
        return await super().read_range(start_row, end_row)


def make_tx(
    tx_type=TransactionType.INCOME,
    amount="100000",
    pocket="utama",
    category="Lainnya",
    day=date(2025, 6, 10),
    description="test",
    sender="budi",
) -> Transaction:
    return Transaction(
        tx_date=day,
        tx_time="10:00:00",
        type=tx_type,
        amount=amount,
        description=description,
        category=category,
        pocket=pocket,
        source="Telegram Bot",
        sender=sender,
    )


@pytest.fixture
def app_settings():
    return AppSettings(
        timezone="Asia/Jakarta",
        source_tag="Telegram Bot",
        default_category="Lainnya",
        max_ledger_rows=1000,
        recent_transactions_limit=5,
    )


@pytest.fixture
def store():
    return InMemoryTransactionStore()


@pytest.fixture
def oracle():
    return StubOracle()


@pytest.fixture
def orchestrator(store, oracle, app_settings):
    return TransactionOrchestrator(
        store=store,
        oracle=oracle,
        settings=app_settings,
        audit_logger=AuditLogger(),
        clock=lambda: NOW,
    )
