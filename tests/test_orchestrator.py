"""
Tests for the transaction orchestrator.

Flows run end to end against the in-memory ledger and a stub oracle, so
every assertion about writes is an assertion about rows in the store.
"""

import asyncio
from datetime import date
from decimal import Decimal

from dompetbot.audit import AuditLogger
from dompetbot.models import InboundMessage, QueryIntent, Transaction
from dompetbot.orchestrator import TransactionOrchestrator
from dompetbot.reports import (
    AMOUNT_FORMAT_HINT,
    ENTRY_FAILED,
    ENTRY_FORMAT_HINT,
    HELP_TEXT,
    POCKET_LIST_FAILED,
    QUERY_FAILED,
    QUERY_USAGE_HINT,
    TRANSFER_FAILED,
    TRANSFER_FORMAT_HINT,
)
from dompetbot.services.storage import InMemoryTransactionStore

from tests.conftest import NOW, FailingStore, StubOracle


def _row(tx_type, amount, pocket, day="10/06/2025", category="Lainnya", description="x"):
    return [day, "09:00:00", tx_type, amount, description, category, pocket, "Telegram Bot", "budi"]


def _build(store, oracle, app_settings):
    return TransactionOrchestrator(
        store=store,
        oracle=oracle,
        settings=app_settings,
        audit_logger=AuditLogger(),
        clock=lambda: NOW,
    )


def _send(orchestrator, text, sender="budi"):
    return asyncio.run(orchestrator.handle(InboundMessage(text=text, sender=sender)))


def _ledger(store):
    """Data rows of the store as Transactions."""
    return [Transaction.from_row(row) for row in store.rows[1:]]


class TestRecordEntry:
    """Tests for /pemasukan and /pengeluaran."""

    def test_income_on_empty_ledger(self, orchestrator, store):
        """Test the full path from chat text to a written row."""
        reply = _send(orchestrator, "/pemasukan 500rb gaji ke pocket utama")

        assert store.append_count == 1
        [tx] = _ledger(store)
        assert tx.type.value == "Income"
        assert tx.amount == Decimal("500000")
        assert tx.pocket == "utama"
        assert tx.description == "gaji"
        assert tx.category == "Gaji"
        assert tx.sender == "budi"
        assert tx.source == "Telegram Bot"
        assert tx.date_text == "12/06/2025"
        assert tx.tx_time == "14:30:00"

        assert "500.000" in reply
        assert "🏷️ Kategori: Gaji" in reply
        assert '💳 Saldo pocket "utama": Rp 500.000' in reply

    def test_raw_amount_cell(self, orchestrator, store):
        _send(orchestrator, "/pemasukan 1,5jt bonus ke pocket utama")
        assert store.rows[1][3] == "1500000"

    def test_income_goes_to_default_pocket(self, orchestrator, store):
        _send(orchestrator, "/pemasukan 100k hadiah")
        assert _ledger(store)[0].pocket == "default"

    def test_categorizer_sees_description_and_type(self, orchestrator, oracle):
        _send(orchestrator, "/pemasukan 100k uang saku ke pocket utama")
        [(description, tx_type)] = oracle.categorize_calls
        assert description == "uang saku"
        assert tx_type.value == "Income"

    def test_expense_within_balance(self, app_settings):
        store = InMemoryTransactionStore([_row("Income", "10000", "harian")])
        orchestrator = _build(store, StubOracle(category="Makanan & Minuman"), app_settings)

        reply = _send(orchestrator, "/pengeluaran 10rb bakso dari pocket Harian")

        assert store.append_count == 1
        assert '💳 Saldo pocket "Harian": Rp 0' in reply

    def test_insufficient_funds_writes_nothing(self, app_settings):
        """Test that an expense above the pocket balance is rejected untouched."""
        store = InMemoryTransactionStore([_row("Income", "10000", "harian")])
        oracle = StubOracle()
        orchestrator = _build(store, oracle, app_settings)

        reply = _send(orchestrator, "/pengeluaran 20rb jajan dari pocket harian")

        assert store.append_count == 0
        assert len(store.rows) == 2
        assert oracle.categorize_calls == []
        assert 'Saldo pocket "harian" tidak mencukupi' in reply
        assert "Rp 10.000" in reply
        assert "Rp 20.000" in reply

    def test_other_pockets_do_not_fund_an_expense(self, app_settings):
        store = InMemoryTransactionStore([_row("Income", "1000000", "utama")])
        orchestrator = _build(store, StubOracle(), app_settings)

        _send(orchestrator, "/pengeluaran 5rb parkir dari pocket harian")

        assert store.append_count == 0

    def test_bad_amount_hint(self, orchestrator, store):
        reply = _send(orchestrator, "/pengeluaran 10rbk makan siang")
        assert reply == AMOUNT_FORMAT_HINT
        assert store.append_count == 0

    def test_oversized_amount_hint(self, orchestrator, store):
        reply = _send(orchestrator, "/pemasukan 99999999999999999999999999999 gaji")
        assert reply == AMOUNT_FORMAT_HINT
        assert store.append_count == 0

    def test_missing_description_hint(self, orchestrator, store):
        reply = _send(orchestrator, "/pemasukan 500rb")
        assert reply == ENTRY_FORMAT_HINT
        assert store.append_count == 0

    def test_oracle_failure_uses_default_category(self, store, app_settings):
        """Test that a broken categorizer never blocks the write."""
        orchestrator = _build(store, StubOracle(fail=True), app_settings)

        reply = _send(orchestrator, "/pemasukan 50rb jual barang ke pocket utama")

        assert store.append_count == 1
        assert _ledger(store)[0].category == "Lainnya"
        assert "🏷️ Kategori: Lainnya" in reply

    def test_blank_category_uses_default(self, store, app_settings):
        orchestrator = _build(store, StubOracle(category=""), app_settings)
        _send(orchestrator, "/pemasukan 50rb jual barang")
        assert _ledger(store)[0].category == "Lainnya"

    def test_store_failure_apologises(self, app_settings):
        store = FailingStore(fail_appends_after=0)
        orchestrator = _build(store, StubOracle(), app_settings)

        reply = _send(orchestrator, "/pemasukan 50rb jual barang")

        assert reply == ENTRY_FAILED
        assert len(store.rows) == 1


class TestTransfer:
    """Tests for pocket-to-pocket transfers."""

    def test_transfer_is_two_symmetric_rows(self, app_settings):
        store = InMemoryTransactionStore([_row("Income", "500000", "utama")])
        orchestrator = _build(store, StubOracle(), app_settings)

        reply = _send(orchestrator, "Transfer 100rb dari pocket utama ke pocket harian")

        assert store.append_count == 2
        debit, credit = _ledger(store)[1:]
        assert debit.signed_amount + credit.signed_amount == 0
        assert (debit.pocket, debit.type.value) == ("utama", "Expense")
        assert (credit.pocket, credit.type.value) == ("harian", "Income")
        assert debit.category == credit.category == "Transfer"
        assert debit.source == credit.source == "Telegram Bot - Transfer"
        assert (debit.date_text, debit.tx_time) == (credit.date_text, credit.tx_time)

        assert "💸 Dari: utama → Rp 400.000" in reply
        assert "💰 Ke: harian → Rp 100.000" in reply

    def test_transfer_total_is_unchanged(self, app_settings):
        store = InMemoryTransactionStore([
            _row("Income", "500000", "utama"),
            _row("Income", "20000", "harian"),
        ])
        orchestrator = _build(store, StubOracle(), app_settings)

        before = sum(t.signed_amount for t in _ledger(store))
        _send(orchestrator, "transfer 250k dari pocket utama ke pocket harian")
        after = sum(t.signed_amount for t in _ledger(store))

        assert before == after

    def test_transfer_does_not_ask_the_oracle(self, app_settings):
        store = InMemoryTransactionStore([_row("Income", "500000", "utama")])
        oracle = StubOracle()
        orchestrator = _build(store, oracle, app_settings)

        _send(orchestrator, "transfer 1rb dari pocket utama ke pocket harian")

        assert oracle.categorize_calls == []

    def test_insufficient_funds_writes_nothing(self, app_settings):
        store = InMemoryTransactionStore([_row("Income", "50000", "utama")])
        orchestrator = _build(store, StubOracle(), app_settings)

        reply = _send(orchestrator, "transfer 100rb dari pocket utama ke pocket harian")

        assert store.append_count == 0
        assert reply.startswith("❌ Transfer gagal!")
        assert "Rp 50.000" in reply

    def test_bad_amount_hint(self, orchestrator, store):
        reply = _send(orchestrator, "transfer banyak dari pocket utama ke pocket harian")
        assert reply == TRANSFER_FORMAT_HINT
        assert store.append_count == 0

    def test_second_leg_failure_leaves_debit_only(self, app_settings):
        """
        Test the documented non-atomic transfer.

        The debit leg is already in the ledger when the credit leg fails;
        nothing rolls it back.
        """
        store = FailingStore([_row("Income", "500000", "utama")], fail_appends_after=1)
        orchestrator = _build(store, StubOracle(), app_settings)

        reply = _send(orchestrator, "transfer 100rb dari pocket utama ke pocket harian")

        assert reply == TRANSFER_FAILED
        ledger = _ledger(store)
        assert len(ledger) == 2
        assert ledger[-1].pocket == "utama"
        assert ledger[-1].type.value == "Expense"


class TestPocketQueries:
    """Tests for pocket balance and list replies."""

    def _store(self):
        return InMemoryTransactionStore([
            _row("Income", "500000", "utama", description="gaji"),
            _row("Expense", "25000", "Utama", description="makan"),
            _row("Income", "100000", "harian", description="uang saku"),
        ])

    def test_named_pocket(self, app_settings):
        orchestrator = _build(self._store(), StubOracle(), app_settings)

        reply = _send(orchestrator, "saldo pocket utama")

        lines = reply.splitlines()
        assert lines[0] == "👝 POCKET: UTAMA"
        assert lines[1] == "💰 Saldo: Rp 475.000"
        history = [line for line in lines if line.startswith(("📈", "📉"))]
        assert history[0].endswith("(makan)")
        assert history[1].endswith("(gaji)")

    def test_unknown_pocket_is_empty(self, app_settings):
        orchestrator = _build(self._store(), StubOracle(), app_settings)
        reply = _send(orchestrator, "saldo pocket liburan")
        assert "💰 Saldo: Rp 0" in reply

    def test_recent_limit(self, app_settings):
        rows = [_row("Income", "1000", "utama", description=f"tx{i}") for i in range(9)]
        orchestrator = _build(InMemoryTransactionStore(rows), StubOracle(), app_settings)

        reply = _send(orchestrator, "saldo pocket utama")

        history = [line for line in reply.splitlines() if line.startswith("📈")]
        assert len(history) == app_settings.recent_transactions_limit
        assert history[0].endswith("(tx8)")

    def test_all_pockets(self, app_settings):
        orchestrator = _build(self._store(), StubOracle(), app_settings)

        reply = _send(orchestrator, "saldo pocket")

        assert "💰 utama: Rp 475.000" in reply
        assert "💰 harian: Rp 100.000" in reply
        assert "💎 Total Keseluruhan: Rp 575.000" in reply

    def test_list(self, app_settings):
        orchestrator = _build(self._store(), StubOracle(), app_settings)
        reply = _send(orchestrator, "list pocket")
        assert "✅ utama: Rp 475.000" in reply
        assert "✅ harian: Rp 100.000" in reply

    def test_oversized_cell_does_not_break_reads(self, app_settings):
        """Test that one bad amount cell counts as zero and the rest still load."""
        rows = self._store().rows[1:] + [_row("Income", "1e40", "utama", description="rusak")]
        store = InMemoryTransactionStore(rows)
        orchestrator = _build(store, StubOracle(), app_settings)

        reply = _send(orchestrator, "saldo pocket")

        assert "💰 utama: Rp 475.000" in reply
        assert "💎 Total Keseluruhan: Rp 575.000" in reply

    def test_transfer_into_pocket_named_like_a_keyword(self, app_settings):
        orchestrator = _build(self._store(), StubOracle(), app_settings)

        _send(orchestrator, "transfer 100rb dari pocket utama ke pocket listrik")
        reply = _send(orchestrator, "saldo pocket listrik")

        assert "💰 Saldo: Rp 100.000" in reply

    def test_list_store_failure(self, app_settings):
        orchestrator = _build(FailingStore(fail_reads=True), StubOracle(), app_settings)
        assert _send(orchestrator, "list pocket") == POCKET_LIST_FAILED

    def test_queries_do_not_write(self, app_settings):
        store = self._store()
        orchestrator = _build(store, StubOracle(), app_settings)
        _send(orchestrator, "saldo pocket")
        _send(orchestrator, "list pocket")
        assert store.append_count == 0


class TestDataQuery:
    """Tests for free-form questions."""

    def _store(self):
        return InMemoryTransactionStore([
            _row("Income", "1000000", "utama", day="02/06/2025", category="Gaji"),
            _row("Expense", "40000", "utama", day="09/06/2025", category="Makanan"),
            _row("Expense", "60000", "utama", day="15/06/2025", category="Transportasi"),
            _row("Expense", "99000", "utama", day="08/06/2025", category="Makanan"),
        ])

    def test_report_for_window(self, app_settings):
        intent = QueryIntent.model_validate({
            "period": "minggu ini",
            "startDate": "09/06/2025",
            "endDate": "15/06/2025",
            "type": "expense",
        })
        oracle = StubOracle(intent=intent)
        orchestrator = _build(self._store(), oracle, app_settings)

        reply = _send(orchestrator, "Berapa pengeluaran minggu ini?")

        assert oracle.query_calls == ["Berapa pengeluaran minggu ini?"]
        assert reply.startswith("📊 Laporan minggu ini")
        assert "Total Pengeluaran: Rp 100.000" in reply
        assert "Total Pemasukan: Rp 0" in reply
        assert "Total Transaksi: 2" in reply

    def test_boundaries_are_included(self, app_settings):
        intent = QueryIntent(
            period="custom",
            start_date=date(2025, 6, 8),
            end_date=date(2025, 6, 9),
        )
        orchestrator = _build(self._store(), StubOracle(intent=intent), app_settings)

        reply = _send(orchestrator, "total pengeluaran")

        assert "Total Pengeluaran: Rp 139.000" in reply

    def test_no_intent_gives_usage_hint(self, orchestrator):
        assert _send(orchestrator, "berapa ya") == QUERY_USAGE_HINT

    def test_oracle_failure(self, store, app_settings):
        orchestrator = _build(store, StubOracle(fail=True), app_settings)
        assert _send(orchestrator, "laporan bulan ini") == QUERY_FAILED


class TestStaticReplies:

    def test_help(self, orchestrator):
        assert _send(orchestrator, "/help") == HELP_TEXT

    def test_chatter_gets_no_reply(self, orchestrator, store):
        assert _send(orchestrator, "halo semua") is None
        assert store.append_count == 0


class TestKnownRace:
    """
    Balance checks read, then write, without a lock.

    Two expenses against the same pocket that interleave at the store can
    both pass the check. These tests pin that behaviour down so a change to
    it is deliberate.
    """

    class SlowReadStore(InMemoryTransactionStore):
        """Hands out a snapshot, then yields before returning it."""

        async def read_range(self, start_row, end_row):
            snapshot = await super().read_range(start_row, end_row)
            await asyncio.sleep(0)
            return snapshot

    def test_concurrent_expenses_can_overdraw(self, app_settings):
        store = self.SlowReadStore([_row("Income", "20000", "harian")])
        orchestrator = _build(store, StubOracle(), app_settings)

        async def both():
            return await asyncio.gather(
                orchestrator.handle(InboundMessage(text="/pengeluaran 15rb a dari pocket harian")),
                orchestrator.handle(InboundMessage(text="/pengeluaran 15rb b dari pocket harian")),
            )

        asyncio.run(both())

        assert store.append_count == 2
        ledger = _ledger(store)
        assert sum(t.signed_amount for t in ledger) == Decimal("-10000")

    def test_sequential_expenses_are_guarded(self, app_settings):
        store = self.SlowReadStore([_row("Income", "20000", "harian")])
        orchestrator = _build(store, StubOracle(), app_settings)

        _send(orchestrator, "/pengeluaran 15rb a dari pocket harian")
        reply = _send(orchestrator, "/pengeluaran 15rb b dari pocket harian")

        assert store.append_count == 1
        assert "tidak mencukupi" in reply
