"""
In-memory ledger store.

Behaves like the spreadsheet (header in row 1, string cells, append-only)
without any network. Used by the tests and by the local chat console when
Google Sheets is not configured.
"""

from typing import Optional

from dompetbot.models.transaction import Transaction
from dompetbot.services.storage.interface import (
    TRANSACTION_COLUMNS,
    TransactionStore,
)


class InMemoryTransactionStore(TransactionStore):

    def __init__(self, rows: Optional[list[list[str]]] = None):
        # rows are data rows only; the header is kept separately as row 1
        self._rows: list[list[str]] = [list(r) for r in rows or []]
        self.append_count = 0

    @property
    def rows(self) -> list[list[str]]:
        return [list(TRANSACTION_COLUMNS)] + [list(r) for r in self._rows]

    async def append(self, transaction: Transaction) -> bool:
        self._rows.append(transaction.to_row())
        self.append_count += 1
        return True

    async def read_range(self, start_row: int, end_row: int) -> list[list[str]]:
        all_rows = self.rows
        start = max(start_row, 1) - 1
        return [list(r) for r in all_rows[start:max(end_row, 0)]]
