"""
Abstract Storage Interface

The ledger store has two operations: append one row, read a range of rows.
Every balance is recomputed from the full history.

Row 1 holds the column headers; transactions start at row 2.
"""

from abc import ABC, abstractmethod

from dompetbot.errors import CollaboratorFailure
from dompetbot.models.transaction import Transaction


TRANSACTION_COLUMNS = [
    "Date",
    "Time",
    "Type",
    "Amount",
    "Description",
    "Category",
    "Pocket",
    "Source",
    "Sender",
]

FIRST_DATA_ROW = 2


class TransactionStore(ABC):
    """
    Abstract interface for the append-only transaction ledger.

    Any storage implementation (Google Sheets, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def append(self, transaction: Transaction) -> bool:
        """
        Append one transaction as the last row of the ledger.

        Returns:
            True if the row was written

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def read_range(self, start_row: int, end_row: int) -> list[list[str]]:
        """
        Read raw rows start_row..end_row (1-based, inclusive).

        Rows come back in sheet order as lists of strings. Trailing empty
        cells may be missing and the result stops at the last filled row.

        Raises:
            StorageError: If the read fails
        """
        pass

    async def load_transactions(self, max_rows: int) -> list[Transaction]:
        """
        Read the ledger (up to max_rows transactions) as strict records.

        Blank rows are skipped; everything else is defaulted once, here.
        """
        rows = await self.read_range(FIRST_DATA_ROW, FIRST_DATA_ROW + max_rows - 1)
        return [
            Transaction.from_row(row)
            for row in rows
            if row and any(str(cell).strip() for cell in row)
        ]


class StorageError(CollaboratorFailure):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
