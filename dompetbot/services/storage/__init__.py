"""
Storage Services Package

Provides the abstract ledger store and its implementations. Google Sheets
is the production backend; the in-memory store backs tests and the local
console.
"""

from dompetbot.services.storage.interface import (
    FIRST_DATA_ROW,
    TRANSACTION_COLUMNS,
    ConnectionError,
    StorageError,
    TransactionStore,
)
from dompetbot.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
)
from dompetbot.services.storage.memory import InMemoryTransactionStore

__all__ = [
    # Interface
    "FIRST_DATA_ROW",
    "TRANSACTION_COLUMNS",
    "TransactionStore",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "InMemoryTransactionStore",
]
