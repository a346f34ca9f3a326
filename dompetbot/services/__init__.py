"""Services package."""

from dompetbot.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    InMemoryTransactionStore,
    StorageError,
    TransactionStore,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "InMemoryTransactionStore",
    "StorageError",
    "TransactionStore",
]
