"""
Data Models Package

Pydantic models for ledger rows, classified commands, query intents and
aggregation results.
"""

from dompetbot.models.command import (
    Command,
    GenericDataQuery,
    Help,
    Ignore,
    InboundMessage,
    PocketBalanceQuery,
    PocketListQuery,
    PocketTransfer,
    RecordExpense,
    RecordIncome,
)
from dompetbot.models.transaction import (
    DATE_FORMAT,
    DEFAULT_CATEGORY,
    DEFAULT_POCKET,
    DEFAULT_SENDER,
    MAX_AMOUNT,
    TIME_FORMAT,
    DataType,
    IntentKind,
    PeriodSummary,
    PocketSummary,
    QueryIntent,
    Transaction,
    TransactionType,
    format_day,
    normalize_amount,
    parse_day,
)

__all__ = [
    # Commands
    "Command",
    "GenericDataQuery",
    "Help",
    "Ignore",
    "InboundMessage",
    "PocketBalanceQuery",
    "PocketListQuery",
    "PocketTransfer",
    "RecordExpense",
    "RecordIncome",
    # Ledger
    "DATE_FORMAT",
    "DEFAULT_CATEGORY",
    "DEFAULT_POCKET",
    "DEFAULT_SENDER",
    "MAX_AMOUNT",
    "TIME_FORMAT",
    "DataType",
    "IntentKind",
    "PeriodSummary",
    "PocketSummary",
    "QueryIntent",
    "Transaction",
    "TransactionType",
    "format_day",
    "normalize_amount",
    "parse_day",
]
