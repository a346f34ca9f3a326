"""Text parsing package: amounts, command classification, command patterns."""

from dompetbot.parsing.amount import parse_amount
from dompetbot.parsing.classifier import (
    classify,
    extract_pocket_name,
    is_data_query,
    match_transfer,
)
from dompetbot.parsing.commands import (
    EntryRequest,
    TransferRequest,
    parse_entry,
    parse_transfer,
)

__all__ = [
    "EntryRequest",
    "TransferRequest",
    "classify",
    "extract_pocket_name",
    "is_data_query",
    "match_transfer",
    "parse_amount",
    "parse_entry",
    "parse_transfer",
]
