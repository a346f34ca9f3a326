"""Chat reply rendering package."""

from dompetbot.reports.formatter import (
    AMOUNT_FORMAT_HINT,
    ENTRY_FAILED,
    ENTRY_FORMAT_HINT,
    HELP_TEXT,
    POCKET_BALANCE_FAILED,
    POCKET_LIST_FAILED,
    QUERY_FAILED,
    QUERY_USAGE_HINT,
    TRANSFER_FAILED,
    TRANSFER_FORMAT_HINT,
    format_all_pocket_balances,
    format_entry_confirmation,
    format_insufficient_funds,
    format_money,
    format_number,
    format_period_report,
    format_pocket_detail,
    format_pocket_list,
    format_transfer_confirmation,
    format_transfer_rejected,
)

__all__ = [
    "AMOUNT_FORMAT_HINT",
    "ENTRY_FAILED",
    "ENTRY_FORMAT_HINT",
    "HELP_TEXT",
    "POCKET_BALANCE_FAILED",
    "POCKET_LIST_FAILED",
    "QUERY_FAILED",
    "QUERY_USAGE_HINT",
    "TRANSFER_FAILED",
    "TRANSFER_FORMAT_HINT",
    "format_all_pocket_balances",
    "format_entry_confirmation",
    "format_insufficient_funds",
    "format_money",
    "format_number",
    "format_period_report",
    "format_pocket_detail",
    "format_pocket_list",
    "format_transfer_confirmation",
    "format_transfer_rejected",
]
