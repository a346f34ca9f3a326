"""Ledger aggregation package."""

from dompetbot.ledger.aggregator import (
    all_pocket_balances,
    balance_of,
    filter_by_category,
    filter_by_date_range,
    filter_by_pocket,
    group_by_category,
    pocket_summaries,
    recent_for_pocket,
    summarize_period,
    totals_by_type_and_period,
)

__all__ = [
    "all_pocket_balances",
    "balance_of",
    "filter_by_category",
    "filter_by_date_range",
    "filter_by_pocket",
    "group_by_category",
    "pocket_summaries",
    "recent_for_pocket",
    "summarize_period",
    "totals_by_type_and_period",
]
