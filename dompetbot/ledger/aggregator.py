"""
Ledger Aggregation

Pure functions over an already-fetched snapshot of the ledger. Nothing here
touches storage or caches a result: pocket balances are recomputed from the
full history every time, which keeps every answer consistent with what is
in the sheet right now.

Ledger order is row order, and rows are appended chronologically, so "last
N" in sequence order means "most recent N".
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dompetbot.models.transaction import (
    DEFAULT_CATEGORY,
    DEFAULT_POCKET,
    PeriodSummary,
    PocketSummary,
    Transaction,
    TransactionType,
)


def filter_by_pocket(
    transactions: Iterable[Transaction],
    name: str,
) -> list[Transaction]:
    """Transactions whose pocket equals name, ignoring case."""
    return [t for t in transactions if t.in_pocket(name)]


def filter_by_date_range(
    transactions: Iterable[Transaction],
    start: date,
    end: date,
) -> list[Transaction]:
    """
    Transactions booked between start and end, both inclusive.

    Rows whose date could not be read are left out.
    """
    return [
        t for t in transactions
        if t.tx_date is not None and start <= t.tx_date <= end
    ]


def filter_by_category(
    transactions: Iterable[Transaction],
    category: str,
) -> list[Transaction]:
    """Case-insensitive substring match on the category label."""
    needle = category.strip().casefold()
    return [t for t in transactions if needle in t.category.casefold()]


def balance_of(transactions: Iterable[Transaction]) -> Decimal:
    """Income adds, Expense subtracts. Empty input is a zero balance."""
    return sum((t.signed_amount for t in transactions), Decimal(0))


def pocket_summaries(transactions: Iterable[Transaction]) -> list[PocketSummary]:
    """
    One summary per pocket, in order of first appearance.

    Pockets are grouped case-insensitively and shown with the spelling they
    were first written with. last_sender is whoever touched the pocket last.
    """
    groups: dict[str, list[Transaction]] = {}
    names: dict[str, str] = {}

    for t in transactions:
        name = t.pocket or DEFAULT_POCKET
        key = name.casefold()
        if key not in groups:
            groups[key] = []
            names[key] = name
        groups[key].append(t)

    return [
        PocketSummary(
            name=names[key],
            balance=balance_of(members),
            last_sender=members[-1].sender,
        )
        for key, members in groups.items()
    ]


def all_pocket_balances(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Pocket name -> balance, in order of first appearance."""
    return {s.name: s.balance for s in pocket_summaries(transactions)}


def group_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Category -> summed amount, in order of first appearance."""
    groups: dict[str, Decimal] = {}
    for t in transactions:
        key = t.category or DEFAULT_CATEGORY
        groups[key] = groups.get(key, Decimal(0)) + t.amount
    return groups


def recent_for_pocket(
    transactions: Sequence[Transaction],
    name: str,
    limit: int,
) -> list[Transaction]:
    """The last `limit` transactions of a pocket, most recent first."""
    if limit <= 0:
        return []
    matching = filter_by_pocket(transactions, name)
    return list(reversed(matching[-limit:]))


def totals_by_type_and_period(
    transactions: Iterable[Transaction],
    tx_type: TransactionType,
    start: date,
    end: date,
) -> Decimal:
    """Sum of one transaction type inside an inclusive date range."""
    in_range = filter_by_date_range(transactions, start, end)
    return sum(
        (t.amount for t in in_range if t.type == tx_type),
        Decimal(0),
    )


def summarize_period(
    transactions: Sequence[Transaction],
    start: date,
    end: date,
    category: Optional[str] = None,
    pocket: Optional[str] = None,
) -> PeriodSummary:
    """
    Build the totals behind a period report.

    category and pocket optionally narrow the window further.
    """
    window = filter_by_date_range(transactions, start, end)
    if pocket:
        window = filter_by_pocket(window, pocket)
    if category:
        window = filter_by_category(window, category)

    income = [t for t in window if t.type == TransactionType.INCOME]
    expense = [t for t in window if t.type == TransactionType.EXPENSE]

    return PeriodSummary(
        income_total=totals_by_type_and_period(window, TransactionType.INCOME, start, end),
        expense_total=totals_by_type_and_period(window, TransactionType.EXPENSE, start, end),
        expense_by_category=group_by_category(expense),
        income_by_category=group_by_category(income),
        transaction_count=len(window),
    )
