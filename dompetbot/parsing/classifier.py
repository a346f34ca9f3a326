"""
Command Classifier

Keyword routing for inbound chat text. Rules are checked from most to least
specific; structural pocket commands (balance, list, transfer) are matched
before the generic financial question.
"""

import re

from dompetbot.models.command import (
    Command,
    GenericDataQuery,
    Help,
    Ignore,
    PocketBalanceQuery,
    PocketListQuery,
    PocketTransfer,
    RecordExpense,
    RecordIncome,
)


INCOME_MARKER = "/pemasukan"
EXPENSE_MARKER = "/pengeluaran"
HELP_MARKERS = ("/help", "/bantuan")

POCKET_KEYWORD = "pocket"
BALANCE_KEYWORDS = ("saldo", "balance")
LIST_KEYWORDS = ("list", "daftar")
TRANSFER_KEYWORD = "transfer"

DATA_KEYWORDS = (
    # amounts
    "berapa", "total", "jumlah", "pengeluaran", "pemasukan",
    # periods
    "minggu", "bulan", "tahun", "hari", "kemarin",
    # reports
    "laporan", "ringkasan", "summary",
    # balances
    "saldo", "balance", "pocket",
)

POCKET_NAME_PATTERN = re.compile(r"pocket\s+(.+)$", re.IGNORECASE)
TRANSFER_PATTERN = re.compile(
    r"transfer\s+(\S+)\s+dari\s+pocket\s+(.+?)\s+ke\s+pocket\s+(.+)$",
    re.IGNORECASE,
)


def _has_any(body: str, keywords) -> bool:
    return any(keyword in body for keyword in keywords)


def _has_word(body: str, keywords) -> bool:
    """True when one of the keywords appears as a whole word, not inside a name."""
    pattern = r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b"
    return re.search(pattern, body) is not None


def extract_pocket_name(text: str):
    """Trailing name after the word 'pocket', or None."""
    match = POCKET_NAME_PATTERN.search(text.strip())
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def match_transfer(text: str):
    """Return (amount_text, from_pocket, to_pocket) or None."""
    match = TRANSFER_PATTERN.search(text.strip())
    if not match:
        return None
    amount_text, from_pocket, to_pocket = (g.strip() for g in match.groups())
    return amount_text, from_pocket, to_pocket


def is_data_query(body: str) -> bool:
    return _has_any(body.lower(), DATA_KEYWORDS)


def classify(raw_text: str) -> Command:
    """Route one inbound message to exactly one command."""
    text = (raw_text or "").strip()
    body = text.lower()

    if body.startswith(INCOME_MARKER):
        return RecordIncome(raw_text=text)

    if body.startswith(EXPENSE_MARKER):
        return RecordExpense(raw_text=text)

    has_pocket = _has_word(body, (POCKET_KEYWORD,))

    if has_pocket and _has_word(body, BALANCE_KEYWORDS):
        return PocketBalanceQuery(
            raw_text=text,
            pocket_name=extract_pocket_name(text),
        )

    if has_pocket and _has_word(body, LIST_KEYWORDS):
        return PocketListQuery(raw_text=text)

    if has_pocket and _has_word(body, (TRANSFER_KEYWORD,)):
        legs = match_transfer(text)
        if legs:
            amount_text, from_pocket, to_pocket = legs
            return PocketTransfer(
                raw_text=text,
                amount_text=amount_text,
                from_pocket=from_pocket,
                to_pocket=to_pocket,
            )
        # Malformed transfer: let the later rules decide

    if body in HELP_MARKERS:
        return Help(raw_text=text)

    if is_data_query(body):
        return GenericDataQuery(raw_text=text)

    return Ignore(raw_text=text)
