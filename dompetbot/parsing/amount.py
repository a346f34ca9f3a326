"""
Amount Parser

Turns Indonesian shorthand amounts into rupiah:

    10rb / 10ribu  ->     10.000
    100k           ->    100.000
    1jt / 1,5juta  ->  1.500.000
    50000          ->     50.000

A comma is the decimal separator ("1,5jt"). Text that mixes markers from
different magnitudes ("10rbk") is rejected rather than guessed at.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from dompetbot.models.transaction import MAX_AMOUNT, normalize_amount


THOUSAND_MARKERS = ("ribu", "rb")
K_MARKERS = ("k",)
MILLION_MARKERS = ("juta", "jt")

_NUMBER = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")

# Checked in priority order; first family present wins
_MAGNITUDES = (
    (THOUSAND_MARKERS, Decimal(1_000)),
    (K_MARKERS, Decimal(1_000)),
    (MILLION_MARKERS, Decimal(1_000_000)),
)


def _to_decimal(text: str) -> Optional[Decimal]:
    text = text.strip().replace(",", ".")
    if not _NUMBER.match(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse an amount token.

    Returns None when the token is not a valid non-negative number once the
    magnitude marker is removed, or when the result exceeds MAX_AMOUNT.
    """
    if not text:
        return None

    clean = text.strip().lower()

    present = [
        (markers, multiplier)
        for markers, multiplier in _MAGNITUDES
        if any(marker in clean for marker in markers)
    ]
    if len(present) > 1:
        return None

    multiplier = Decimal(1)
    if present:
        markers, multiplier = present[0]
        for marker in markers:
            clean = clean.replace(marker, "")

    value = _to_decimal(clean)
    if value is None:
        return None

    amount = value * multiplier
    if amount > MAX_AMOUNT:
        return None

    return normalize_amount(amount)
