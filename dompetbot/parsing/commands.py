"""
Entry and transfer command parsing.

    /pemasukan 500rb gaji bulanan ke pocket utama
    /pengeluaran 25rb makan siang dari pocket harian
    transfer 100rb dari pocket utama ke pocket harian

Anything that does not fit raises ParseFailure; the orchestrator answers it
with a format hint and writes nothing.
"""

import re
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from dompetbot.errors import AmountFormatError, ParseFailure
from dompetbot.models.command import PocketTransfer, RecordExpense, RecordIncome
from dompetbot.models.transaction import DEFAULT_POCKET, TransactionType
from dompetbot.parsing.amount import parse_amount


INCOME_POCKET_SPLIT = re.compile(r"\s+ke\s+pocket\s+", re.IGNORECASE)
EXPENSE_POCKET_SPLIT = re.compile(r"\s+dari\s+pocket\s+", re.IGNORECASE)


class EntryRequest(BaseModel):
    """A parsed /pemasukan or /pengeluaran command, not yet validated."""
    model_config = ConfigDict(frozen=True)

    type: TransactionType
    amount: Decimal
    description: str
    pocket: str


class TransferRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    from_pocket: str
    to_pocket: str


def parse_entry(command) -> EntryRequest:
    """
    Parse a RecordIncome / RecordExpense command.

    Income names its pocket with "ke pocket <name>", expense with
    "dari pocket <name>"; without one the entry goes to the default pocket.
    """
    if isinstance(command, RecordIncome):
        tx_type, splitter = TransactionType.INCOME, INCOME_POCKET_SPLIT
    elif isinstance(command, RecordExpense):
        tx_type, splitter = TransactionType.EXPENSE, EXPENSE_POCKET_SPLIT
    else:
        raise TypeError(f"Not an entry command: {type(command).__name__}")

    text = command.raw_text.strip()
    parts = text.split()
    if len(parts) < 3:
        raise ParseFailure("Entry needs a command, an amount and a description")

    amount = parse_amount(parts[1])
    if amount is None:
        raise AmountFormatError(f"Unreadable amount: {parts[1]!r}")

    pocket = DEFAULT_POCKET
    head = text
    pieces = splitter.split(text, maxsplit=1)
    if len(pieces) == 2 and pieces[1].strip():
        head, pocket = pieces[0], pieces[1].strip()

    description = " ".join(head.split()[2:])

    return EntryRequest(
        type=tx_type,
        amount=amount,
        description=description,
        pocket=pocket,
    )


def parse_transfer(command: PocketTransfer) -> TransferRequest:
    amount = parse_amount(command.amount_text)
    if amount is None:
        raise AmountFormatError(f"Unreadable amount: {command.amount_text!r}")
    if not command.from_pocket or not command.to_pocket:
        raise ParseFailure("Transfer needs a source and a destination pocket")
    return TransferRequest(
        amount=amount,
        from_pocket=command.from_pocket,
        to_pocket=command.to_pocket,
    )
