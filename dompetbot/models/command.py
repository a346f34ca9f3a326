"""
Command Models

The classifier turns every inbound message into exactly one of these.
They carry only what was read off the text; amounts stay as text until the
orchestrator parses them, so a bad amount can still be answered with a
format hint for the right command.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from dompetbot.models.transaction import DEFAULT_SENDER


class InboundMessage(BaseModel):
    """One text message as delivered by a channel."""
    model_config = ConfigDict(frozen=True)

    text: str
    sender: str = DEFAULT_SENDER


class Command(BaseModel):
    """Base for all classified commands."""
    model_config = ConfigDict(frozen=True)

    raw_text: str = ""


class RecordIncome(Command):
    """'/pemasukan <amount> <description> [ke pocket <name>]'"""
    pass


class RecordExpense(Command):
    """'/pengeluaran <amount> <description> [dari pocket <name>]'"""
    pass


class PocketBalanceQuery(Command):
    """Balance of one pocket, or of every pocket when no name is given."""

    pocket_name: Optional[str] = None


class PocketListQuery(Command):
    pass


class PocketTransfer(Command):
    amount_text: str
    from_pocket: str
    to_pocket: str


class GenericDataQuery(Command):
    """Free-form financial question, interpreted by the oracle."""
    pass


class Help(Command):
    pass


class Ignore(Command):
    """Unrelated chatter. Gets no reply."""
    pass
