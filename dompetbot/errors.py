"""
Error taxonomy for dompetbot.

Every failure is terminal for the message that caused it. The orchestrator
turns each kind into a different user-visible reply:

- ParseFailure: corrective format hint, nothing written
- InsufficientFundsError: rejection with current/required amounts
- CollaboratorFailure: generic apology (store or oracle unreachable)
"""

from decimal import Decimal


class DompetBotError(Exception):
    """Base exception for the bot."""
    pass


class ParseFailure(DompetBotError):
    """Malformed amount or a command that does not match its pattern."""
    pass


class InsufficientFundsError(DompetBotError):
    """An expense or transfer would drive a pocket below zero."""

    def __init__(self, pocket: str, balance: Decimal, required: Decimal):
        self.pocket = pocket
        self.balance = balance
        self.required = required
        super().__init__(
            f"Pocket {pocket!r} has {balance}, needs {required}"
        )


class CollaboratorFailure(DompetBotError):
    """An external collaborator (store, oracle, channel) failed."""
    pass


class OracleError(CollaboratorFailure):
    """The classification oracle could not be reached or answered garbage."""
    pass


class AmountFormatError(ParseFailure):
    """The amount token could not be read ("10rbk", "abc")."""
    pass
