"""
dompetbot - chat-driven personal finance ledger.

Income, expenses and pocket transfers are recorded as rows in a Google
Sheet; balances and reports are always recomputed from those rows.
"""

__version__ = "0.1.0"
