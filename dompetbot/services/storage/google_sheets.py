"""
Google Sheets Storage Implementation

The ledger lives in a single worksheet, one transaction per row, so the
owner can read and fix their own books directly in Sheets.

TRADEOFFS:
- No transactions: the two legs of a pocket transfer are two appends
- Appends are not idempotent, so only reads are retried
- No server-side queries: the whole ledger is read and filtered in Python
- Not suitable for high-volume data (we're fine for personal use)
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from dompetbot.config import GoogleSheetsSettings, get_settings
from dompetbot.models.transaction import Transaction
from dompetbot.services.storage.interface import (
    TRANSACTION_COLUMNS,
    ConnectionError,
    StorageError,
    TransactionStore,
)


SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

LAST_COLUMN = chr(ord("A") + len(TRANSACTION_COLUMNS) - 1)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheet: Optional[gspread.Worksheet] = None
        self._settings = settings or get_settings().google_sheets

    def _credentials(self) -> Credentials:
        if self._settings.credentials_path:
            return Credentials.from_service_account_file(
                self._settings.credentials_path,
                scopes=SCOPES,
            )
        return Credentials.from_service_account_info(
            self._settings.service_account_info,
            scopes=SCOPES,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                self._client = gspread.authorize(self._credentials())
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_ledger_sheet(self) -> gspread.Worksheet:
        """Get or create the ledger worksheet, making sure it has headers."""
        if self._worksheet is not None:
            return self._worksheet

        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )

        # Sheets created by hand often start out completely empty
        if not sheet.row_values(1):
            sheet.update(
                values=[TRANSACTION_COLUMNS],
                range_name=f"A1:{LAST_COLUMN}1",
                value_input_option="RAW",
            )

        self._worksheet = sheet
        return sheet


class GoogleSheetsTransactionStore(TransactionStore):
    """
    Google Sheets implementation of the ledger store.

    Cells are written RAW so dates stay as DD/MM/YYYY text instead of being
    reinterpreted by the spreadsheet locale.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def append(self, transaction: Transaction) -> bool:
        """
        Append a transaction row to the ledger sheet.

        Not retried: a timeout after Sheets has committed the row would
        write it twice.
        """
        try:
            sheet = self._client.get_ledger_sheet()
            sheet.append_row(
                transaction.to_row(),
                value_input_option="RAW",
                insert_data_option="INSERT_ROWS",
            )
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to append transaction: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def read_range(self, start_row: int, end_row: int) -> list[list[str]]:
        """Read rows start_row..end_row of the ledger sheet."""
        if end_row < start_row:
            return []
        try:
            sheet = self._client.get_ledger_sheet()
            values = sheet.get(f"A{start_row}:{LAST_COLUMN}{end_row}")
            return [list(row) for row in values]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read transactions: {e}")
