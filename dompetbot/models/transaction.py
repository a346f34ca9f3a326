"""
Core Data Models for dompetbot

These models define the strict schemas for all data flowing through the
system. The spreadsheet is loosely typed (string cells, optional trailing
columns); rows are turned into strict Transaction records exactly once, at
the read boundary, so aggregation code never has to second-guess a field.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M:%S"

DEFAULT_POCKET = "default"
DEFAULT_SENDER = "anonymous"
DEFAULT_CATEGORY = "Lainnya"

# One quadrillion rupiah. Ledger totals over the largest row window stay
# inside the default decimal context precision.
MAX_AMOUNT = Decimal(10) ** 15


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money for a ledger row."""
    INCOME = "Income"
    EXPENSE = "Expense"


class DataType(str, Enum):
    """Which side of the ledger a query asks about."""
    EXPENSE = "expense"
    INCOME = "income"
    BOTH = "both"


class IntentKind(str, Enum):
    """What the user wants out of a data query."""
    SUMMARY = "summary"
    TOTAL = "total"
    BALANCE = "balance"


# =============================================================================
# HELPERS
# =============================================================================

def parse_day(value: Optional[str]) -> Optional[date]:
    """Parse a DD/MM/YYYY cell. Returns None for blanks and garbage."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def format_day(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def normalize_amount(value: Decimal) -> Decimal:
    """Drop a trailing ".0" so whole rupiah amounts are stored as integers."""
    if value == value.to_integral_value():
        try:
            return value.quantize(Decimal(1))
        except InvalidOperation:
            # More integer digits than the context precision holds
            return value
    return value.normalize()


def lenient_amount(value: Optional[str]) -> Decimal:
    """Read an amount cell; anything unreadable, negative or oversized counts as zero."""
    if value is None:
        return Decimal(0)
    text = str(value).strip().replace(",", ".")
    if not text:
        return Decimal(0)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        return Decimal(0)
    return normalize_amount(amount)


# =============================================================================
# LEDGER RECORD
# =============================================================================

class Transaction(BaseModel):
    """
    One immutable ledger row.

    Corrections are new transactions; nothing here is ever updated or
    deleted. The column order of to_row()/from_row() is the sheet layout:
    date, time, type, amount, description, category, pocket, source, sender.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    tx_date: Optional[date] = Field(
        default=None,
        description="Booking day; None when the stored cell is unreadable"
    )
    tx_time: str = Field(
        default="",
        description="Booking time as HH:MM:SS"
    )
    type: Optional[TransactionType] = Field(
        default=None,
        description="Income or Expense; None for unrecognised rows"
    )
    amount: Decimal = Field(
        default=Decimal(0),
        ge=0,
        le=MAX_AMOUNT,
        description="Non-negative amount in rupiah"
    )
    description: str = ""
    category: str = DEFAULT_CATEGORY
    pocket: str = DEFAULT_POCKET
    source: str = ""
    sender: str = DEFAULT_SENDER

    @field_validator('pocket')
    @classmethod
    def default_pocket(cls, v: str) -> str:
        return v or DEFAULT_POCKET

    @field_validator('sender')
    @classmethod
    def default_sender(cls, v: str) -> str:
        return v or DEFAULT_SENDER

    @property
    def signed_amount(self) -> Decimal:
        """Income counts up, Expense counts down, anything else is zero."""
        if self.type == TransactionType.INCOME:
            return self.amount
        if self.type == TransactionType.EXPENSE:
            return -self.amount
        return Decimal(0)

    @property
    def date_text(self) -> str:
        return format_day(self.tx_date)

    def in_pocket(self, name: str) -> bool:
        """Pocket identity is case-insensitive name equality."""
        return self.pocket.casefold() == name.strip().casefold()

    def to_row(self) -> list[str]:
        """Convert to a spreadsheet row."""
        return [
            self.date_text,
            self.tx_time,
            self.type.value if self.type else "",
            str(self.amount),
            self.description,
            self.category,
            self.pocket,
            self.source,
            self.sender,
        ]

    @classmethod
    def from_row(cls, row: list) -> "Transaction":
        """
        Convert a spreadsheet row to a Transaction.

        Sparse rows are normal: the sheet drops trailing empty cells, and
        older rows predate the pocket/source/sender columns.
        """
        def safe_get(index: int, default: str = "") -> str:
            try:
                value = row[index]
            except IndexError:
                return default
            if value is None or str(value).strip() == "":
                return default
            return str(value).strip()

        type_text = safe_get(2)
        try:
            tx_type = TransactionType(type_text) if type_text else None
        except ValueError:
            tx_type = None

        return cls(
            tx_date=parse_day(safe_get(0)),
            tx_time=safe_get(1),
            type=tx_type,
            amount=lenient_amount(safe_get(3, "0")),
            description=safe_get(4),
            category=safe_get(5, DEFAULT_CATEGORY),
            pocket=safe_get(6, DEFAULT_POCKET),
            source=safe_get(7),
            sender=safe_get(8, DEFAULT_SENDER),
        )


# =============================================================================
# QUERY MODELS
# =============================================================================

class QueryIntent(BaseModel):
    """
    Structured reading of a free-text data question.

    Produced by the classification oracle, used for exactly one report and
    then discarded. The oracle answers in camelCase JSON; both spellings are
    accepted.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    period: str = Field(
        default="",
        description="Human label, e.g. 'minggu ini'"
    )
    start_date: date = Field(
        ...,
        validation_alias=AliasChoices("start_date", "startDate"),
    )
    end_date: date = Field(
        ...,
        validation_alias=AliasChoices("end_date", "endDate"),
    )
    data_type: DataType = Field(
        default=DataType.BOTH,
        validation_alias=AliasChoices("data_type", "dataType", "type"),
    )
    intent: IntentKind = IntentKind.SUMMARY

    # Optional narrowing filters
    category: Optional[str] = None
    pocket: Optional[str] = None

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def parse_wire_date(cls, v):
        if isinstance(v, str):
            parsed = parse_day(v)
            if parsed is None:
                raise ValueError(f"Expected DD/MM/YYYY, got {v!r}")
            return parsed
        return v

    @field_validator('data_type', mode='before')
    @classmethod
    def lenient_data_type(cls, v):
        # The oracle sometimes echoes the template "expense|income|both"
        if isinstance(v, str):
            v = v.strip().lower()
            return v if v in {d.value for d in DataType} else DataType.BOTH
        return v

    @field_validator('intent', mode='before')
    @classmethod
    def lenient_intent(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v if v in {i.value for i in IntentKind} else IntentKind.SUMMARY
        return v

    @field_validator('category', 'pocket', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def validate_range(self) -> 'QueryIntent':
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    @property
    def start_text(self) -> str:
        return format_day(self.start_date)

    @property
    def end_text(self) -> str:
        return format_day(self.end_date)


# =============================================================================
# AGGREGATION RESULTS
# =============================================================================

class PocketSummary(BaseModel):
    """Balance of one pocket, derived from the ledger."""

    name: str
    balance: Decimal
    last_sender: str = DEFAULT_SENDER


class PeriodSummary(BaseModel):
    """Totals for one reporting window."""

    income_total: Decimal = Decimal(0)
    expense_total: Decimal = Decimal(0)
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)
    income_by_category: dict[str, Decimal] = Field(default_factory=dict)
    transaction_count: int = Field(default=0, ge=0)

    @property
    def net(self) -> Decimal:
        return self.income_total - self.expense_total
