"""
Classification Oracle

The LLM does two small jobs and nothing else:

1. CATEGORIZE: pick a category label for a new transaction
2. INTERPRET: turn a free-text question into a QueryIntent (period + dates)

It is treated as untrusted and best-effort. It NEVER sees the ledger and
NEVER computes a number; all totals come from the aggregator. When it fails
or answers nonsense, categorize() falls back to the default label and
interpret_query() falls back to deterministic period resolution, then None.
"""

import json
import re
from abc import ABC, abstractmethod
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import google.generativeai as genai
import structlog
from pydantic import ValidationError

from dompetbot.config import AppSettings, GeminiSettings, get_settings
from dompetbot.errors import OracleError
from dompetbot.models.transaction import (
    DATE_FORMAT,
    QueryIntent,
    TransactionType,
)


INCOME_CATEGORIES = [
    "Gaji",
    "Freelance",
    "Bisnis",
    "Investasi",
    "Bonus",
    "Hadiah",
    "Lainnya",
]

EXPENSE_CATEGORIES = [
    "Makanan & Minuman",
    "Transportasi",
    "Belanja",
    "Tagihan",
    "Kesehatan",
    "Hiburan",
    "Pendidikan",
    "Investasi",
    "Lainnya",
]

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]

MONTHS = {
    "januari": 1, "februari": 2, "maret": 3, "april": 4,
    "mei": 5, "juni": 6, "juli": 7, "agustus": 8,
    "september": 9, "oktober": 10, "november": 11, "desember": 12,
}

logger = structlog.get_logger(__name__)


class ClassificationOracle(ABC):
    """Capability interface; tests substitute a deterministic stub."""

    @abstractmethod
    async def categorize(self, description: str, tx_type: TransactionType) -> str:
        """Category label for a transaction. Never raises."""
        pass

    @abstractmethod
    async def interpret_query(self, text: str) -> Optional[QueryIntent]:
        """Structured reading of a data question, or None if it isn't one."""
        pass


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def resolve_period(label: Optional[str], today: date) -> Optional[tuple[date, date]]:
    """
    Convert an Indonesian period label to an inclusive date range.

    This is DETERMINISTIC - no LLM involvement. Weeks run Monday to Sunday.
    """
    if not label:
        return None

    label = label.lower().strip()

    if label == "hari ini":
        return today, today

    if label == "kemarin":
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday

    if label == "minggu ini":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)

    if label == "minggu lalu":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)

    if label == "bulan ini":
        return _month_bounds(today.year, today.month)

    if label == "bulan lalu":
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return _month_bounds(last_of_previous.year, last_of_previous.month)

    if label == "tahun ini":
        return date(today.year, 1, 1), date(today.year, 12, 31)

    if label == "tahun lalu":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    # "7 hari terakhir"
    days_match = re.search(r"(\d+)\s+hari\s+terakhir", label)
    if days_match:
        days = int(days_match.group(1))
        if days < 1:
            return None
        return today - timedelta(days=days - 1), today

    for month_name, month_num in MONTHS.items():
        if month_name in label:
            year_match = re.search(r"20\d{2}", label)
            if year_match:
                year = int(year_match.group())
            else:
                # A month later than this one must mean last year
                year = today.year if month_num <= today.month else today.year - 1
            return _month_bounds(year, month_num)

    year_match = re.search(r"20\d{2}", label)
    if year_match:
        year = int(year_match.group())
        return date(year, 1, 1), date(year, 12, 31)

    return None


def _extract_json(text: str) -> Optional[dict]:
    """Pull the first {...} block out of a model answer."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def intent_from_answer(text: Optional[str], today: date) -> Optional[QueryIntent]:
    """
    Validate the model's JSON answer into a QueryIntent.

    Bad or missing dates are recomputed from the period label when it is
    one we know; anything else is rejected.
    """
    if not text or text.strip().lower() == "null":
        return None

    data = _extract_json(text)
    if data is None:
        return None

    try:
        return QueryIntent.model_validate(data)
    except ValidationError:
        pass

    resolved = resolve_period(data.get("period"), today)
    if resolved is None:
        return None

    start, end = resolved
    patched = {
        **data,
        "startDate": start.strftime(DATE_FORMAT),
        "endDate": end.strftime(DATE_FORMAT),
    }
    patched.pop("start_date", None)
    patched.pop("end_date", None)
    try:
        return QueryIntent.model_validate(patched)
    except ValidationError:
        return None


def match_category(answer: Optional[str], tx_type: TransactionType) -> Optional[str]:
    """Map a free-text model answer onto a known category label."""
    if not answer:
        return None
    choices = INCOME_CATEGORIES if tx_type == TransactionType.INCOME else EXPENSE_CATEGORIES
    cleaned = answer.strip().strip(".\"'*").casefold()
    for choice in choices:
        if cleaned == choice.casefold():
            return choice
    for choice in choices:
        if choice.casefold() in cleaned:
            return choice
    return None


class GeminiOracle(ClassificationOracle):
    """
    Gemini-backed oracle.

    BOUNDARIES:
    - NEVER sees stored transactions
    - NEVER blocks a write: categorize() always returns a label
    - Answers are validated before anything downstream trusts them
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        app_settings: Optional[AppSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._app_settings = app_settings or get_settings().app
        self._clock = clock or (lambda: datetime.now(ZoneInfo(self._app_settings.timezone)))
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def _ask(self, prompt: str) -> str:
        try:
            response = await self._model.generate_content_async(prompt)
            return response.text.strip()
        except Exception as e:
            # response.text raises too when the answer was blocked
            raise OracleError(f"Gemini request failed: {e}") from e

    async def categorize(self, description: str, tx_type: TransactionType) -> str:
        """
        Suggest a category for a new transaction.

        Falls back to the default category on any failure; a categorization
        problem must never stop a transaction from being recorded.
        """
        default = self._app_settings.default_category
        kind = "PEMASUKAN" if tx_type == TransactionType.INCOME else "PENGELUARAN"
        choices = INCOME_CATEGORIES if tx_type == TransactionType.INCOME else EXPENSE_CATEGORIES

        prompt = f"""Kategorikan transaksi berikut dalam bahasa Indonesia:

Jenis: {kind}
Deskripsi: {description}

Pilih salah satu kategori berikut:
{chr(10).join(f"- {c}" for c in choices)}

Jawab hanya dengan nama kategori saja, tanpa penjelasan tambahan."""

        try:
            answer = await self._ask(prompt)
        except OracleError as e:
            logger.warning("categorize_failed", error=str(e), description=description)
            return default

        return match_category(answer, tx_type) or default

    async def interpret_query(self, text: str) -> Optional[QueryIntent]:
        """
        Parse a data question into a QueryIntent.

        Returns None when the question is not about the ledger or the model
        cannot be reached.
        """
        now = self._clock()
        today = now.date()

        prompt = f"""Analisis query berikut dan tentukan periode waktu yang diminta:

Query: "{text}"

Berdasarkan query tersebut, tentukan:
1. Periode waktu (hari ini, kemarin, minggu ini, bulan ini, tahun ini, dll)
2. Tanggal mulai (format DD/MM/YYYY)
3. Tanggal akhir (format DD/MM/YYYY)
4. Jenis data yang diminta (pengeluaran, pemasukan, atau keduanya)
5. Kategori atau pocket jika disebutkan secara eksplisit

Tanggal hari ini: {today.strftime(DATE_FORMAT)}
Hari: {DAY_NAMES[today.weekday()]}

Jawab dalam format JSON seperti ini:
{{
"period": "minggu ini",
"startDate": "06/06/2025",
"endDate": "12/06/2025",
"type": "expense|income|both",
"intent": "summary|total|balance",
"category": null,
"pocket": null
}}

Jika query tidak jelas atau tidak berkaitan dengan data keuangan, jawab null."""

        try:
            answer = await self._ask(prompt)
        except OracleError as e:
            logger.warning("interpret_query_failed", error=str(e))
            return None

        intent = intent_from_answer(answer, today)
        if intent is None:
            logger.info("interpret_query_no_intent", answer=answer[:200])
        return intent


class RuleBasedOracle(ClassificationOracle):
    """
    Offline oracle used when no LLM is configured.

    Categories always fall back to the default label; questions are only
    understood when they name a period resolve_period() knows.
    """

    PERIOD_LABELS = [
        "hari ini",
        "kemarin",
        "minggu lalu",
        "minggu ini",
        "bulan lalu",
        "bulan ini",
        "tahun lalu",
        "tahun ini",
    ]

    def __init__(
        self,
        app_settings: Optional[AppSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._app_settings = app_settings or get_settings().app
        self._clock = clock or (lambda: datetime.now(ZoneInfo(self._app_settings.timezone)))

    async def categorize(self, description: str, tx_type: TransactionType) -> str:
        return self._app_settings.default_category

    async def interpret_query(self, text: str) -> Optional[QueryIntent]:
        body = text.lower()
        today = self._clock().date()

        label = next((p for p in self.PERIOD_LABELS if p in body), None)
        resolved = resolve_period(label, today) if label else resolve_period(body, today)
        if resolved is None:
            return None

        if "pengeluaran" in body:
            data_type = "expense"
        elif "pemasukan" in body:
            data_type = "income"
        else:
            data_type = "both"

        start, end = resolved
        return QueryIntent(
            period=label or text.strip(),
            start_date=start,
            end_date=end,
            data_type=data_type,
        )
