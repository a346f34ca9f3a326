"""
Main Orchestrator for dompetbot

Ties the parser, classifier, aggregator and formatter to the two external
collaborators (ledger store, classification oracle) and handles one inbound
message end to end:

    text -> classify -> parse -> read ledger -> validate -> write -> reply

Each message is terminal after one reply (or none, for chatter). Failures
never leave work pending: a parse problem gets a format hint, an overdraft
gets a rejection, and a store/oracle failure gets a fixed apology.

KNOWN GAPS:
- A transfer is two appends. If the second one fails the ledger holds only
  the debit leg.
- Balance checks read, then write, without locking. Two messages racing on
  the same pocket can both pass the check.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

import structlog

from dompetbot.agents import ClassificationOracle, GeminiOracle, RuleBasedOracle
from dompetbot.audit import AuditLogger, create_correlation_id
from dompetbot.config import AppSettings, get_settings
from dompetbot.errors import AmountFormatError, InsufficientFundsError, ParseFailure
from dompetbot.ledger import (
    balance_of,
    filter_by_pocket,
    pocket_summaries,
    recent_for_pocket,
    summarize_period,
)
from dompetbot.models import (
    DATE_FORMAT,
    TIME_FORMAT,
    Command,
    GenericDataQuery,
    Help,
    InboundMessage,
    PocketBalanceQuery,
    PocketListQuery,
    PocketTransfer,
    RecordExpense,
    RecordIncome,
    Transaction,
    TransactionType,
    parse_day,
)
from dompetbot.parsing import classify, parse_entry, parse_transfer
from dompetbot.reports import (
    AMOUNT_FORMAT_HINT,
    ENTRY_FAILED,
    ENTRY_FORMAT_HINT,
    HELP_TEXT,
    POCKET_BALANCE_FAILED,
    POCKET_LIST_FAILED,
    QUERY_FAILED,
    QUERY_USAGE_HINT,
    TRANSFER_FAILED,
    TRANSFER_FORMAT_HINT,
    format_all_pocket_balances,
    format_entry_confirmation,
    format_insufficient_funds,
    format_period_report,
    format_pocket_detail,
    format_pocket_list,
    format_transfer_confirmation,
    format_transfer_rejected,
)
from dompetbot.services.storage import (
    GoogleSheetsTransactionStore,
    InMemoryTransactionStore,
    TransactionStore,
)


TRANSFER_CATEGORY = "Transfer"

logger = structlog.get_logger(__name__)


class TransactionOrchestrator:
    """
    Handles one inbound message at a time.

    Holds no ledger state of its own: every balance is recomputed from a
    fresh read of the store, so two orchestrators over the same sheet agree.
    """

    def __init__(
        self,
        store: TransactionStore,
        oracle: ClassificationOracle,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._oracle = oracle
        self._settings = settings or get_settings().app
        self._audit = audit_logger or AuditLogger()
        self._clock = clock or (lambda: datetime.now(ZoneInfo(self._settings.timezone)))

    async def handle(self, message: InboundMessage) -> Optional[str]:
        """
        Process one message and return the reply text.

        Returns None when the message is not meant for the bot.
        """
        correlation_id = create_correlation_id()
        command = classify(message.text)
        self._audit.log_message_received(
            command=type(command).__name__,
            sender=message.sender,
            correlation_id=correlation_id,
        )

        if isinstance(command, (RecordIncome, RecordExpense)):
            return await self.record_entry(command, message.sender, correlation_id)
        if isinstance(command, PocketTransfer):
            return await self.transfer(command, message.sender, correlation_id)
        if isinstance(command, PocketBalanceQuery):
            return await self.pocket_balance(command, correlation_id)
        if isinstance(command, PocketListQuery):
            return await self.pocket_list(correlation_id)
        if isinstance(command, GenericDataQuery):
            return await self.data_query(command, correlation_id)
        if isinstance(command, Help):
            return HELP_TEXT
        return None

    # =========================================================================
    # LEDGER ACCESS
    # =========================================================================

    async def _load_ledger(self) -> list[Transaction]:
        return await self._store.load_transactions(self._settings.max_ledger_rows)

    async def _pocket_balance(self, pocket: str) -> Decimal:
        ledger = await self._load_ledger()
        return balance_of(filter_by_pocket(ledger, pocket))

    async def _require_funds(self, pocket: str, amount: Decimal) -> None:
        balance = await self._pocket_balance(pocket)
        if balance < amount:
            raise InsufficientFundsError(pocket, balance, amount)

    async def _categorize(
        self,
        description: str,
        tx_type: TransactionType,
        correlation_id: UUID,
    ) -> str:
        """Oracle category, or the default label. Never blocks a write."""
        try:
            category = await self._oracle.categorize(description, tx_type)
        except Exception as e:
            self._audit.log_collaborator_failure("categorize", e, correlation_id)
            return self._settings.default_category
        return category or self._settings.default_category

    def _stamp(self) -> tuple[str, str]:
        now = self._clock()
        return now.strftime(DATE_FORMAT), now.strftime(TIME_FORMAT)

    # =========================================================================
    # FLOWS
    # =========================================================================

    async def record_entry(
        self,
        command: Command,
        sender: str,
        correlation_id: UUID,
    ) -> str:
        """
        Record a /pemasukan or /pengeluaran command.

        Expenses are checked against the pocket balance first; a pocket can
        never be overdrawn by an expense command. Income is unconstrained.
        """
        try:
            request = parse_entry(command)
        except AmountFormatError as e:
            self._audit.log_parse_failure(str(e), correlation_id)
            return AMOUNT_FORMAT_HINT
        except ParseFailure as e:
            self._audit.log_parse_failure(str(e), correlation_id)
            return ENTRY_FORMAT_HINT

        try:
            if request.type == TransactionType.EXPENSE:
                await self._require_funds(request.pocket, request.amount)

            category = await self._categorize(request.description, request.type, correlation_id)
            day, time = self._stamp()

            transaction = Transaction(
                tx_date=parse_day(day),
                tx_time=time,
                type=request.type,
                amount=request.amount,
                description=request.description,
                category=category,
                pocket=request.pocket,
                source=self._settings.source_tag,
                sender=sender,
            )
            await self._store.append(transaction)
            self._audit.log_transaction_recorded(
                tx_type=transaction.type.value,
                amount=transaction.amount,
                pocket=transaction.pocket,
                category=transaction.category,
                correlation_id=correlation_id,
            )

            new_balance = await self._pocket_balance(request.pocket)
            return format_entry_confirmation(transaction, new_balance)

        except InsufficientFundsError as e:
            self._audit.log_insufficient_funds(e.pocket, e.balance, e.required, correlation_id)
            return format_insufficient_funds(e)
        except Exception as e:
            self._audit.log_collaborator_failure("record_entry", e, correlation_id)
            return ENTRY_FAILED

    async def transfer(
        self,
        command: PocketTransfer,
        sender: str,
        correlation_id: UUID,
    ) -> str:
        """
        Move money between pockets as two ledger rows.

        The debit leg is written first, then the credit leg. The two appends
        are not atomic: a failure in between leaves only the debit in the
        ledger, and the user gets the transfer apology.
        """
        try:
            request = parse_transfer(command)
        except ParseFailure as e:
            self._audit.log_parse_failure(str(e), correlation_id)
            return TRANSFER_FORMAT_HINT

        try:
            await self._require_funds(request.from_pocket, request.amount)

            day, time = self._stamp()
            source = f"{self._settings.source_tag} - Transfer"

            debit = Transaction(
                tx_date=parse_day(day),
                tx_time=time,
                type=TransactionType.EXPENSE,
                amount=request.amount,
                description=f"Transfer ke pocket {request.to_pocket}",
                category=TRANSFER_CATEGORY,
                pocket=request.from_pocket,
                source=source,
                sender=sender,
            )
            credit = Transaction(
                tx_date=parse_day(day),
                tx_time=time,
                type=TransactionType.INCOME,
                amount=request.amount,
                description=f"Transfer dari pocket {request.from_pocket}",
                category=TRANSFER_CATEGORY,
                pocket=request.to_pocket,
                source=source,
                sender=sender,
            )

            await self._store.append(debit)
            await self._store.append(credit)
            self._audit.log_transfer_recorded(
                amount=request.amount,
                from_pocket=request.from_pocket,
                to_pocket=request.to_pocket,
                correlation_id=correlation_id,
            )

            ledger = await self._load_ledger()
            from_balance = balance_of(filter_by_pocket(ledger, request.from_pocket))
            to_balance = balance_of(filter_by_pocket(ledger, request.to_pocket))
            return format_transfer_confirmation(debit, credit, from_balance, to_balance)

        except InsufficientFundsError as e:
            self._audit.log_insufficient_funds(e.pocket, e.balance, e.required, correlation_id)
            return format_transfer_rejected(e)
        except Exception as e:
            self._audit.log_collaborator_failure("transfer", e, correlation_id)
            return TRANSFER_FAILED

    async def pocket_balance(
        self,
        command: PocketBalanceQuery,
        correlation_id: UUID,
    ) -> str:
        """One pocket with its latest transactions, or every pocket with a grand total."""
        try:
            ledger = await self._load_ledger()

            if not command.pocket_name:
                return format_all_pocket_balances(pocket_summaries(ledger))

            name = command.pocket_name
            balance = balance_of(filter_by_pocket(ledger, name))
            recent = recent_for_pocket(
                ledger,
                name,
                self._settings.recent_transactions_limit,
            )
            return format_pocket_detail(name, balance, recent)

        except Exception as e:
            self._audit.log_collaborator_failure("pocket_balance", e, correlation_id)
            return POCKET_BALANCE_FAILED

    async def pocket_list(self, correlation_id: UUID) -> str:
        try:
            ledger = await self._load_ledger()
            return format_pocket_list(pocket_summaries(ledger))
        except Exception as e:
            self._audit.log_collaborator_failure("pocket_list", e, correlation_id)
            return POCKET_LIST_FAILED

    async def data_query(
        self,
        command: GenericDataQuery,
        correlation_id: UUID,
    ) -> str:
        """
        Answer a free-form question with a period report.

        The oracle only supplies the window; every number comes from the
        ledger.
        """
        try:
            intent = await self._oracle.interpret_query(command.raw_text)
            if intent is None:
                return QUERY_USAGE_HINT

            ledger = await self._load_ledger()
            summary = summarize_period(
                ledger,
                intent.start_date,
                intent.end_date,
                category=intent.category,
                pocket=intent.pocket,
            )
            self._audit.log_query_answered(
                period=intent.period,
                result_count=summary.transaction_count,
                correlation_id=correlation_id,
            )
            return format_period_report(summary, intent)

        except Exception as e:
            self._audit.log_collaborator_failure("data_query", e, correlation_id)
            return QUERY_FAILED


def create_app_components(
    use_storage: bool = True,
    use_llm: bool = True,
) -> tuple[TransactionOrchestrator, TransactionStore]:
    """
    Factory function to create the orchestrator and its collaborators.

    Args:
        use_storage: Use Google Sheets. Falls back to an in-memory ledger
                     when False or when Sheets is not configured.
        use_llm: Use Gemini. Falls back to the rule-based oracle when False
                 or when Gemini is not configured.

    Returns:
        (orchestrator, store)
    """
    settings = get_settings()
    store: TransactionStore
    oracle: ClassificationOracle

    if use_storage:
        try:
            store = GoogleSheetsTransactionStore()
        except Exception as e:
            logger.warning("storage_not_configured", error=str(e))
            store = InMemoryTransactionStore()
    else:
        store = InMemoryTransactionStore()

    if use_llm:
        try:
            oracle = GeminiOracle()
        except Exception as e:
            logger.warning("llm_not_configured", error=str(e))
            oracle = RuleBasedOracle()
    else:
        oracle = RuleBasedOracle()

    orchestrator = TransactionOrchestrator(
        store=store,
        oracle=oracle,
        settings=settings.app,
        audit_logger=AuditLogger(),
    )
    return orchestrator, store
