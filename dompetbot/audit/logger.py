"""
Audit Logger

Every significant step of handling a message is logged as one structured
event, tagged with a correlation id for that message. This gives:
1. Traceability from an inbound message to the rows it wrote
2. A record of rejected and failed commands
3. Debugging information when a collaborator misbehaves

Logging never breaks the main flow.
"""

import logging
import sys
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog


def configure_logging(debug: bool = False) -> None:
    """Configure stdlib logging and structlog (JSON lines on stderr)."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One per inbound message; pass it through every step that handles it.
    """
    return uuid4()


class AuditLogger:
    """Central audit logging service for message handling."""

    def __init__(self, logger=None):
        self._logger = logger or structlog.get_logger("dompetbot.audit")

    def _emit(self, level: str, event: str, correlation_id: Optional[UUID], **details) -> None:
        try:
            getattr(self._logger, level)(
                event,
                correlation_id=str(correlation_id) if correlation_id else None,
                **details,
            )
        except Exception as e:
            print(f"audit_log_failed event={event} error={e!r}", file=sys.stderr)

    def log_message_received(
        self,
        command: str,
        sender: str,
        correlation_id: UUID,
    ) -> None:
        self._emit("info", "message_classified", correlation_id, command=command, sender=sender)

    def log_transaction_recorded(
        self,
        tx_type: str,
        amount: Decimal,
        pocket: str,
        category: str,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            "info",
            "transaction_recorded",
            correlation_id,
            type=tx_type,
            amount=str(amount),
            pocket=pocket,
            category=category,
        )

    def log_transfer_recorded(
        self,
        amount: Decimal,
        from_pocket: str,
        to_pocket: str,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            "info",
            "transfer_recorded",
            correlation_id,
            amount=str(amount),
            from_pocket=from_pocket,
            to_pocket=to_pocket,
        )

    def log_insufficient_funds(
        self,
        pocket: str,
        balance: Decimal,
        required: Decimal,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            "warning",
            "insufficient_funds",
            correlation_id,
            pocket=pocket,
            balance=str(balance),
            required=str(required),
        )

    def log_parse_failure(self, reason: str, correlation_id: UUID) -> None:
        self._emit("info", "parse_failure", correlation_id, reason=reason)

    def log_query_answered(
        self,
        period: str,
        result_count: int,
        correlation_id: UUID,
    ) -> None:
        self._emit("info", "query_answered", correlation_id, period=period, result_count=result_count)

    def log_collaborator_failure(
        self,
        operation: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        self._emit(
            "error",
            "collaborator_failure",
            correlation_id,
            operation=operation,
            error_type=type(error).__name__,
            error_message=str(error),
        )
