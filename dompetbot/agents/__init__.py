"""AI oracle package."""

from dompetbot.agents.oracle import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    ClassificationOracle,
    GeminiOracle,
    RuleBasedOracle,
    intent_from_answer,
    match_category,
    resolve_period,
)

__all__ = [
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "ClassificationOracle",
    "GeminiOracle",
    "RuleBasedOracle",
    "intent_from_answer",
    "match_category",
    "resolve_period",
]
