"""Data models for reconciliation."""

from .transaction import (
    NormalizedTransaction,
    TransactionSource,
    TransactionSign,
    MatchKind,
    MatchResult,
    AggregationResult,
    ReconciliationRun,
    ReconciliationSummary,
    ConsumedIds,
    normalize_description,
    id_sort_key,
)

__all__ = [
    "NormalizedTransaction",
    "TransactionSource",
    "TransactionSign",
    "MatchKind",
    "MatchResult",
    "AggregationResult",
    "ReconciliationRun",
    "ReconciliationSummary",
    "ConsumedIds",
    "normalize_description",
    "id_sort_key",
]
