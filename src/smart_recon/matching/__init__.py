"""Matching engine and strategies."""

from .engine import ReconciliationEngine, reconcile
from .similarity import description_similarity
from .strategies import (
    MatchingStrategy,
    ExactMatchStrategy,
    FuzzyMatchStrategy,
)
from .aggregation import AggregationStrategy

__all__ = [
    "ReconciliationEngine",
    "reconcile",
    "description_similarity",
    "MatchingStrategy",
    "ExactMatchStrategy",
    "FuzzyMatchStrategy",
    "AggregationStrategy",
]
