"""Statement to ledger reconciliation: exact, fuzzy and aggregated matching."""

__version__ = "0.1.0"

from .config import EngineConfig
from .matching.engine import ReconciliationEngine, reconcile
from .models.transaction import (
    AggregationResult,
    MatchKind,
    MatchResult,
    NormalizedTransaction,
    ReconciliationRun,
    TransactionSign,
    TransactionSource,
)
from .utils.exceptions import InvalidConfigurationError, InvalidInputError

__all__ = [
    "__version__",
    "EngineConfig",
    "ReconciliationEngine",
    "reconcile",
    "AggregationResult",
    "MatchKind",
    "MatchResult",
    "NormalizedTransaction",
    "ReconciliationRun",
    "TransactionSign",
    "TransactionSource",
    "InvalidConfigurationError",
    "InvalidInputError",
]
