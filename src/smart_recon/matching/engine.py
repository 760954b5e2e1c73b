"""
Staged matching engine for transaction reconciliation.
Runs exact, fuzzy and aggregation stages in fixed priority order.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence
import logging

from ..config import EngineConfig, validate_engine_config
from ..models.transaction import (
    AggregationResult,
    ConsumedIds,
    MatchResult,
    NormalizedTransaction,
    ReconciliationRun,
    ReconciliationSummary,
    TransactionSign,
    TransactionSource,
)
from ..utils.exceptions import InvalidInputError
from .aggregation import AggregationStrategy
from .strategies import ExactMatchStrategy, FuzzyMatchStrategy, MatchingStrategy

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Main reconciliation engine that orchestrates the matching process.

    Stages run strictly in order of confidence: each one only sees the
    entries earlier stages left unconsumed.
    """

    def __init__(self, config: EngineConfig):
        """
        Initialize the reconciliation engine.

        Args:
            config: Engine tolerances

        Raises:
            InvalidConfigurationError: If a tolerance is out of range
        """
        validate_engine_config(config)
        self.config = config
        self.strategies = self._build_strategies()

    def _build_strategies(self) -> list[MatchingStrategy]:
        """Matching stages in priority order."""
        return [
            ExactMatchStrategy(self.config),
            FuzzyMatchStrategy(self.config),
            AggregationStrategy(self.config),
        ]

    def reconcile(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
    ) -> ReconciliationRun:
        """
        Perform reconciliation between statement and ledger transactions.

        Args:
            statements: Normalized bank statement transactions
            ledger: Normalized general ledger transactions

        Returns:
            Run partitioning both inputs into matched, aggregated and
            unmatched entries

        Raises:
            InvalidInputError: If any transaction is structurally invalid
        """
        _validate_transactions(statements, TransactionSource.STATEMENT)
        _validate_transactions(ledger, TransactionSource.LEDGER)

        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(statements)} statement txns, "
            f"{len(ledger)} ledger txns"
        )

        consumed = ConsumedIds()
        matched: list[MatchResult] = []
        aggregated: list[AggregationResult] = []

        for strategy in self.strategies:
            stage_results = strategy.find_matches(statements, ledger, consumed)
            consumed = consumed.with_results(stage_results)

            for result in stage_results:
                if isinstance(result, AggregationResult):
                    aggregated.append(result)
                else:
                    matched.append(result)

            logger.debug(
                f"Stage {strategy.name}: {len(stage_results)} results, "
                f"{len(statements) - len(consumed.statement_ids)} statement and "
                f"{len(ledger) - len(consumed.ledger_ids)} ledger remaining"
            )

        # Leftovers keep their input order
        run = ReconciliationRun(
            matched=tuple(matched),
            aggregated=tuple(aggregated),
            unmatched_statements=tuple(
                t for t in statements if t.id not in consumed.statement_ids
            ),
            unmatched_ledger=tuple(t for t in ledger if t.id not in consumed.ledger_ids),
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(run.matched)} matches, "
            f"{len(run.aggregated)} aggregations, "
            f"{len(run.unmatched_statements)} statement-only, "
            f"{len(run.unmatched_ledger)} ledger-only"
        )

        return run

    def generate_summary(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
        run: ReconciliationRun,
        statement_filename: str = "",
        ledger_filename: str = "",
        processing_time: float = 0.0,
        config_file_used: Optional[str] = None,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Args:
            statements: All statement transactions
            ledger: All ledger transactions
            run: Result of ``reconcile``
            statement_filename: Name of statement file
            ledger_filename: Name of ledger file
            processing_time: Time taken in seconds
            config_file_used: Configuration file path, if any

        Returns:
            Reconciliation summary object
        """
        exact_count = len(run.exact_matches)
        fuzzy_count = len(run.fuzzy_matches)

        return ReconciliationSummary(
            statement_filename=statement_filename,
            ledger_filename=ledger_filename,
            total_statement_transactions=len(statements),
            total_ledger_transactions=len(ledger),
            exact_count=exact_count,
            fuzzy_count=fuzzy_count,
            aggregation_count=len(run.aggregated),
            aggregated_statement_count=sum(
                len(agg.statement_group) for agg in run.aggregated
            ),
            unmatched_statement_count=len(run.unmatched_statements),
            unmatched_ledger_count=len(run.unmatched_ledger),
            statement_total_credits=_total(statements, TransactionSign.CREDIT),
            statement_total_debits=_total(statements, TransactionSign.DEBIT),
            ledger_total_credits=_total(ledger, TransactionSign.CREDIT),
            ledger_total_debits=_total(ledger, TransactionSign.DEBIT),
            unmatched_statement_amount=sum(
                (t.amount for t in run.unmatched_statements), Decimal("0")
            ),
            unmatched_ledger_amount=sum(
                (t.amount for t in run.unmatched_ledger), Decimal("0")
            ),
            total_aggregation_difference=sum(
                (agg.difference for agg in run.aggregated), Decimal("0")
            ),
            processing_time_seconds=processing_time,
            config_file_used=config_file_used,
            matches_by_kind={
                "exact": exact_count,
                "fuzzy": fuzzy_count,
                "aggregation": len(run.aggregated),
            },
        )


def reconcile(
    statements: Sequence[NormalizedTransaction],
    ledger: Sequence[NormalizedTransaction],
    config: EngineConfig,
) -> ReconciliationRun:
    """
    Reconcile a statement set against a ledger set.

    Args:
        statements: Normalized bank statement transactions
        ledger: Normalized general ledger transactions
        config: Engine tolerances

    Returns:
        Classified reconciliation run

    Raises:
        InvalidConfigurationError: If a tolerance is out of range
        InvalidInputError: If any transaction is structurally invalid
    """
    return ReconciliationEngine(config).reconcile(statements, ledger)


def _total(
    transactions: Sequence[NormalizedTransaction], sign: TransactionSign
) -> Decimal:
    return sum((t.amount for t in transactions if t.sign == sign), Decimal("0"))


def _validate_transactions(
    transactions: Sequence[NormalizedTransaction], source: TransactionSource
) -> None:
    """
    Check every record carries a usable id, amount, date and sign.

    Args:
        transactions: Records supplied for one side of the run
        source: Side the records were supplied as

    Raises:
        InvalidInputError: On the first invalid record
    """
    seen_ids: set[str] = set()

    for position, txn in enumerate(transactions):
        label = f"{source.value} record at position {position}"

        if not isinstance(txn, NormalizedTransaction):
            raise InvalidInputError(
                f"{label} is not a NormalizedTransaction: {type(txn).__name__}"
            )
        if not isinstance(txn.id, str) or not txn.id.strip():
            raise InvalidInputError(f"{label} has a missing or invalid id: {txn.id!r}")
        if txn.id in seen_ids:
            raise InvalidInputError(f"{label} has a duplicate id: {txn.id!r}")
        seen_ids.add(txn.id)

        if txn.source != source:
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has source {txn.source!r}, "
                f"expected {source.value}"
            )
        if not isinstance(txn.amount, Decimal) or not txn.amount.is_finite():
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has an invalid amount: {txn.amount!r}"
            )
        if txn.amount < 0:
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has a negative amount: {txn.amount}"
            )
        # datetime is a date subclass but carries a time component
        if not isinstance(txn.date, date) or isinstance(txn.date, datetime):
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has an invalid date: {txn.date!r}"
            )
        if not isinstance(txn.sign, TransactionSign):
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has an invalid sign: {txn.sign!r}"
            )
        if not isinstance(txn.normalized_description, str):
            raise InvalidInputError(
                f"{label} (id {txn.id!r}) has an invalid description: "
                f"{txn.normalized_description!r}"
            )
