"""
Matching strategies for transaction reconciliation.
Each strategy implements one stage of the reconciliation pipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence
import logging

from ..config import EngineConfig
from ..models.transaction import (
    ConsumedIds,
    MatchKind,
    MatchResult,
    NormalizedTransaction,
    id_sort_key,
)
from .similarity import description_similarity

logger = logging.getLogger(__name__)


def days_between(first: NormalizedTransaction, second: NormalizedTransaction) -> int:
    """Absolute number of days between two transaction dates."""
    return abs((first.date - second.date).days)


def describe_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


class MatchingStrategy(ABC):
    """Abstract base class for matching stages."""

    name: str = ""

    def __init__(self, config: EngineConfig):
        """
        Initialize with engine tolerances.

        Args:
            config: Engine configuration for the run
        """
        self.config = config

    @abstractmethod
    def find_matches(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
        consumed: ConsumedIds,
    ) -> list:
        """
        Find results among entries not yet consumed.

        Args:
            statements: All statement transactions of the run
            ledger: All ledger transactions of the run
            consumed: Ids claimed by earlier stages

        Returns:
            Results of this stage, in commit order
        """
        pass

    @staticmethod
    def _available(
        transactions: Sequence[NormalizedTransaction], consumed_ids: frozenset[str]
    ) -> list[NormalizedTransaction]:
        """Unconsumed transactions in ascending id order."""
        remaining = [t for t in transactions if t.id not in consumed_ids]
        return sorted(remaining, key=lambda t: id_sort_key(t.id))


class ExactMatchStrategy(MatchingStrategy):
    """
    Exact match strategy - identical description, same sign, amount within
    the near-zero tolerance. Highest confidence stage.
    """

    name = "exact"

    def find_matches(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
        consumed: ConsumedIds,
    ) -> list[MatchResult]:
        """Pair each statement entry with its closest-dated exact counterpart."""
        matches: list[MatchResult] = []
        claimed_ledger_ids: set[str] = set()

        available_ledger = self._available(ledger, consumed.ledger_ids)

        for statement_txn in self._available(statements, consumed.statement_ids):
            candidates = [
                ledger_txn
                for ledger_txn in available_ledger
                if ledger_txn.id not in claimed_ledger_ids
                and self._is_exact(statement_txn, ledger_txn)
            ]
            if not candidates:
                continue

            # Closest date first; ascending id order breaks ties
            best = min(
                candidates,
                key=lambda t: (days_between(statement_txn, t), id_sort_key(t.id)),
            )
            claimed_ledger_ids.add(best.id)
            matches.append(
                MatchResult(
                    statement_entry=statement_txn,
                    ledger_entry=best,
                    score=1.0,
                    kind=MatchKind.EXACT,
                    reasons=self._reasons(statement_txn, best),
                )
            )

        return matches

    def _is_exact(
        self, statement_txn: NormalizedTransaction, ledger_txn: NormalizedTransaction
    ) -> bool:
        return (
            statement_txn.sign == ledger_txn.sign
            and abs(statement_txn.amount - ledger_txn.amount)
            <= self.config.amount_tolerance
            and statement_txn.normalized_description
            == ledger_txn.normalized_description
        )

    def _reasons(
        self, statement_txn: NormalizedTransaction, ledger_txn: NormalizedTransaction
    ) -> tuple[str, ...]:
        amount_diff = abs(statement_txn.amount - ledger_txn.amount)
        days = days_between(statement_txn, ledger_txn)

        reasons = [
            "amount exact" if amount_diff == 0 else f"amount difference {amount_diff:.2f}",
            "description exact",
            "same date" if days == 0 else f"date within {describe_days(days)}",
            f"direction {statement_txn.sign.value}",
        ]
        return tuple(reasons)


@dataclass(frozen=True)
class _FuzzyCandidate:
    """A scored statement/ledger pair awaiting greedy commit."""

    statement_txn: NormalizedTransaction
    ledger_txn: NormalizedTransaction
    similarity: float
    date_diff: int
    amount_diff: Decimal

    @property
    def order_key(self) -> tuple:
        # Similarity dominates; proximity only separates equal similarities
        return (
            -self.similarity,
            self.date_diff,
            self.amount_diff,
            id_sort_key(self.statement_txn.id),
            id_sort_key(self.ledger_txn.id),
        )


class FuzzyMatchStrategy(MatchingStrategy):
    """
    Fuzzy matching - description similarity above a threshold with date and
    amount inside their tolerance windows.
    """

    name = "fuzzy"

    def find_matches(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
        consumed: ConsumedIds,
    ) -> list[MatchResult]:
        """Greedy one-to-one matching over all qualifying pairs."""
        candidates = self._score_candidates(
            self._available(statements, consumed.statement_ids),
            self._available(ledger, consumed.ledger_ids),
        )
        candidates.sort(key=lambda c: c.order_key)
        logger.debug(f"Fuzzy stage scored {len(candidates)} candidate pairs")

        matches: list[MatchResult] = []
        claimed_statement_ids: set[str] = set()
        claimed_ledger_ids: set[str] = set()

        for candidate in candidates:
            statement_id = candidate.statement_txn.id
            ledger_id = candidate.ledger_txn.id
            if statement_id in claimed_statement_ids or ledger_id in claimed_ledger_ids:
                continue

            claimed_statement_ids.add(statement_id)
            claimed_ledger_ids.add(ledger_id)
            matches.append(
                MatchResult(
                    statement_entry=candidate.statement_txn,
                    ledger_entry=candidate.ledger_txn,
                    score=candidate.similarity,
                    kind=MatchKind.FUZZY,
                    reasons=self._reasons(candidate),
                )
            )

        return matches

    def _score_candidates(
        self,
        statements: list[NormalizedTransaction],
        ledger: list[NormalizedTransaction],
    ) -> list[_FuzzyCandidate]:
        """Score every pair that satisfies sign, amount, date and threshold."""
        candidates: list[_FuzzyCandidate] = []

        for statement_txn in statements:
            for ledger_txn in ledger:
                if statement_txn.sign != ledger_txn.sign:
                    continue

                amount_diff = abs(statement_txn.amount - ledger_txn.amount)
                if amount_diff > self.config.amount_tolerance:
                    continue

                date_diff = days_between(statement_txn, ledger_txn)
                if date_diff > self.config.date_tolerance_days:
                    continue

                similarity = description_similarity(
                    statement_txn.normalized_description,
                    ledger_txn.normalized_description,
                )
                if similarity < self.config.description_threshold:
                    continue

                candidates.append(
                    _FuzzyCandidate(
                        statement_txn=statement_txn,
                        ledger_txn=ledger_txn,
                        similarity=similarity,
                        date_diff=date_diff,
                        amount_diff=amount_diff,
                    )
                )

        return candidates

    def _reasons(self, candidate: _FuzzyCandidate) -> tuple[str, ...]:
        threshold = self.config.description_threshold
        return (
            f"description similarity {candidate.similarity:.0%} "
            f"(threshold {threshold:.0%})",
            f"date difference {describe_days(candidate.date_diff)} "
            f"(tolerance {describe_days(self.config.date_tolerance_days)})",
            f"amount difference {candidate.amount_diff:.2f} "
            f"(tolerance {self.config.amount_tolerance:.2f})",
            f"direction {candidate.statement_txn.sign.value}",
        )
