"""
Many-to-one aggregation of statement entries against ledger entries.

A bounded subset-sum search: for each leftover ledger entry, combinations of
up to ``aggregation_max_group_size`` statement entries are enumerated over a
date-pruned candidate pool, looking for a total within tolerance.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Optional, Sequence
import logging

from ..models.transaction import (
    AggregationResult,
    ConsumedIds,
    NormalizedTransaction,
    id_sort_key,
)
from .strategies import MatchingStrategy, days_between, describe_days

logger = logging.getLogger(__name__)


def capped_combinations(
    amounts: Sequence[Decimal], size: int, ceiling: Decimal
) -> Iterator[tuple[tuple[int, ...], Decimal]]:
    """
    Index combinations of ``size`` whose total stays within ``ceiling``.

    Yields the same (indices, total) pairs, in the same lexicographic order,
    as filtering ``itertools.combinations`` on the total. Amounts are
    non-negative, so a prefix already above the ceiling is skipped together
    with every combination extending it.
    """
    count = len(amounts)
    indices: list[int] = []
    totals = [Decimal("0")]
    next_index = 0

    while True:
        if len(indices) == size:
            yield tuple(indices), totals[-1]
        elif next_index <= count - (size - len(indices)):
            total = totals[-1] + amounts[next_index]
            if total <= ceiling:
                indices.append(next_index)
                totals.append(total)
            next_index += 1
            continue

        # Backtrack to the next sibling of the last chosen index
        if not indices:
            return
        next_index = indices.pop() + 1
        totals.pop()


@dataclass(frozen=True)
class _GroupChoice:
    """Best combination found so far, as indices into the candidate pool."""

    indices: tuple[int, ...]
    total: Decimal
    difference: Decimal


class AggregationStrategy(MatchingStrategy):
    """
    Aggregation - groups of statement entries whose combined amount settles
    a single ledger entry. Lowest confidence stage, runs last.
    """

    name = "aggregation"

    def find_matches(
        self,
        statements: Sequence[NormalizedTransaction],
        ledger: Sequence[NormalizedTransaction],
        consumed: ConsumedIds,
    ) -> list[AggregationResult]:
        """Process ledger entries in ascending id order against a shrinking pool."""
        results: list[AggregationResult] = []
        claimed_statement_ids: set[str] = set()

        available_statements = self._available(statements, consumed.statement_ids)

        for ledger_txn in self._available(ledger, consumed.ledger_ids):
            pool = [
                statement_txn
                for statement_txn in available_statements
                if statement_txn.id not in claimed_statement_ids
                and self._is_eligible(statement_txn, ledger_txn)
            ]
            if not pool:
                continue

            choice = self._search(ledger_txn, pool)
            if choice is None:
                continue

            group = tuple(pool[i] for i in choice.indices)
            claimed_statement_ids.update(txn.id for txn in group)
            results.append(
                AggregationResult(
                    ledger_entry=ledger_txn,
                    statement_group=group,
                    total=choice.total,
                    difference=choice.difference,
                    reasons=self._reasons(ledger_txn, group, choice),
                )
            )
            logger.debug(
                f"Aggregated {len(group)} statement entries against ledger "
                f"{ledger_txn.id} (difference {choice.difference})"
            )

        return results

    def _is_eligible(
        self, statement_txn: NormalizedTransaction, ledger_txn: NormalizedTransaction
    ) -> bool:
        """Same sign, inside the date window, and not alone above the target."""
        if statement_txn.sign != ledger_txn.sign:
            return False
        if days_between(statement_txn, ledger_txn) > self.config.date_tolerance_days:
            return False
        # Amounts are non-negative, so any group holding this entry overshoots
        ceiling = ledger_txn.amount + self.config.aggregation_amount_tolerance
        return statement_txn.amount <= ceiling

    def _search(
        self, ledger_txn: NormalizedTransaction, pool: list[NormalizedTransaction]
    ) -> Optional[_GroupChoice]:
        """
        Enumerate index combinations of the pool, smallest groups first.

        The pool is in ascending id order and ``capped_combinations`` yields
        index tuples lexicographically, so the first group reaching a given
        (difference, size) also has the lowest id sequence. Only strictly
        better groups replace the current choice.

        Args:
            ledger_txn: Ledger entry to settle
            pool: Eligible statement entries in ascending id order

        Returns:
            Best group found, or None if nothing is within tolerance
        """
        target = ledger_txn.amount
        tolerance = self.config.aggregation_amount_tolerance
        ceiling = target + tolerance
        amounts = [txn.amount for txn in pool]
        max_size = min(self.config.aggregation_max_group_size, len(pool))

        best: Optional[_GroupChoice] = None

        for size in range(1, max_size + 1):
            for indices, total in capped_combinations(amounts, size, ceiling):
                difference = abs(total - target)
                if difference > tolerance:
                    continue
                if best is None or difference < best.difference:
                    best = _GroupChoice(indices, total, difference)

            # Larger groups cannot beat an exact total of a smaller size
            if best is not None and best.difference == 0:
                break

        return best

    def _reasons(
        self,
        ledger_txn: NormalizedTransaction,
        group: tuple[NormalizedTransaction, ...],
        choice: _GroupChoice,
    ) -> tuple[str, ...]:
        noun = "entry" if len(group) == 1 else "entries"
        ids = ", ".join(txn.id for txn in group)
        return (
            f"grouped {len(group)} statement {noun} totalling {choice.total:.2f} "
            f"against ledger {ledger_txn.amount:.2f}, "
            f"difference {choice.difference:.2f}",
            f"difference within tolerance "
            f"{self.config.aggregation_amount_tolerance:.2f}",
            f"all dates within {describe_days(self.config.date_tolerance_days)} "
            f"of ledger date {ledger_txn.normalized_date}",
            f"statement ids: {ids}",
        )
