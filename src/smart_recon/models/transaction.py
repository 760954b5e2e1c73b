"""Data models for reconciliation transactions and results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
import re


class TransactionSource(Enum):
    """Source set a transaction belongs to."""

    STATEMENT = "statement"
    LEDGER = "ledger"


class TransactionSign(Enum):
    """Direction of cash flow, independent of the amount magnitude."""

    DEBIT = "debit"  # Money out
    CREDIT = "credit"  # Money in


class MatchKind(Enum):
    """Kind of one-to-one match."""

    EXACT = "exact"
    FUZZY = "fuzzy"


_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")
_ID_PARTS_PATTERN = re.compile(r"(\d+)")


def normalize_description(description: str) -> str:
    """Lower-case, strip punctuation and collapse whitespace."""
    desc = _PUNCTUATION_PATTERN.sub("", description.lower())
    return " ".join(desc.split())


def id_sort_key(transaction_id: str) -> tuple:
    """
    Natural ordering key for transaction ids.

    Digit runs compare numerically so that "2" sorts before "10"; the raw id
    is appended so distinct ids never compare equal.
    """
    # split() with a capturing group puts the digit runs at odd indices
    parts = tuple(
        int(part) if index % 2 else part
        for index, part in enumerate(_ID_PARTS_PATTERN.split(transaction_id))
    )
    return parts, transaction_id


@dataclass(frozen=True)
class NormalizedTransaction:
    """
    Normalized transaction representation for reconciliation matching.

    Both the bank statement feed and the general ledger are transformed
    into this structure before they reach the engine.
    """

    # Unique identifier within its source set
    id: str

    # Source set
    source: TransactionSource

    # Calendar date, no time component
    date: date

    # Magnitude, always non-negative; sign carries the direction
    amount: Decimal

    # Cash-flow direction
    sign: TransactionSign

    # Original description text
    description: str = ""

    # Lower-cased, punctuation-stripped form used for scoring
    normalized_description: str = ""

    # Advisory only, never used for matching
    category: Optional[str] = None

    def __post_init__(self) -> None:
        """Derive the normalized description when it was not supplied."""
        if self.description and not self.normalized_description:
            object.__setattr__(
                self,
                "normalized_description",
                normalize_description(self.description),
            )

    @property
    def normalized_date(self) -> str:
        """Canonical ISO form of the transaction date."""
        return self.date.isoformat()


@dataclass(frozen=True)
class ConsumedIds:
    """Ids already claimed by earlier matching stages."""

    statement_ids: frozenset[str] = frozenset()
    ledger_ids: frozenset[str] = frozenset()

    def with_results(
        self, results: list[Union["MatchResult", "AggregationResult"]]
    ) -> "ConsumedIds":
        """Return a new set extended with every id claimed by ``results``."""
        statement_ids = set(self.statement_ids)
        ledger_ids = set(self.ledger_ids)
        for result in results:
            statement_ids.update(result.statement_ids)
            ledger_ids.update(result.ledger_ids)
        return ConsumedIds(frozenset(statement_ids), frozenset(ledger_ids))


@dataclass(frozen=True)
class MatchResult:
    """A confirmed one-to-one pairing."""

    statement_entry: NormalizedTransaction
    ledger_entry: NormalizedTransaction
    score: float  # 0.0 to 1.0
    kind: MatchKind
    reasons: tuple[str, ...] = ()

    @property
    def statement_ids(self) -> tuple[str, ...]:
        return (self.statement_entry.id,)

    @property
    def ledger_ids(self) -> tuple[str, ...]:
        return (self.ledger_entry.id,)

    @property
    def amount_difference(self) -> Decimal:
        """Absolute amount difference between the two sides."""
        return abs(self.statement_entry.amount - self.ledger_entry.amount)

    @property
    def date_difference_days(self) -> int:
        """Absolute day difference between the two sides."""
        return abs((self.statement_entry.date - self.ledger_entry.date).days)


@dataclass(frozen=True)
class AggregationResult:
    """A group of statement entries that together settle one ledger entry."""

    ledger_entry: NormalizedTransaction
    statement_group: tuple[NormalizedTransaction, ...]
    total: Decimal
    difference: Decimal
    reasons: tuple[str, ...] = ()

    @property
    def statement_ids(self) -> tuple[str, ...]:
        return tuple(txn.id for txn in self.statement_group)

    @property
    def ledger_ids(self) -> tuple[str, ...]:
        return (self.ledger_entry.id,)


@dataclass(frozen=True)
class ReconciliationRun:
    """
    Outcome of one reconciliation.

    Partitions both inputs: every statement entry appears in exactly one
    match, one aggregation group, or ``unmatched_statements``; every ledger
    entry in exactly one match, one aggregation, or ``unmatched_ledger``.
    """

    matched: tuple[MatchResult, ...] = ()
    aggregated: tuple[AggregationResult, ...] = ()
    unmatched_statements: tuple[NormalizedTransaction, ...] = ()
    unmatched_ledger: tuple[NormalizedTransaction, ...] = ()

    @property
    def exact_matches(self) -> list[MatchResult]:
        return [m for m in self.matched if m.kind == MatchKind.EXACT]

    @property
    def fuzzy_matches(self) -> list[MatchResult]:
        return [m for m in self.matched if m.kind == MatchKind.FUZZY]


@dataclass
class ReconciliationSummary:
    """Summary of the reconciliation process."""

    # File information
    statement_filename: str
    ledger_filename: str

    # Transaction counts
    total_statement_transactions: int
    total_ledger_transactions: int

    # Match results
    exact_count: int
    fuzzy_count: int
    aggregation_count: int
    aggregated_statement_count: int
    unmatched_statement_count: int
    unmatched_ledger_count: int

    # Amount totals
    statement_total_credits: Decimal
    statement_total_debits: Decimal
    ledger_total_credits: Decimal
    ledger_total_debits: Decimal
    unmatched_statement_amount: Decimal
    unmatched_ledger_amount: Decimal

    # Sum of aggregation differences
    total_aggregation_difference: Decimal

    # Processing metadata
    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None
    matches_by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def matched_count(self) -> int:
        """One-to-one matches of either kind."""
        return self.exact_count + self.fuzzy_count

    @property
    def ledger_coverage(self) -> float:
        """Percentage of ledger entries settled by a match or an aggregation."""
        if self.total_ledger_transactions == 0:
            return 0.0
        settled = self.matched_count + self.aggregation_count
        return (settled / self.total_ledger_transactions) * 100

    @property
    def statement_coverage(self) -> float:
        """Percentage of statement entries settled by a match or an aggregation."""
        if self.total_statement_transactions == 0:
            return 0.0
        settled = self.matched_count + self.aggregated_statement_count
        return (settled / self.total_statement_transactions) * 100

    @property
    def statement_net_change(self) -> Decimal:
        """Net change from statement transactions (credits - debits)."""
        return self.statement_total_credits - self.statement_total_debits

    @property
    def ledger_net_change(self) -> Decimal:
        """Net change from ledger transactions (credits - debits)."""
        return self.ledger_total_credits - self.ledger_total_debits
