"""Pytest configuration and fixtures for reconciliation tests."""

from datetime import date
from decimal import Decimal

import pytest

from smart_recon.config import EngineConfig
from smart_recon.models import TransactionSign
from tests.factories import TransactionFactory


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default engine tolerances."""
    return EngineConfig()


@pytest.fixture
def loose_config() -> EngineConfig:
    """Tolerances used by the documented fuzzy and aggregation scenarios."""
    return EngineConfig(
        date_tolerance_days=3,
        description_threshold=0.5,
        amount_tolerance=Decimal("0.01"),
        aggregation_amount_tolerance=Decimal("0.5"),
        aggregation_max_group_size=3,
    )


@pytest.fixture
def mixed_statements():
    """Statement side covering exact, fuzzy, aggregated and unmatched entries."""
    return [
        TransactionFactory.statement("S1", "12.50", "Coffee Shop", on=date(2024, 1, 5)),
        TransactionFactory.statement("S2", "45.00", "AMZN MKTP", on=date(2024, 1, 6)),
        TransactionFactory.statement("S3", "30.00", "Card batch", on=date(2024, 1, 9)),
        TransactionFactory.statement("S4", "35.00", "Card batch", on=date(2024, 1, 10)),
        TransactionFactory.statement("S5", "34.90", "Card batch", on=date(2024, 1, 11)),
        TransactionFactory.statement(
            "S6", "999.00", "Unknown deposit", on=date(2024, 1, 20), sign=TransactionSign.CREDIT
        ),
    ]


@pytest.fixture
def mixed_ledger():
    """Ledger side paired with ``mixed_statements``."""
    return [
        TransactionFactory.ledger("L1", "12.50", "Coffee Shop", on=date(2024, 1, 5)),
        TransactionFactory.ledger("L2", "45.00", "Amazon Marketplace", on=date(2024, 1, 8)),
        TransactionFactory.ledger("L3", "100.00", "Card settlement", on=date(2024, 1, 10)),
        TransactionFactory.ledger("L4", "5000.00", "Office rent", on=date(2024, 2, 1)),
    ]
