"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ConfigurationError,
    InvalidConfigurationError,
    InvalidInputError,
    TransactionParseError,
    ReportGenerationError,
)
from .formatting import format_currency
from .logging_config import get_logger, setup_logging

__all__ = [
    "ReconciliationError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "InvalidInputError",
    "TransactionParseError",
    "ReportGenerationError",
    "format_currency",
    "get_logger",
    "setup_logging",
]
