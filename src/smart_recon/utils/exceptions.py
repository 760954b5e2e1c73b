"""Custom exceptions for the reconciliation application."""

from typing import Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """Engine tolerance outside its allowed range."""

    pass


class InvalidInputError(ReconciliationError):
    """Normalized transaction with a missing or invalid required field."""

    pass


class TransactionParseError(ReconciliationError):
    """Error reading or normalizing tabular transaction input."""

    def __init__(self, message: str, row_number: Optional[int] = None):
        if row_number is not None:
            message = f"Row {row_number}: {message}"
        super().__init__(message)
        self.row_number = row_number


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
