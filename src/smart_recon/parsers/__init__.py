"""Parsers and normalization for statement and ledger CSV data."""

from .csv_parser import CSVTransactionParser
from .normalizer import TransactionNormalizer

__all__ = ["CSVTransactionParser", "TransactionNormalizer"]
