"""
Normalization of raw CSV rows into engine-ready transactions.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging
import re

import pandas as pd

from ..config import InputConfig, NormalizationConfig
from ..models.transaction import (
    NormalizedTransaction,
    TransactionSign,
    TransactionSource,
    normalize_description,
)
from ..utils.exceptions import TransactionParseError

logger = logging.getLogger(__name__)

_AMOUNT_NOISE = re.compile(r"[^A-Za-z0-9.+\-]")
# Optional upper-case currency code before or after the number
_AMOUNT_PATTERN = re.compile(
    r"(?P<sign>[+-]?)(?:[A-Z]{1,3})?"
    r"(?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"(?:[A-Z]{1,3})?"
)


class TransactionNormalizer:
    """
    Turns raw rows into NormalizedTransaction records.

    Handles canonical date parsing, amount magnitude and sign inference,
    description cleanup and advisory categorisation.
    """

    def __init__(
        self,
        normalization: Optional[NormalizationConfig] = None,
        input_config: Optional[InputConfig] = None,
    ):
        """
        Initialize the normalizer.

        Args:
            normalization: Sign keywords and category rules
            input_config: Date formats and invalid-row policy
        """
        self.normalization = normalization or NormalizationConfig()
        self.input_config = input_config or InputConfig()

        self._debit_types = {t.lower() for t in self.normalization.debit_types}
        self._credit_types = {t.lower() for t in self.normalization.credit_types}

    def normalize_dataset(
        self, rows: list[dict[str, Any]], source: TransactionSource
    ) -> list[NormalizedTransaction]:
        """
        Normalize every row of one side.

        Args:
            rows: Raw rows from the CSV parser
            source: Side the rows belong to

        Returns:
            Normalized transactions in row order

        Raises:
            TransactionParseError: On an invalid row or a duplicate id, unless
                invalid rows are configured to be skipped
        """
        transactions: list[NormalizedTransaction] = []
        seen_ids: set[str] = set()

        for position, row in enumerate(rows, start=1):
            row_number = row.get("row_number", position)
            try:
                txn = self.normalize_row(row, source)
                if txn.id in seen_ids:
                    raise TransactionParseError(
                        f"Duplicate id {txn.id!r}", row_number=row_number
                    )
            except TransactionParseError as e:
                if not self.input_config.skip_invalid_rows:
                    raise
                logger.warning(f"Skipping {source.value} row: {e}")
                continue

            seen_ids.add(txn.id)
            transactions.append(txn)

        logger.info(f"Normalized {len(transactions)} {source.value} transactions")
        return transactions

    def normalize_row(
        self, row: dict[str, Any], source: TransactionSource
    ) -> NormalizedTransaction:
        """
        Convert a raw row to a NormalizedTransaction.

        Args:
            row: Raw row with id, date, description, amount and type
            source: Side the row belongs to

        Returns:
            Normalized transaction

        Raises:
            TransactionParseError: If id, date or amount cannot be used
        """
        row_number = row.get("row_number")

        txn_id = str(row.get("id") or "").strip()
        if not txn_id:
            raise TransactionParseError("Missing id", row_number=row_number)

        txn_date = self.parse_date(row.get("date"))
        if txn_date is None:
            raise TransactionParseError(
                f"Invalid date: {row.get('date')!r}", row_number=row_number
            )

        signed_amount = self.parse_amount(row.get("amount"))
        if signed_amount is None:
            raise TransactionParseError(
                f"Invalid amount: {row.get('amount')!r}", row_number=row_number
            )

        description = str(row.get("description") or "").strip()
        sign = self.infer_sign(str(row.get("type") or ""), signed_amount)

        return NormalizedTransaction(
            id=txn_id,
            source=source,
            date=txn_date,
            amount=abs(signed_amount),
            sign=sign,
            description=description,
            normalized_description=normalize_description(description),
            category=self.infer_category(description),
        )

    def parse_date(self, date_value: Any) -> Optional[date]:
        """
        Parse a date value from the CSV.

        Configured formats are tried first, then the pandas parser.

        Args:
            date_value: Date value (string or date)

        Returns:
            Python date object or None
        """
        if date_value is None:
            return None
        if isinstance(date_value, datetime):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value

        text = str(date_value).strip()
        if not text:
            return None

        for date_format in self.input_config.date_formats:
            try:
                return datetime.strptime(text, date_format).date()
            except ValueError:
                continue

        try:
            parsed = pd.to_datetime(text)
        except (ValueError, TypeError, OverflowError):
            return None
        if pd.isna(parsed):
            return None
        return parsed.date()

    def parse_amount(self, amount_value: Any) -> Optional[Decimal]:
        """
        Parse a signed amount value from the CSV.

        Currency symbols, currency codes, thousands separators and spaces
        are dropped; parenthesised amounts are negative. Exponent notation
        such as "1.5E3" is accepted; letters outside a leading or trailing
        currency code reject the value.

        Args:
            amount_value: Amount value (string or number)

        Returns:
            Signed Decimal amount or None
        """
        if amount_value is None:
            return None

        text = str(amount_value).strip()
        if not text:
            return None

        negative = text.startswith("(") and text.endswith(")")
        match = _AMOUNT_PATTERN.fullmatch(_AMOUNT_NOISE.sub("", text))
        if match is None:
            return None

        try:
            amount = Decimal(match.group("number"))
        except InvalidOperation:
            return None
        if not amount.is_finite():
            return None

        if match.group("sign") == "-":
            amount = -amount
        return -abs(amount) if negative else amount

    def infer_sign(self, type_value: str, signed_amount: Decimal) -> TransactionSign:
        """
        Determine the cash-flow direction.

        The type column wins when it holds a known keyword; otherwise a
        negative amount is a debit and anything else a credit.
        """
        type_key = type_value.strip().lower()
        if type_key in self._debit_types:
            return TransactionSign.DEBIT
        if type_key in self._credit_types:
            return TransactionSign.CREDIT
        if type_key:
            logger.debug(f"Unknown transaction type {type_value!r}, using amount sign")
        return TransactionSign.DEBIT if signed_amount < 0 else TransactionSign.CREDIT

    def infer_category(self, description: str) -> str:
        """First category whose keyword appears in the description."""
        words = set(normalize_description(description).split())
        for category, keywords in self.normalization.category_keywords.items():
            if any(keyword.lower() in words for keyword in keywords):
                return category
        return self.normalization.default_category
