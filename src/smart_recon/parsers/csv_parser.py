"""
Delimited transaction parser.
Reads CSV exports with id, date, description, amount and type columns.
"""

from io import StringIO
from pathlib import Path
from typing import Any, Union
import logging

import pandas as pd

from ..config import InputConfig
from ..models.transaction import TransactionSource
from ..utils.exceptions import TransactionParseError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date", "description", "amount")
OPTIONAL_FIELDS = ("id", "type")


class CSVTransactionParser:
    """
    Parser for statement and ledger CSV data.

    Produces raw row dictionaries keyed by field name; type coercion is left
    to the normalizer.
    """

    def __init__(self, config: InputConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Input section of the application configuration
        """
        self.config = config
        self.column_mappings = config.column_mappings

    def parse_file(
        self, file_path: Path, source: TransactionSource
    ) -> list[dict[str, Any]]:
        """
        Parse a CSV file into raw rows.

        Args:
            file_path: Path to the CSV file
            source: Side the file belongs to, used for generated ids

        Returns:
            List of raw row dictionaries

        Raises:
            TransactionParseError: If the file cannot be read or lacks columns
        """
        logger.info(f"Parsing {source.value} CSV file: {file_path}")
        rows = self._parse(file_path, source)
        logger.info(f"Extracted {len(rows)} rows from {file_path.name}")
        return rows

    def parse_text(self, text: str, source: TransactionSource) -> list[dict[str, Any]]:
        """
        Parse CSV content held in memory.

        Args:
            text: Delimited text including the header row
            source: Side the text belongs to, used for generated ids

        Returns:
            List of raw row dictionaries
        """
        if not text.strip():
            return []
        return self._parse(StringIO(text), source)

    def _parse(
        self, handle: Union[Path, StringIO], source: TransactionSource
    ) -> list[dict[str, Any]]:
        try:
            df = pd.read_csv(
                handle,
                encoding=self.config.encoding,
                delimiter=self.config.delimiter,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
            )
        except pd.errors.EmptyDataError:
            return []
        except Exception as e:
            logger.error(f"Failed to read CSV data: {e}")
            raise TransactionParseError(f"Failed to read CSV data: {e}") from e

        df.columns = [str(column).strip() for column in df.columns]
        columns = self._resolve_columns(df)
        return self._process_dataframe(df, columns, source)

    def _resolve_columns(self, df: pd.DataFrame) -> dict[str, str]:
        """
        Map field names onto the DataFrame's columns.

        Headers are matched case-insensitively.

        Raises:
            TransactionParseError: If a required column is absent
        """
        lookup = {column.lower(): column for column in df.columns}
        columns: dict[str, str] = {}
        missing: list[str] = []

        for field_name in REQUIRED_FIELDS + OPTIONAL_FIELDS:
            header = self.column_mappings.get(field_name, field_name)
            column = lookup.get(header.lower())
            if column is not None:
                columns[field_name] = column
            elif field_name in REQUIRED_FIELDS:
                missing.append(header)

        if missing:
            raise TransactionParseError(
                f"Missing required column(s): {', '.join(missing)}"
            )
        return columns

    def _process_dataframe(
        self, df: pd.DataFrame, columns: dict[str, str], source: TransactionSource
    ) -> list[dict[str, Any]]:
        """Convert DataFrame rows into raw row dictionaries."""
        rows: list[dict[str, Any]] = []
        prefix = source.value.upper()

        for idx, record in enumerate(df.to_dict(orient="records"), start=1):
            row = {
                field_name: str(record.get(column, "")).strip()
                for field_name, column in columns.items()
            }
            if not any(row.values()):
                logger.debug(f"Row {idx}: blank, skipping")
                continue

            row.setdefault("type", "")
            # Generate unique ID when the export carries none
            if not row.get("id"):
                row["id"] = f"{prefix}-{idx:05d}"
            row["row_number"] = idx
            rows.append(row)

        return rows
