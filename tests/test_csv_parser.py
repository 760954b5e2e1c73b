"""Tests for the CSV transaction parser."""

import pytest

from smart_recon.config import InputConfig
from smart_recon.models import TransactionSource
from smart_recon.parsers import CSVTransactionParser
from smart_recon.utils.exceptions import TransactionParseError
from tests.factories import TransactionFactory


@pytest.fixture
def parser() -> CSVTransactionParser:
    return CSVTransactionParser(InputConfig())


class TestParseText:
    """Parsing CSV content held in memory."""

    def test_rows_keyed_by_field(self, parser):
        text = TransactionFactory.csv_text(
            [("S-1", "2024-01-05", "Coffee Shop", "-12.50", "debit")]
        )

        rows = parser.parse_text(text, TransactionSource.STATEMENT)

        assert rows == [
            {
                "id": "S-1",
                "date": "2024-01-05",
                "description": "Coffee Shop",
                "amount": "-12.50",
                "type": "debit",
                "row_number": 1,
            }
        ]

    def test_headers_matched_case_insensitively(self, parser):
        text = "ID, Date ,DESCRIPTION,Amount\nL-1,2024-01-05,Rent,5000\n"

        rows = parser.parse_text(text, TransactionSource.LEDGER)

        assert rows[0]["id"] == "L-1"
        assert rows[0]["description"] == "Rent"
        assert rows[0]["type"] == ""

    def test_missing_ids_generated(self, parser):
        text = TransactionFactory.csv_text(
            [("2024-01-05", "Coffee", "12.50"), ("2024-01-06", "Taxi", "20.00")],
            header="date,description,amount",
        )

        rows = parser.parse_text(text, TransactionSource.LEDGER)

        assert [row["id"] for row in rows] == ["LEDGER-00001", "LEDGER-00002"]

    def test_blank_text_returns_no_rows(self, parser):
        assert parser.parse_text("   \n", TransactionSource.STATEMENT) == []

    def test_header_only_returns_no_rows(self, parser):
        text = TransactionFactory.csv_text([])

        assert parser.parse_text(text, TransactionSource.STATEMENT) == []

    def test_missing_required_column_raises(self, parser):
        text = "id,date,amount\nS-1,2024-01-05,1.00\n"

        with pytest.raises(TransactionParseError, match="description"):
            parser.parse_text(text, TransactionSource.STATEMENT)

    def test_values_with_quoted_commas(self, parser):
        text = 'id,date,description,amount\nS-1,2024-01-05,"Smith, J",1.00\n'

        rows = parser.parse_text(text, TransactionSource.STATEMENT)

        assert rows[0]["description"] == "Smith, J"


class TestConfiguredColumns:
    """Column mappings and delimiters from configuration."""

    def test_custom_column_names(self):
        config = InputConfig(
            column_mappings={
                "id": "ref",
                "date": "posted",
                "description": "narrative",
                "amount": "value",
                "type": "dc",
            }
        )
        parser = CSVTransactionParser(config)
        text = "ref,posted,narrative,value,dc\nR1,2024-01-05,Fuel,300.00,dr\n"

        rows = parser.parse_text(text, TransactionSource.STATEMENT)

        assert rows[0]["id"] == "R1"
        assert rows[0]["type"] == "dr"

    def test_semicolon_delimiter(self):
        parser = CSVTransactionParser(InputConfig(delimiter=";"))
        text = "id;date;description;amount\nS-1;2024-01-05;Coffee;1,50\n"

        rows = parser.parse_text(text, TransactionSource.STATEMENT)

        assert rows[0]["amount"] == "1,50"


class TestParseFile:
    """Parsing CSV files from disk."""

    def test_reads_file(self, parser, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_text(
            TransactionFactory.csv_text([("L-1", "2024-01-05", "Rent", "5000.00", "debit")])
        )

        rows = parser.parse_file(path, TransactionSource.LEDGER)

        assert len(rows) == 1
        assert rows[0]["amount"] == "5000.00"

    def test_missing_file_raises(self, parser, tmp_path):
        with pytest.raises(TransactionParseError):
            parser.parse_file(tmp_path / "absent.csv", TransactionSource.LEDGER)
