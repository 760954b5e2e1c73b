"""Tests for the command-line interface."""

import logging

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from smart_recon import __version__
from smart_recon.cli import main
from smart_recon.sample_data import SAMPLE_LEDGER_CSV, SAMPLE_STATEMENT_CSV


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to the runner's streams after each command."""
    yield
    logging.getLogger("smart_recon").handlers = []


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def sample_files(tmp_path):
    statement = tmp_path / "statement.csv"
    ledger = tmp_path / "ledger.csv"
    statement.write_text(SAMPLE_STATEMENT_CSV)
    ledger.write_text(SAMPLE_LEDGER_CSV)
    return statement, ledger


class TestReconcileCommand:
    """The ``reconcile`` command."""

    def test_dry_run_prints_results(self, runner, sample_files):
        statement, ledger = sample_files

        result = runner.invoke(main, ["reconcile", str(statement), str(ledger), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Reconciliation Summary" in result.output
        assert "Dry run - no report generated" in result.output

    def test_writes_report(self, runner, sample_files, tmp_path):
        statement, ledger = sample_files
        output = tmp_path / "report.xlsx"

        result = runner.invoke(
            main, ["reconcile", str(statement), str(ledger), "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "Summary" in load_workbook(output).sheetnames

    def test_threshold_out_of_range_fails(self, runner, sample_files):
        statement, ledger = sample_files

        result = runner.invoke(
            main,
            [
                "reconcile",
                str(statement),
                str(ledger),
                "--description-threshold",
                "1.5",
                "--dry-run",
            ],
        )

        assert result.exit_code == 1
        assert "description_threshold" in result.output

    def test_failure_logged(self, runner, sample_files, caplog):
        statement, ledger = sample_files

        with caplog.at_level(logging.ERROR, logger="smart_recon.cli"):
            runner.invoke(
                main,
                ["reconcile", str(statement), str(ledger), "--max-group-size", "0", "--dry-run"],
            )

        assert "Reconciliation failed" in caplog.text
        assert "aggregation_max_group_size" in caplog.text

    def test_header_only_ledger_fails(self, runner, sample_files, tmp_path):
        statement, _ = sample_files
        ledger = tmp_path / "empty_ledger.csv"
        ledger.write_text("id,date,description,amount,type\n")

        result = runner.invoke(main, ["reconcile", str(statement), str(ledger), "--dry-run"])

        assert result.exit_code == 1
        assert "at least one row" in result.output

    def test_config_file_applied(self, runner, sample_files, tmp_path):
        statement, ledger = sample_files
        config = tmp_path / "recon.yaml"
        config.write_text("output:\n  currency_symbol: $\n")

        result = runner.invoke(
            main, ["reconcile", str(statement), str(ledger), "-c", str(config), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "$12.50" in result.output


class TestOtherCommands:
    """The ``parse``, ``demo`` and ``init-config`` commands."""

    def test_parse_lists_transactions(self, runner, sample_files):
        _, ledger = sample_files

        result = runner.invoke(main, ["parse", str(ledger), "--source", "ledger"])

        assert result.exit_code == 0, result.output
        assert "L-001" in result.output
        assert "Total transactions: 6" in result.output

    def test_parse_bad_file_fails(self, runner, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("id,amount\nS-1,1.00\n")

        result = runner.invoke(main, ["parse", str(bad)])

        assert result.exit_code == 1
        assert "Missing required column" in result.output

    def test_demo_runs_sample(self, runner):
        result = runner.invoke(main, ["demo"])

        assert result.exit_code == 0, result.output
        assert "Confirmed Matches" in result.output
        assert "Aggregations" in result.output

    def test_demo_writes_report(self, runner, tmp_path):
        output = tmp_path / "demo.xlsx"

        result = runner.invoke(main, ["demo", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_init_config(self, runner, tmp_path):
        output = tmp_path / "config.yaml"

        result = runner.invoke(main, ["init-config", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "engine:" in output.read_text()

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert __version__ in result.output
