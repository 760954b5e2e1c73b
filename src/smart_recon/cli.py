"""
Command-line interface for the statement to ledger reconciliation tool.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import generate_default_config, load_config, ReconConfig
from .matching.engine import ReconciliationEngine
from .models.transaction import (
    NormalizedTransaction,
    ReconciliationRun,
    ReconciliationSummary,
    TransactionSource,
)
from .parsers.csv_parser import CSVTransactionParser
from .parsers.normalizer import TransactionNormalizer
from .reports.excel_generator import ExcelReportGenerator
from .sample_data import SAMPLE_LEDGER_CSV, SAMPLE_STATEMENT_CSV
from .utils.exceptions import TransactionParseError
from .utils.formatting import format_currency
from .utils.logging_config import get_logger, setup_logging

console = Console()
logger = get_logger("cli")


@click.group()
@click.version_option(version=__version__)
def main():
    """Smart Statement to Ledger Reconciliation Tool."""
    pass


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("--date-tolerance", type=int, default=None, help="Override date tolerance in days")
@click.option(
    "--description-threshold",
    type=float,
    default=None,
    help="Override minimum description similarity (0-1)",
)
@click.option(
    "--amount-tolerance", type=float, default=None, help="Override amount tolerance"
)
@click.option(
    "--aggregation-tolerance",
    type=float,
    default=None,
    help="Override aggregation amount tolerance",
)
@click.option(
    "--max-group-size", type=int, default=None, help="Override aggregation group size"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show results without generating report"
)
def reconcile(
    statement_file: Path,
    ledger_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    date_tolerance: Optional[int],
    description_threshold: Optional[float],
    amount_tolerance: Optional[float],
    aggregation_tolerance: Optional[float],
    max_group_size: Optional[int],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile a bank statement CSV with a general ledger CSV.

    STATEMENT_FILE: Path to the bank statement CSV
    LEDGER_FILE: Path to the general ledger CSV
    """
    try:
        recon_config = load_config(config)
        _setup_logging(recon_config, verbose)

        recon_config = _apply_engine_overrides(
            recon_config,
            date_tolerance_days=date_tolerance,
            description_threshold=description_threshold,
            amount_tolerance=amount_tolerance,
            aggregation_amount_tolerance=aggregation_tolerance,
            aggregation_max_group_size=max_group_size,
        )

        parser = CSVTransactionParser(recon_config.input)
        normalizer = TransactionNormalizer(recon_config.normalization, recon_config.input)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing statement file...", total=None)
            statement_rows = parser.parse_file(statement_file, TransactionSource.STATEMENT)
            progress.update(task, completed=True)

            task = progress.add_task("Parsing ledger file...", total=None)
            ledger_rows = parser.parse_file(ledger_file, TransactionSource.LEDGER)
            progress.update(task, completed=True)

            if not statement_rows or not ledger_rows:
                raise TransactionParseError(
                    "Please provide at least one row in both statement and ledger data."
                )

            task = progress.add_task("Normalizing transactions...", total=None)
            statements = normalizer.normalize_dataset(
                statement_rows, TransactionSource.STATEMENT
            )
            ledger = normalizer.normalize_dataset(ledger_rows, TransactionSource.LEDGER)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            run, summary = _run_engine(
                recon_config,
                statements,
                ledger,
                statement_filename=statement_file.name,
                ledger_filename=ledger_file.name,
            )
            progress.update(task, completed=True)

        _display_summary(summary)
        _display_run(run, recon_config.output.currency_symbol)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        report_path = _write_report(recon_config, summary, run, output)
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        logger.error(f"Reconciliation failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse")
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-s",
    "--source",
    type=click.Choice([s.value for s in TransactionSource]),
    default=TransactionSource.STATEMENT.value,
    show_default=True,
    help="Which side the file belongs to",
)
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse(csv_file: Path, source: str, config: Optional[Path]):
    """
    Parse a statement or ledger CSV and display normalized transactions.

    CSV_FILE: Path to the CSV file
    """
    try:
        recon_config = load_config(config)
        txn_source = TransactionSource(source)
        rows = CSVTransactionParser(recon_config.input).parse_file(csv_file, txn_source)
        transactions = TransactionNormalizer(
            recon_config.normalization, recon_config.input
        ).normalize_dataset(rows, txn_source)

        table = Table(title=f"{txn_source.value.title()} Transactions: {csv_file.name}")
        table.add_column("ID")
        table.add_column("Date")
        table.add_column("Amount", justify="right")
        table.add_column("Sign")
        table.add_column("Category")
        table.add_column("Description")

        symbol = recon_config.output.currency_symbol
        for txn in transactions[:20]:  # Show first 20
            table.add_row(
                txn.id,
                txn.normalized_date,
                format_currency(txn.amount, symbol),
                txn.sign.value,
                txn.category or "-",
                _truncate(txn.description),
            )

        console.print(table)

        if len(transactions) > 20:
            console.print(f"\n... and {len(transactions) - 20} more transactions")

        console.print(f"\nTotal transactions: {len(transactions)}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)


@main.command()
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def demo(output: Optional[Path], verbose: bool):
    """Reconcile the bundled sample statement and ledger."""
    try:
        recon_config = ReconConfig()
        _setup_logging(recon_config, verbose)

        parser = CSVTransactionParser(recon_config.input)
        normalizer = TransactionNormalizer(recon_config.normalization, recon_config.input)
        statements = normalizer.normalize_dataset(
            parser.parse_text(SAMPLE_STATEMENT_CSV, TransactionSource.STATEMENT),
            TransactionSource.STATEMENT,
        )
        ledger = normalizer.normalize_dataset(
            parser.parse_text(SAMPLE_LEDGER_CSV, TransactionSource.LEDGER),
            TransactionSource.LEDGER,
        )

        run, summary = _run_engine(
            recon_config,
            statements,
            ledger,
            statement_filename="sample statement",
            ledger_filename="sample ledger",
        )

        _display_summary(summary)
        _display_run(run, recon_config.output.currency_symbol)

        if output is not None:
            report_path = _write_report(recon_config, summary, run, output)
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        logger.error(f"Reconciliation failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _setup_logging(config: ReconConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else config.logging.level
    setup_logging(level, log_format=config.logging.format)


def _run_engine(
    config: ReconConfig,
    statements: list[NormalizedTransaction],
    ledger: list[NormalizedTransaction],
    statement_filename: str,
    ledger_filename: str,
) -> tuple[ReconciliationRun, ReconciliationSummary]:
    """Run the engine and build its summary."""
    start_time = datetime.now()

    engine = ReconciliationEngine(config.engine)
    run = engine.reconcile(statements, ledger)

    processing_time = (datetime.now() - start_time).total_seconds()
    summary = engine.generate_summary(
        statements,
        ledger,
        run,
        statement_filename=statement_filename,
        ledger_filename=ledger_filename,
        processing_time=processing_time,
        config_file_used=config.config_file_path,
    )
    return run, summary


def _write_report(
    config: ReconConfig,
    summary: ReconciliationSummary,
    run: ReconciliationRun,
    output: Optional[Path],
) -> Path:
    if output is None:
        now = datetime.now()
        output = Path(
            config.output.excel.filename_template.format(
                date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
            )
        )
    return ExcelReportGenerator(config.output).generate_report(summary, run, output)


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Statement Transactions", str(summary.total_statement_transactions))
    table.add_row("Ledger Transactions", str(summary.total_ledger_transactions))
    table.add_row("Exact Matches", str(summary.exact_count))
    table.add_row("Fuzzy Matches", str(summary.fuzzy_count))
    table.add_row("Aggregations", str(summary.aggregation_count))
    table.add_row("Unmatched Statements", str(summary.unmatched_statement_count))
    table.add_row("Unmatched Ledger", str(summary.unmatched_ledger_count))
    table.add_row("Ledger Coverage", f"{summary.ledger_coverage:.0f}%")
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)


def _display_run(run: ReconciliationRun, symbol: str) -> None:
    """Display matches, aggregations and remaining exceptions."""
    if run.matched:
        table = Table(title="Confirmed Matches")
        table.add_column("Statement")
        table.add_column("Ledger")
        table.add_column("Amount", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Kind")
        for match in run.matched:
            table.add_row(
                _truncate(match.statement_entry.description),
                _truncate(match.ledger_entry.description),
                format_currency(match.statement_entry.amount, symbol),
                f"{match.score:.0%}",
                match.kind.value,
            )
        console.print(table)
    else:
        console.print("No direct matches yet.")

    if run.aggregated:
        table = Table(title="Aggregations")
        table.add_column("Ledger")
        table.add_column("Statements")
        table.add_column("Combined", justify="right")
        table.add_column("Difference", justify="right")
        for agg in run.aggregated:
            table.add_row(
                f"{_truncate(agg.ledger_entry.description)} "
                f"({format_currency(agg.ledger_entry.amount, symbol)})",
                "; ".join(txn.description for txn in agg.statement_group),
                format_currency(agg.total, symbol),
                format_currency(agg.difference, symbol),
            )
        console.print(table)
    else:
        console.print("No aggregation opportunities detected.")

    for title, transactions in (
        ("Unmatched Statements", run.unmatched_statements),
        ("Unmatched Ledger", run.unmatched_ledger),
    ):
        if not transactions:
            continue
        table = Table(title=title)
        table.add_column("ID")
        table.add_column("Date")
        table.add_column("Description")
        table.add_column("Amount", justify="right")
        for txn in transactions:
            table.add_row(
                txn.id,
                txn.normalized_date,
                _truncate(txn.description),
                format_currency(txn.amount, symbol),
            )
        console.print(table)


def _apply_engine_overrides(config: ReconConfig, **overrides) -> ReconConfig:
    """Return a copy of the configuration with command-line tolerances applied."""
    updates = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in ("amount_tolerance", "aggregation_amount_tolerance"):
            value = Decimal(str(value))
        updates[key] = value

    if not updates:
        return config

    engine = config.engine.model_copy(update=updates)
    return config.model_copy(update={"engine": engine})


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


if __name__ == "__main__":
    main()
