"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Sequence
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import OutputConfig, SheetConfig
from ..models.transaction import (
    MatchKind,
    NormalizedTransaction,
    ReconciliationRun,
    ReconciliationSummary,
)
from ..utils.exceptions import ReportGenerationError
from ..utils.formatting import format_currency

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
FUZZY_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
AGGREGATION_FILL = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TRANSACTION_HEADERS = ["ID", "Date", "Description", "Amount", "Sign", "Category"]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: OutputConfig):
        """
        Initialize the report generator.

        Args:
            config: Output section of the application configuration
        """
        self.config = config
        self.sheet_config = config.sheets
        self.currency_symbol = config.currency_symbol

    def generate_report(
        self,
        summary: ReconciliationSummary,
        run: ReconciliationRun,
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            run: Reconciliation result
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, sheets.summary, summary)
        if sheets.matched.enabled:
            self._create_matched_sheet(wb, sheets.matched, run)
        if sheets.aggregated.enabled:
            self._create_aggregation_sheet(wb, sheets.aggregated, run)
        if sheets.unmatched_statements.enabled:
            self._create_transaction_sheet(
                wb, sheets.unmatched_statements, run.unmatched_statements
            )
        if sheets.unmatched_ledger.enabled:
            self._create_transaction_sheet(
                wb, sheets.unmatched_ledger, run.unmatched_ledger
            )
        if sheets.audit_trail.enabled:
            self._create_audit_trail_sheet(wb, sheets.audit_trail, summary, run)

        # openpyxl refuses to save a workbook without sheets
        if not wb.worksheets:
            wb.create_sheet("Report")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            logger.error(f"Failed to save report: {e}")
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, sheet: SheetConfig, summary: ReconciliationSummary
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)
        money = self._money

        ws["A1"] = "Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections: list[tuple[str, list[tuple[str, Any]]]] = [
            (
                "File Information",
                [
                    ("Statement File:", summary.statement_filename or "-"),
                    ("Ledger File:", summary.ledger_filename or "-"),
                    ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
                ],
            ),
            (
                "Transaction Counts",
                [
                    ("Statement Transactions:", summary.total_statement_transactions),
                    ("Ledger Transactions:", summary.total_ledger_transactions),
                    ("Exact Matches:", summary.exact_count),
                    ("Fuzzy Matches:", summary.fuzzy_count),
                    ("Aggregations:", summary.aggregation_count),
                    ("Aggregated Statement Entries:", summary.aggregated_statement_count),
                    ("Unmatched Statements:", summary.unmatched_statement_count),
                    ("Unmatched Ledger:", summary.unmatched_ledger_count),
                ],
            ),
            (
                "Coverage",
                [
                    ("Ledger Coverage:", f"{summary.ledger_coverage:.1f}%"),
                    ("Statement Coverage:", f"{summary.statement_coverage:.1f}%"),
                ],
            ),
            (
                "Amount Totals",
                [
                    ("Statement Credits:", money(summary.statement_total_credits)),
                    ("Statement Debits:", money(summary.statement_total_debits)),
                    ("Ledger Credits:", money(summary.ledger_total_credits)),
                    ("Ledger Debits:", money(summary.ledger_total_debits)),
                    ("Unmatched Statement Amount:", money(summary.unmatched_statement_amount)),
                    ("Unmatched Ledger Amount:", money(summary.unmatched_ledger_amount)),
                    ("Aggregation Differences:", money(summary.total_aggregation_difference)),
                ],
            ),
        ]

        row = 3
        for title, items in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in items:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(
        self, wb: Workbook, sheet: SheetConfig, run: ReconciliationRun
    ) -> None:
        """Create the one-to-one matches sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Statement ID",
                "Statement Date",
                "Statement Description",
                "Statement Amount",
                "Ledger ID",
                "Ledger Date",
                "Ledger Description",
                "Ledger Amount",
                "Kind",
                "Score",
                "Reasons",
            ],
        )

        for row_num, match in enumerate(run.matched, start=2):
            statement_txn = match.statement_entry
            ledger_txn = match.ledger_entry
            row_data = [
                statement_txn.id,
                statement_txn.date,
                statement_txn.description,
                float(statement_txn.amount),
                ledger_txn.id,
                ledger_txn.date,
                ledger_txn.description,
                float(ledger_txn.amount),
                match.kind.value,
                f"{match.score:.2f}",
                "; ".join(match.reasons),
            ]
            fill = MATCH_FILL if match.kind == MatchKind.EXACT else FUZZY_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_aggregation_sheet(
        self, wb: Workbook, sheet: SheetConfig, run: ReconciliationRun
    ) -> None:
        """Create the aggregations sheet, one row per grouped statement entry."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Ledger ID",
                "Ledger Date",
                "Ledger Description",
                "Ledger Amount",
                "Statement ID",
                "Statement Date",
                "Statement Description",
                "Statement Amount",
                "Group Total",
                "Difference",
            ],
        )

        row_num = 2
        for agg in run.aggregated:
            ledger_txn = agg.ledger_entry
            for statement_txn in agg.statement_group:
                row_data = [
                    ledger_txn.id,
                    ledger_txn.date,
                    ledger_txn.description,
                    float(ledger_txn.amount),
                    statement_txn.id,
                    statement_txn.date,
                    statement_txn.description,
                    float(statement_txn.amount),
                    float(agg.total),
                    float(agg.difference),
                ]
                self._write_row(ws, row_num, row_data, AGGREGATION_FILL)
                row_num += 1

        self._auto_fit_columns(ws)

    def _create_transaction_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        transactions: Sequence[NormalizedTransaction],
    ) -> None:
        """Create a sheet listing unmatched transactions."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, TRANSACTION_HEADERS)

        for row_num, txn in enumerate(transactions, start=2):
            row_data = [
                txn.id,
                txn.date,
                txn.description,
                float(txn.amount),
                txn.sign.value,
                txn.category or "",
            ]
            self._write_row(ws, row_num, row_data, UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_audit_trail_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        summary: ReconciliationSummary,
        run: ReconciliationRun,
    ) -> None:
        """Create the audit trail sheet with one row per explanation."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Reconciliation Audit Trail"
        ws["A1"].font = Font(size=14, bold=True)

        audit_info = [
            ("Config File:", summary.config_file_used or "Default"),
            ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
        ]
        row = 3
        for label, value in audit_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Explanation Log"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        headers = ["Kind", "Statement IDs", "Ledger ID", "Score", "Reason"]
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
        row += 1

        for match in run.matched:
            for reason in match.reasons:
                log_data = [
                    match.kind.value,
                    match.statement_entry.id,
                    match.ledger_entry.id,
                    f"{match.score:.2f}",
                    reason,
                ]
                for col, value in enumerate(log_data, start=1):
                    ws.cell(row=row, column=col, value=value)
                row += 1

        for agg in run.aggregated:
            for reason in agg.reasons:
                log_data = [
                    "aggregation",
                    ", ".join(agg.statement_ids),
                    agg.ledger_entry.id,
                    "",
                    reason,
                ]
                for col, value in enumerate(log_data, start=1):
                    ws.cell(row=row, column=col, value=value)
                row += 1

        self._auto_fit_columns(ws)

    def _money(self, amount) -> str:
        return format_currency(amount, self.currency_symbol)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self, ws: Worksheet, row_num: int, row_data: list, fill: PatternFill
    ) -> None:
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
