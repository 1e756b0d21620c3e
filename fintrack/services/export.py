"""
Export service for transaction data.

Provides functionality to export a user's transactions to XLSX and CSV formats.
"""

import csv
import io
import logging
from datetime import date, datetime
from enum import Enum
from typing import Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from fintrack.config import MAX_EXPORT_ENTRIES
from fintrack.db import FinanceRepository
from fintrack.errors import ValidationError
from fintrack.models import Transaction, TransactionType

logger = logging.getLogger(__name__)

# Row colours by transaction type
HEADER_COLOR = "4472C4"
INCOME_COLOR = "C6EFCE"
EXPENSE_COLOR = "FFC7CE"

HEADERS = ["ID", "Date", "Type", "Amount", "Account", "Category", "Description"]


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _row(transaction: Transaction) -> list:
    return [
        transaction.id,
        transaction.transaction_date.isoformat(),
        transaction.type.value,
        transaction.amount,
        transaction.account_name or "",
        transaction.category_name or "",
        transaction.description or "",
    ]


class ExportService:
    """Service for exporting transactions to various formats."""

    def __init__(self, repository: FinanceRepository):
        """
        Initialize the export service.

        Args:
            repository: Repository facade for transactions
        """
        self.repository = repository

    def export_to_csv(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> io.BytesIO:
        """
        Export transactions to CSV format.

        Args:
            user_id: Owner of the transactions
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)

        Returns:
            BytesIO buffer containing the CSV data
        """
        transactions = self._get_transactions(user_id, start_date, end_date)

        text_buffer = io.StringIO()
        writer = csv.writer(text_buffer)
        writer.writerow(HEADERS)
        for transaction in transactions:
            writer.writerow(_row(transaction))

        buffer = io.BytesIO()
        buffer.write(text_buffer.getvalue().encode("utf-8-sig"))  # BOM for Excel
        buffer.seek(0)

        logger.info(f"Exported {len(transactions)} transactions to CSV for user {user_id}")
        return buffer

    def export_to_xlsx(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> io.BytesIO:
        """
        Export transactions to XLSX format with formatting and a summary sheet.

        Args:
            user_id: Owner of the transactions
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)

        Returns:
            BytesIO buffer containing the XLSX data
        """
        transactions = self._get_transactions(user_id, start_date, end_date)

        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Transactions"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = _solid(HEADER_COLOR)
        fills = {
            TransactionType.INCOME: _solid(INCOME_COLOR),
            TransactionType.EXPENSE: _solid(EXPENSE_COLOR),
        }

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        for row_idx, transaction in enumerate(transactions, 2):
            for col, value in enumerate(_row(transaction), 1):
                ws.cell(row=row_idx, column=col, value=value).fill = fills[transaction.type]
            ws.cell(row=row_idx, column=4).number_format = "#,##0.00"

        column_widths = [8, 12, 10, 15, 20, 20, 40]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.freeze_panes = "A2"

        self._add_summary_sheet(wb, transactions)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        logger.info(
            f"Exported {len(transactions)} transactions to XLSX for user {user_id}"
        )
        return buffer

    def _add_summary_sheet(self, wb: Workbook, transactions: list[Transaction]):
        """Add a summary sheet with totals and the expense breakdown."""
        ws = wb.create_sheet(title="Summary")

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)

        ws.cell(row=1, column=1, value="Transaction Summary").font = title_font
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        incomes = [t for t in transactions if t.type == TransactionType.INCOME]
        expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]
        total_income = round(sum(t.amount for t in incomes), 2)
        total_expense = round(sum(t.amount for t in expenses), 2)

        summary_start = 4
        for col, title in enumerate(["Type", "Count", "Total"], 1):
            ws.cell(row=summary_start, column=col, value=title).font = header_font

        totals = [("Income", incomes, total_income), ("Expense", expenses, total_expense)]
        for offset, (label, items, total) in enumerate(totals, 1):
            ws.cell(row=summary_start + offset, column=1, value=label)
            ws.cell(row=summary_start + offset, column=2, value=len(items))
            ws.cell(row=summary_start + offset, column=3, value=total)

        ws.cell(row=summary_start + 4, column=1, value="Net").font = header_font
        ws.cell(
            row=summary_start + 4, column=3, value=round(total_income - total_expense, 2)
        )

        # Expense breakdown by category
        by_category: dict[str, float] = {}
        for t in expenses:
            name = t.category_name or ""
            by_category[name] = round(by_category.get(name, 0.0) + t.amount, 2)

        breakdown_start = summary_start + 6
        ws.cell(row=breakdown_start, column=1, value="Category").font = header_font
        ws.cell(row=breakdown_start, column=3, value="Spent").font = header_font
        ordered = sorted(by_category.items(), key=lambda item: item[1], reverse=True)
        for offset, (name, total) in enumerate(ordered, 1):
            ws.cell(row=breakdown_start + offset, column=1, value=name)
            ws.cell(row=breakdown_start + offset, column=3, value=total)

        for row in range(summary_start + 1, breakdown_start + len(ordered) + 1):
            ws.cell(row=row, column=3).number_format = "#,##0.00"

        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 10
        ws.column_dimensions["C"].width = 18

    def _get_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """
        Get transactions oldest first, optionally limited to a date range.

        A missing bound leaves that side of the range open.
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")

        transactions = self.repository.transactions.get_transactions_for_date_range(
            user_id, start_date or date.min, end_date or date.max
        )
        if len(transactions) > MAX_EXPORT_ENTRIES:
            logger.warning(
                f"Export for user {user_id} truncated to {MAX_EXPORT_ENTRIES} "
                f"of {len(transactions)} transactions"
            )
            transactions = transactions[-MAX_EXPORT_ENTRIES:]
        return transactions

    def get_filename(
        self,
        user_id: int,
        format: ExportFormat,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """
        Generate a filename for the export.

        Args:
            user_id: Owner of the transactions
            format: Export format
            start_date: Optional start date
            end_date: Optional end date

        Returns:
            Suggested filename
        """
        date_str = datetime.now().strftime("%Y%m%d")

        if start_date and end_date:
            date_range = (
                f"_{start_date.strftime('%Y%m%d')}-{end_date.strftime('%Y%m%d')}"
            )
        else:
            date_range = ""

        return f"fintrack_transactions_{date_str}{date_range}.{format.value}"
