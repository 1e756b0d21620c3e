"""Tests for CSV and XLSX export."""

import csv
import io
import re
from datetime import date

import pytest
from openpyxl import load_workbook

from fintrack.errors import ValidationError
from fintrack.models import TransactionType
from fintrack.services import ExportFormat


@pytest.fixture
def transactions(reconciler, user, account, category, draft):
    return [
        reconciler.create_transaction(
            user.id,
            draft(account(user), category(user, "Salary"), 1200, type=TransactionType.INCOME,
                  transaction_date=date(2024, 3, 1)),
        ),
        reconciler.create_transaction(
            user.id,
            draft(account(user, "Cash"), category(user), 25.75,
                  transaction_date=date(2024, 3, 5), description="groceries"),
        ),
        reconciler.create_transaction(
            user.id,
            draft(account(user), category(user, "Rent"), 700,
                  transaction_date=date(2024, 4, 1)),
        ),
    ]


class TestCsv:
    """Tests for ExportService.export_to_csv."""

    def test_all_transactions(self, export_service, user, transactions):
        buffer = export_service.export_to_csv(user.id)
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))

        assert rows[0] == ["ID", "Date", "Type", "Amount", "Account", "Category", "Description"]
        assert len(rows) == 4
        assert rows[2] == [
            str(transactions[1].id), "2024-03-05", "Expense", "25.75",
            "Cash", "Food", "groceries",
        ]

    def test_date_range_is_inclusive(self, export_service, user, transactions):
        buffer = export_service.export_to_csv(
            user.id, date(2024, 3, 5), date(2024, 4, 1)
        )
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))
        assert [r[1] for r in rows[1:]] == ["2024-03-05", "2024-04-01"]

    def test_other_users_are_excluded(self, export_service, other_user, transactions):
        buffer = export_service.export_to_csv(other_user.id)
        rows = list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))
        assert len(rows) == 1

    def test_reversed_range(self, export_service, user):
        with pytest.raises(ValidationError):
            export_service.export_to_csv(user.id, date(2024, 5, 1), date(2024, 4, 1))


class TestXlsx:
    """Tests for ExportService.export_to_xlsx."""

    def test_workbook_layout(self, export_service, user, transactions):
        wb = load_workbook(export_service.export_to_xlsx(user.id))
        assert wb.sheetnames == ["Transactions", "Summary"]

        ws = wb["Transactions"]
        assert ws.max_row == 4
        assert ws.cell(row=2, column=3).value == "Income"
        assert ws.cell(row=3, column=4).value == 25.75
        assert ws.cell(row=4, column=6).value == "Rent"

    def test_summary_sheet(self, export_service, user, transactions):
        ws = load_workbook(export_service.export_to_xlsx(user.id))["Summary"]

        assert ws.cell(row=5, column=1).value == "Income"
        assert ws.cell(row=5, column=2).value == 1
        assert ws.cell(row=5, column=3).value == 1200
        assert ws.cell(row=6, column=2).value == 2
        assert ws.cell(row=6, column=3).value == 725.75
        assert ws.cell(row=8, column=3).value == 474.25
        assert ws.cell(row=11, column=1).value == "Rent"
        assert ws.cell(row=12, column=1).value == "Food"


class TestFilename:
    """Tests for ExportService.get_filename."""

    def test_without_range(self, export_service, user):
        name = export_service.get_filename(user.id, ExportFormat.CSV)
        assert re.fullmatch(r"fintrack_transactions_\d{8}\.csv", name)

    def test_with_range(self, export_service, user):
        name = export_service.get_filename(
            user.id, ExportFormat.XLSX, date(2024, 3, 1), date(2024, 3, 31)
        )
        assert name.endswith("_20240301-20240331.xlsx")
