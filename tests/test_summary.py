"""Tests for dashboard summaries and next-month estimates."""

from datetime import date

import pytest

from fintrack.models import TransactionType

TODAY = date(2024, 7, 15)


@pytest.fixture
def history(reconciler, user, account, category, draft):
    """Spending spread over April to July 2024 plus one salary."""

    def add(name, amount, day, type=TransactionType.EXPENSE):
        reconciler.create_transaction(
            user.id,
            draft(account(user), category(user, name), amount, type=type, transaction_date=day),
        )

    add("Food", 30, date(2024, 4, 2))
    add("Food", 45.5, date(2024, 6, 10))
    add("Food", 14.5, date(2024, 6, 30))
    add("Transport", 12, date(2024, 5, 1))
    add("Food", 20, date(2024, 7, 3))
    add("Transport", 10, date(2024, 7, 14))
    add("Salary", 1000, date(2024, 7, 1), type=TransactionType.INCOME)


class TestTotals:
    """Tests for monthly totals and the category breakdown."""

    def test_monthly_totals(self, summary_service, user, history):
        totals = summary_service.monthly_totals(user.id, 7, 2024)
        assert (totals.income, totals.expense, totals.net) == (1000.0, 30.0, 970.0)

    def test_empty_month(self, summary_service, user, history):
        totals = summary_service.monthly_totals(user.id, 1, 2024)
        assert (totals.income, totals.expense, totals.net) == (0.0, 0.0, 0.0)

    def test_expense_breakdown(self, summary_service, user, history):
        assert summary_service.expense_breakdown(user.id, 6, 2024) == {"Food": 60.0}
        assert summary_service.expense_breakdown(user.id, 7, 2024) == {
            "Food": 20.0,
            "Transport": 10.0,
        }


class TestTrend:
    """Tests for the monthly expense trend."""

    def test_includes_zero_months_oldest_first(self, summary_service, user, history):
        trend = summary_service.monthly_expense_trend(user.id, months=6, today=TODAY)
        assert list(trend.items()) == [
            ("2024-02", 0.0),
            ("2024-03", 0.0),
            ("2024-04", 30.0),
            ("2024-05", 12.0),
            ("2024-06", 60.0),
            ("2024-07", 30.0),
        ]

    def test_crosses_year_boundary(self, summary_service, user):
        trend = summary_service.monthly_expense_trend(
            user.id, months=3, today=date(2024, 1, 5)
        )
        assert list(trend) == ["2023-11", "2023-12", "2024-01"]
        assert set(trend.values()) == {0.0}


class TestEstimates:
    """Tests for category history and next-month estimates."""

    def test_category_history_excludes_current_month(
        self, summary_service, user, category, history
    ):
        food = category(user)
        assert summary_service.historical_category_spending(
            user.id, food.id, today=TODAY
        ) == [30.0, 0.0, 60.0]

    def test_category_history_without_spending(self, summary_service, user, category):
        rent = category(user, "Rent")
        assert summary_service.historical_category_spending(
            user.id, rent.id, months_back=4, today=TODAY
        ) == [0.0, 0.0, 0.0, 0.0]

    def test_predict_next_month(self, summary_service, user, history):
        forecast = summary_service.predict_next_month(user.id, today=TODAY)
        estimates = {e.category_name: e for e in forecast.estimates}

        assert (forecast.month, forecast.year) == (8, 2024)
        assert len(estimates) == 13
        assert estimates["Food"].history == [30.0, 0.0, 60.0]
        assert estimates["Food"].estimate == 30.0
        assert estimates["Transport"].estimate == 4.0
        assert estimates["Rent"].estimate == 0.0
        assert forecast.total == 34.0

    def test_predict_without_history(self, summary_service, user):
        forecast = summary_service.predict_next_month(user.id, today=date(2024, 12, 1))
        assert (forecast.month, forecast.year) == (1, 2025)
        assert forecast.total == 0.0
        assert all(e.estimate >= 0 for e in forecast.estimates)
