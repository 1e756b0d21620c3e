"""
Summary service for dashboard figures and next-month spending estimates.

Provides functionality for:
- Monthly income/expense totals
- Expense breakdown by category
- Monthly expense trend
- Per-category next-month estimates (moving average of recent full months)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import pandas as pd

from fintrack.config import PREDICTION_MONTHS, TREND_MONTHS
from fintrack.db import FinanceRepository, month_bounds
from fintrack.models import CategoryType

logger = logging.getLogger(__name__)


@dataclass
class MonthlyTotals:
    """Income and expense totals for one month."""

    month: int
    year: int
    income: float
    expense: float
    net: float


@dataclass
class SpendingEstimate:
    """Next-month estimate for one expense category."""

    category_id: int
    category_name: str
    history: list[float]  # Oldest to most recent month
    estimate: float


@dataclass
class SpendingForecast:
    """Estimates for every expense category for the month after a date."""

    month: int
    year: int
    estimates: list[SpendingEstimate] = field(default_factory=list)

    @property
    def total(self) -> float:
        return round(sum(e.estimate for e in self.estimates), 2)


def _month_start(day: date, shift: int = 0) -> date:
    """First day of the month `shift` months away from `day`'s month."""
    index = day.year * 12 + (day.month - 1) + shift
    return date(index // 12, index % 12 + 1, 1)


def _periods(first: date, count: int) -> pd.PeriodIndex:
    return pd.period_range(
        start=pd.Period(year=first.year, month=first.month, freq="M"),
        periods=count,
        freq="M",
    )


def _to_frame(rows: list[dict]) -> pd.DataFrame:
    """Frame of expense rows with a monthly period column."""
    frame = pd.DataFrame(
        rows, columns=["transaction_date", "category_id", "category_name", "amount"]
    )
    frame["period"] = pd.to_datetime(frame["transaction_date"]).dt.to_period("M")
    return frame


class SummaryService:
    """Read-only summaries over a user's transactions."""

    def __init__(self, repository: FinanceRepository):
        self.repository = repository
        self.queries = repository.queries

    def monthly_totals(self, user_id: int, month: int, year: int) -> MonthlyTotals:
        """Income, expense and net for a month."""
        totals = self.queries.get_monthly_totals(user_id, month, year)
        return MonthlyTotals(month=month, year=year, **totals)

    def expense_breakdown(self, user_id: int, month: int, year: int) -> dict[str, float]:
        """Spending per expense category for a month (categories with spending only)."""
        start, end = month_bounds(month, year)
        return self.queries.get_expense_totals_by_category(user_id, start, end)

    def monthly_expense_trend(
        self,
        user_id: int,
        months: int = TREND_MONTHS,
        today: Optional[date] = None,
    ) -> dict[str, float]:
        """
        Total spending per month for the last `months` months.

        The current month is included. Months without spending report 0.

        Returns:
            Ordered mapping of "YYYY-MM" to total, oldest first
        """
        if months <= 0:
            return {}
        today = today or date.today()
        first = _month_start(today, -(months - 1))
        end = _month_start(today, 1)

        rows = self.queries.get_expense_rows(user_id, first, end)
        periods = _periods(first, months)
        if rows:
            series = _to_frame(rows).groupby("period")["amount"].sum()
            series = series.reindex(periods, fill_value=0.0)
        else:
            series = pd.Series(0.0, index=periods)

        return {str(period): round(float(total), 2) for period, total in series.items()}

    def historical_category_spending(
        self,
        user_id: int,
        category_id: int,
        months_back: int = PREDICTION_MONTHS,
        today: Optional[date] = None,
    ) -> list[float]:
        """
        Monthly spending in a category over the last full months.

        The month containing `today` is excluded because it is incomplete.

        Returns:
            `months_back` totals, oldest first, zero where nothing was spent
        """
        today = today or date.today()
        first = _month_start(today, -months_back)
        end = _month_start(today)

        rows = self.queries.get_expense_rows(user_id, first, end, category_id)
        periods = _periods(first, months_back)
        if not rows:
            return [0.0] * months_back

        series = _to_frame(rows).groupby("period")["amount"].sum()
        series = series.reindex(periods, fill_value=0.0)
        return [round(float(total), 2) for total in series]

    def predict_next_month(
        self,
        user_id: int,
        today: Optional[date] = None,
        months_back: int = PREDICTION_MONTHS,
    ) -> SpendingForecast:
        """
        Estimate next month's spending for every expense category.

        Each estimate is the mean of the category's last `months_back` full
        months, zero-padded where there is no history, and never negative.
        """
        today = today or date.today()
        first = _month_start(today, -months_back)
        end = _month_start(today)
        target = _month_start(today, 1)
        periods = _periods(first, months_back)

        categories = self.repository.categories.get_user_categories(
            user_id, CategoryType.EXPENSE
        )
        rows = self.queries.get_expense_rows(user_id, first, end)

        if rows:
            pivot = (
                _to_frame(rows)
                .groupby(["category_id", "period"])["amount"]
                .sum()
                .unstack(fill_value=0.0)
                .reindex(columns=periods, fill_value=0.0)
            )
        else:
            pivot = pd.DataFrame(columns=periods, dtype=float)

        forecast = SpendingForecast(month=target.month, year=target.year)
        for category in categories:
            if category.id in pivot.index:
                history = [round(float(v), 2) for v in pivot.loc[category.id]]
            else:
                history = [0.0] * months_back
            estimate = max(0.0, round(sum(history) / months_back, 2))
            forecast.estimates.append(
                SpendingEstimate(
                    category_id=category.id,
                    category_name=category.name,
                    history=history,
                    estimate=estimate,
                )
            )

        logger.debug(
            f"Estimated {forecast.total} total spending for user {user_id} "
            f"in {target.year}-{target.month:02d}"
        )
        return forecast
