"""
Queries repository module for dashboard figures and analytics.

Handles read-only queries including:
- Monthly income/expense totals
- Expense totals per category
- Raw expense rows for trend and estimate calculations
- Account balance listings
"""

import logging
from datetime import date
from typing import Any, Optional

from fintrack.models import CategoryType, TransactionType
from fintrack.money import from_cents

from .base import BaseRepository
from .transactions import month_bounds

logger = logging.getLogger(__name__)


class QueryRepository(BaseRepository):
    """
    Repository for summary and analytics queries.

    Provides read-only query operations; nothing here mutates ledger state.
    """

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def get_monthly_totals(self, user_id: int, month: int, year: int) -> dict[str, float]:
        """
        Get income and expense totals for one month.

        Returns:
            Dictionary with income, expense and net
        """
        start, end = month_bounds(month, year)
        with self._get_connection() as conn:
            row = conn.execute(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN type = ? THEN amount_cents END), 0)
                        AS income_cents,
                    COALESCE(SUM(CASE WHEN type = ? THEN amount_cents END), 0)
                        AS expense_cents
                FROM transactions
                WHERE user_id = ?
                  AND transaction_date >= ? AND transaction_date < ?
                """,
                (
                    TransactionType.INCOME.value,
                    TransactionType.EXPENSE.value,
                    user_id,
                    start.isoformat(),
                    end.isoformat(),
                ),
            ).fetchone()

        income = from_cents(row["income_cents"])
        expense = from_cents(row["expense_cents"])
        logger.debug(
            f"Totals for user {user_id} {year}-{month:02d}: "
            f"income={income}, expense={expense}"
        )
        return {
            "income": income,
            "expense": expense,
            "net": from_cents(row["income_cents"] - row["expense_cents"]),
        }

    def get_expense_totals_by_category(
        self, user_id: int, start_date: date, end_date: date
    ) -> dict[str, float]:
        """
        Sum Expense transactions per expense category in [start_date, end_date).

        Categories without spending are left out.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT c.name, SUM(t.amount_cents) AS total_cents
                FROM categories c
                JOIN transactions t
                  ON t.category_id = c.id AND t.user_id = c.user_id
                WHERE c.user_id = ? AND c.category_type = ? AND t.type = ?
                  AND t.transaction_date >= ? AND t.transaction_date < ?
                GROUP BY c.id, c.name
                HAVING SUM(t.amount_cents) > 0
                ORDER BY c.name
                """,
                (
                    user_id,
                    CategoryType.EXPENSE.value,
                    TransactionType.EXPENSE.value,
                    start_date.isoformat(),
                    end_date.isoformat(),
                ),
            )
            return {row["name"]: from_cents(row["total_cents"]) for row in cursor}

    def get_expense_rows(
        self,
        user_id: int,
        start_date: date,
        end_date: date,
        category_id: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Get raw Expense rows in [start_date, end_date) for frame building.

        Returns:
            List of dicts with transaction_date, category_id, category_name, amount
        """
        params: list = [
            user_id,
            TransactionType.EXPENSE.value,
            start_date.isoformat(),
            end_date.isoformat(),
        ]
        category_clause = ""
        if category_id is not None:
            category_clause = "AND t.category_id = ?"
            params.append(category_id)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT t.transaction_date, t.category_id, c.name AS category_name,
                       t.amount_cents
                FROM transactions t
                JOIN categories c ON c.id = t.category_id
                WHERE t.user_id = ? AND t.type = ?
                  AND t.transaction_date >= ? AND t.transaction_date < ?
                  {category_clause}
                ORDER BY t.transaction_date
                """,
                params,
            )
            return [
                {
                    "transaction_date": date.fromisoformat(row["transaction_date"]),
                    "category_id": row["category_id"],
                    "category_name": row["category_name"],
                    "amount": from_cents(row["amount_cents"]),
                }
                for row in cursor.fetchall()
            ]

    def get_account_balances(self, user_id: int) -> dict[str, float]:
        """Current balance of every account, keyed by account name."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT name, current_balance_cents FROM accounts
                WHERE user_id = ?
                ORDER BY name
                """,
                (user_id,),
            )
            return {
                row["name"]: from_cents(row["current_balance_cents"]) for row in cursor
            }
