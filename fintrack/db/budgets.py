"""
Budget repository module.

Stores monthly per-category spending limits. A budget row holds only the
limit; spending against it is never stored.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional

from fintrack.errors import NotFoundError
from fintrack.models import Budget
from fintrack.money import from_cents

from .base import BaseRepository

logger = logging.getLogger(__name__)

_SELECT_BUDGET = """
    SELECT b.id, b.user_id, b.category_id, b.amount_limit_cents, b.month,
           b.year, b.created_at, c.name AS category_name
    FROM budgets b
    JOIN categories c ON c.id = b.category_id
"""


class BudgetRepository(BaseRepository):
    """Repository for managing monthly category budgets in SQLite."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def get_budget(
        self, budget_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Budget]:
        """Get a budget by ID."""
        with self._use_connection(conn) as c:
            row = c.execute(f"{_SELECT_BUDGET} WHERE b.id = ?", (budget_id,)).fetchone()
            return Budget.from_row(row) if row else None

    def get_user_budget(
        self, user_id: int, budget_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Budget:
        """
        Get a budget owned by the user.

        Raises:
            NotFoundError: If the budget is missing or owned by someone else
        """
        budget = self.get_budget(budget_id, conn=conn)
        if budget is None or budget.user_id != user_id:
            raise NotFoundError("Budget", budget_id, user_id)
        return budget

    def get_budget_for_period(
        self,
        user_id: int,
        category_id: int,
        month: int,
        year: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Budget]:
        """Get the budget for a (user, category, month, year) key."""
        with self._use_connection(conn) as c:
            row = c.execute(
                f"""
                {_SELECT_BUDGET}
                WHERE b.user_id = ? AND b.category_id = ?
                  AND b.month = ? AND b.year = ?
                """,
                (user_id, category_id, month, year),
            ).fetchone()
            return Budget.from_row(row) if row else None

    def get_user_budgets(self, user_id: int) -> list[Budget]:
        """Get a user's budgets, newest period first, then by category name."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                {_SELECT_BUDGET}
                WHERE b.user_id = ?
                ORDER BY b.year DESC, b.month DESC, c.name ASC
                """,
                (user_id,),
            )
            budgets = [Budget.from_row(row) for row in cursor.fetchall()]
            logger.debug(f"Retrieved {len(budgets)} budgets for user {user_id}")
            return budgets

    def upsert(
        self,
        conn: sqlite3.Connection,
        user_id: int,
        category_id: int,
        limit_cents: int,
        month: int,
        year: int,
    ) -> Budget:
        """
        Create the budget for a key, or update the limit of the existing one.

        Returns:
            The created or updated Budget
        """
        existing = self.get_budget_for_period(user_id, category_id, month, year, conn)

        if existing:
            conn.execute(
                "UPDATE budgets SET amount_limit_cents = ? WHERE id = ?",
                (limit_cents, existing.id),
            )
            existing.amount_limit = from_cents(limit_cents)
            logger.info(
                f"Updated budget {existing.id} for user {user_id}: "
                f"limit={existing.amount_limit}"
            )
            return existing

        now = datetime.now(timezone.utc)
        cursor = conn.execute(
            """
            INSERT INTO budgets (
                user_id, category_id, amount_limit_cents, month, year, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, category_id, limit_cents, month, year, now.isoformat()),
        )
        logger.info(
            f"Created budget {cursor.lastrowid} for user {user_id}, "
            f"category {category_id}, {year}-{month:02d}"
        )
        return self.get_budget(cursor.lastrowid, conn=conn)

    def update_limit(
        self, conn: sqlite3.Connection, budget_id: int, limit_cents: int
    ) -> None:
        """Set a new limit on an existing budget."""
        conn.execute(
            "UPDATE budgets SET amount_limit_cents = ? WHERE id = ?",
            (limit_cents, budget_id),
        )
        logger.info(f"Updated limit of budget {budget_id}")

    def delete(self, user_id: int, budget_id: int) -> bool:
        """
        Delete a budget owned by the user.

        Returns:
            True if deleted, False if not found
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM budgets WHERE id = ? AND user_id = ?", (budget_id, user_id)
            )
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info(f"Deleted budget {budget_id} for user {user_id}")
            else:
                logger.debug(f"No budget {budget_id} to delete for user {user_id}")
            return deleted
