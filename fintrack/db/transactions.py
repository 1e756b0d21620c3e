"""
Transactions repository module for transaction row operations.

Handles the transaction table only: inserting, reading, rewriting and
deleting rows, plus the expense sums budgets are computed from. Balance
effects are applied by the reconciler in the same unit of work; nothing in
this module touches account balances.
"""

import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import Optional

from fintrack.config import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from fintrack.errors import PersistenceError, ValidationError
from fintrack.models import Transaction, TransactionType
from fintrack.money import from_cents

from .base import BaseRepository

logger = logging.getLogger(__name__)

_SELECT_TRANSACTION = """
    SELECT t.id, t.user_id, t.account_id, t.category_id, t.amount_cents,
           t.type, t.description, t.transaction_date, t.created_at,
           a.name AS account_name, c.name AS category_name
    FROM transactions t
    LEFT JOIN accounts a ON a.id = t.account_id
    LEFT JOIN categories c ON c.id = t.category_id
"""


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class TransactionRepository(BaseRepository):
    """Repository for transaction rows and transaction-level aggregates."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    # =========================================================================
    # Row operations (run inside the reconciler's unit of work)
    # =========================================================================

    def insert_transaction(
        self,
        conn: sqlite3.Connection,
        user_id: int,
        account_id: int,
        category_id: int,
        amount_cents: int,
        transaction_type: TransactionType,
        transaction_date: date,
        description: Optional[str] = None,
    ) -> int:
        """Insert a transaction row and return its generated ID."""
        cursor = conn.execute(
            """
            INSERT INTO transactions (
                user_id, account_id, category_id, amount_cents, type,
                description, transaction_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                account_id,
                category_id,
                amount_cents,
                transaction_type.value,
                description,
                transaction_date.isoformat(),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        return cursor.lastrowid

    def update_transaction_row(
        self,
        conn: sqlite3.Connection,
        transaction_id: int,
        user_id: int,
        account_id: int,
        category_id: int,
        amount_cents: int,
        transaction_type: TransactionType,
        transaction_date: date,
        description: Optional[str] = None,
    ) -> None:
        """
        Overwrite every editable field of a transaction row.

        Raises:
            PersistenceError: If the row vanished before the write
        """
        cursor = conn.execute(
            """
            UPDATE transactions
            SET account_id = ?, category_id = ?, amount_cents = ?, type = ?,
                description = ?, transaction_date = ?
            WHERE id = ? AND user_id = ?
            """,
            (
                account_id,
                category_id,
                amount_cents,
                transaction_type.value,
                description,
                transaction_date.isoformat(),
                transaction_id,
                user_id,
            ),
        )
        if cursor.rowcount != 1:
            raise PersistenceError(
                f"Update of transaction {transaction_id} affected {cursor.rowcount} rows"
            )

    def delete_transaction_row(
        self, conn: sqlite3.Connection, transaction_id: int, user_id: int
    ) -> None:
        """
        Delete a transaction row.

        Raises:
            PersistenceError: If the row vanished before the delete
        """
        cursor = conn.execute(
            "DELETE FROM transactions WHERE id = ? AND user_id = ?",
            (transaction_id, user_id),
        )
        if cursor.rowcount != 1:
            raise PersistenceError(
                f"Delete of transaction {transaction_id} affected {cursor.rowcount} rows"
            )

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_transaction_by_id(
        self, transaction_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Transaction]:
        """
        Get a transaction by ID.

        Returns:
            Transaction with account and category names, or None if not found
        """
        with self._use_connection(conn) as c:
            row = c.execute(
                f"{_SELECT_TRANSACTION} WHERE t.id = ?", (transaction_id,)
            ).fetchone()
            return Transaction.from_row(row) if row else None

    def get_user_transactions(
        self,
        user_id: int,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
        transaction_type: Optional[TransactionType] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        """
        Get a user's transactions, newest first.

        Args:
            user_id: Owner of the transactions
            limit: Maximum number of transactions to return
            offset: Number of transactions to skip
            transaction_type: Optional filter by Income/Expense
            account_id: Optional filter by account
            category_id: Optional filter by category

        Returns:
            List of Transaction objects
        """
        if limit <= 0 or limit > MAX_HISTORY_LIMIT:
            limit = DEFAULT_HISTORY_LIMIT
        if offset < 0:
            offset = 0

        clauses = ["t.user_id = ?"]
        params: list = [user_id]
        if transaction_type is not None:
            clauses.append("t.type = ?")
            params.append(TransactionType(transaction_type).value)
        if account_id is not None:
            clauses.append("t.account_id = ?")
            params.append(account_id)
        if category_id is not None:
            clauses.append("t.category_id = ?")
            params.append(category_id)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                {_SELECT_TRANSACTION}
                WHERE {" AND ".join(clauses)}
                ORDER BY t.transaction_date DESC, t.id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            transactions = [Transaction.from_row(row) for row in cursor.fetchall()]
            logger.debug(
                f"Retrieved {len(transactions)} transactions for user {user_id}"
            )
            return transactions

    def get_transactions_for_date_range(
        self,
        user_id: int,
        start_date: date,
        end_date: date,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """
        Get a user's transactions dated within a range, oldest first.

        Args:
            user_id: Owner of the transactions
            start_date: Start date (inclusive)
            end_date: End date (inclusive)
            transaction_type: Optional filter by Income/Expense
        """
        params: list = [user_id, start_date.isoformat(), end_date.isoformat()]
        type_clause = ""
        if transaction_type is not None:
            type_clause = "AND t.type = ?"
            params.append(TransactionType(transaction_type).value)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                {_SELECT_TRANSACTION}
                WHERE t.user_id = ?
                AND t.transaction_date >= ? AND t.transaction_date <= ?
                {type_clause}
                ORDER BY t.transaction_date ASC, t.id ASC
                """,
                params,
            )
            return [Transaction.from_row(row) for row in cursor.fetchall()]

    def count_user_transactions(self, user_id: int) -> int:
        """Count all transactions a user owns."""
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM transactions WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

    # =========================================================================
    # Aggregates
    # =========================================================================

    def sum_expenses_cents(
        self,
        user_id: int,
        category_id: int,
        month: int,
        year: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """Total of the user's Expense transactions in a category and month, in cents."""
        start, end = month_bounds(month, year)
        with self._use_connection(conn) as c:
            row = c.execute(
                """
                SELECT COALESCE(SUM(amount_cents), 0)
                FROM transactions
                WHERE user_id = ? AND category_id = ? AND type = ?
                  AND transaction_date >= ? AND transaction_date < ?
                """,
                (
                    user_id,
                    category_id,
                    TransactionType.EXPENSE.value,
                    start.isoformat(),
                    end.isoformat(),
                ),
            ).fetchone()
            return row[0]

    def sum_expenses(
        self, user_id: int, category_id: int, month: int, year: int
    ) -> float:
        """Total of the user's Expense transactions in a category and month."""
        return from_cents(self.sum_expenses_cents(user_id, category_id, month, year))
