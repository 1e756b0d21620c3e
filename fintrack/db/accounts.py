"""
Accounts repository module.

Handles all account-related database operations including:
- Account CRUD with per-user unique names
- Balance adjustment (only ever called by the reconciler)
- Balance recomputation from the transaction history
- Bulk insertion for default provisioning
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, Optional

from fintrack.config import MAX_ACCOUNT_NAME_LENGTH
from fintrack.errors import (
    DuplicateNameError,
    EntityInUseError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fintrack.models import Account, AccountType, TransactionType
from fintrack.money import from_cents, to_cents

from .base import BaseRepository

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "id, user_id, name, account_type, initial_balance_cents, "
    "current_balance_cents, created_at"
)


def _validate_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("Account name cannot be empty")
    name = name.strip()
    if len(name) > MAX_ACCOUNT_NAME_LENGTH:
        raise ValidationError(
            f"Account name must be at most {MAX_ACCOUNT_NAME_LENGTH} characters"
        )
    return name


def _coerce_type(account_type) -> AccountType:
    try:
        return AccountType(account_type)
    except ValueError:
        raise ValidationError(f"Unknown account type: {account_type!r}") from None


class AccountRepository(BaseRepository):
    """Repository for managing user accounts and their stored balances."""

    def __init__(self, db_path=None, init_schema: bool = False):
        """
        Initialize the account repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema (usually False,
                        as main repository handles this)
        """
        super().__init__(db_path, init_schema=init_schema)

    # =========================================================================
    # Create / Read
    # =========================================================================

    def create_account(
        self,
        user_id: int,
        name: str,
        account_type: AccountType,
        initial_balance: float = 0.0,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Account:
        """
        Create a new account whose current balance starts at its initial balance.

        Raises:
            ValidationError: If the name or type is invalid
            DuplicateNameError: If the user already has an account with that name
        """
        name = _validate_name(name)
        account_type = _coerce_type(account_type)
        initial_cents = to_cents(initial_balance)
        created_at = datetime.now(timezone.utc)

        with self._use_connection(conn) as c:
            if self.get_account_by_name(user_id, name, conn=c):
                raise DuplicateNameError(f"Account '{name}' already exists")

            cursor = c.execute(
                """
                INSERT INTO accounts (
                    user_id, name, account_type, initial_balance_cents,
                    current_balance_cents, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    name,
                    account_type.value,
                    initial_cents,
                    initial_cents,
                    created_at.isoformat(),
                ),
            )
            logger.info(
                f"Created account '{name}' (type: {account_type.value}) "
                f"for user {user_id}"
            )

            return Account(
                id=cursor.lastrowid,
                user_id=user_id,
                name=name,
                account_type=account_type,
                initial_balance=from_cents(initial_cents),
                current_balance=from_cents(initial_cents),
                created_at=created_at,
            )

    def get_account(
        self, account_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Account]:
        """Get an account by ID regardless of owner."""
        with self._use_connection(conn) as c:
            row = c.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ?",
                (account_id,),
            ).fetchone()
            return Account.from_row(row) if row else None

    def get_user_account(
        self,
        user_id: int,
        account_id: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Account:
        """
        Get an account owned by the user.

        Raises:
            NotFoundError: If the account is missing or owned by someone else
        """
        account = self.get_account(account_id, conn=conn)
        if account is None or account.user_id != user_id:
            if account is not None:
                logger.warning(
                    f"User {user_id} requested account {account_id} "
                    f"owned by {account.user_id}"
                )
            raise NotFoundError("Account", account_id, user_id)
        return account

    def get_account_by_name(
        self, user_id: int, name: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Account]:
        """Get an account by name (case-insensitive)."""
        if not name:
            return None
        with self._use_connection(conn) as c:
            row = c.execute(
                f"""
                SELECT {_ACCOUNT_COLUMNS} FROM accounts
                WHERE user_id = ? AND LOWER(name) = LOWER(?)
                """,
                (user_id, name.strip()),
            ).fetchone()
            return Account.from_row(row) if row else None

    def get_user_accounts(self, user_id: int) -> list[Account]:
        """Get all accounts for a user ordered by name."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_ACCOUNT_COLUMNS} FROM accounts
                WHERE user_id = ?
                ORDER BY name
                """,
                (user_id,),
            )
            accounts = [Account.from_row(row) for row in cursor.fetchall()]
            logger.debug(f"Retrieved {len(accounts)} accounts for user {user_id}")
            return accounts

    def count_accounts(
        self, user_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """Count the accounts a user owns."""
        with self._use_connection(conn) as c:
            return c.execute(
                "SELECT COUNT(*) FROM accounts WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

    # =========================================================================
    # Update / Delete
    # =========================================================================

    def update_account(
        self,
        user_id: int,
        account_id: int,
        name: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        initial_balance: Optional[float] = None,
    ) -> Account:
        """
        Update an account's name, type or initial balance.

        The current balance is never edited directly: after the change it is
        rebuilt as initial balance plus the effect of every transaction, so a
        new type re-signs existing expenses and a new initial balance shifts
        the balance by the difference.

        Raises:
            NotFoundError: If the account does not belong to the user
            DuplicateNameError: If the new name is taken
        """
        with self._get_connection(immediate=True) as conn:
            account = self.get_user_account(user_id, account_id, conn=conn)

            if name is not None:
                name = _validate_name(name)
                existing = self.get_account_by_name(user_id, name, conn=conn)
                if existing and existing.id != account_id:
                    raise DuplicateNameError(f"Account '{name}' already exists")
                account.name = name
            if account_type is not None:
                account.account_type = _coerce_type(account_type)
            initial_cents = (
                to_cents(initial_balance)
                if initial_balance is not None
                else to_cents(account.initial_balance)
            )

            conn.execute(
                """
                UPDATE accounts
                SET name = ?, account_type = ?, initial_balance_cents = ?
                WHERE id = ?
                """,
                (account.name, account.account_type.value, initial_cents, account_id),
            )
            balance_cents = self._recompute_balance(conn, account_id)

            account.initial_balance = from_cents(initial_cents)
            account.current_balance = from_cents(balance_cents)
            logger.info(f"Updated account {account_id} for user {user_id}")
            return account

    def delete_account(self, user_id: int, account_id: int) -> bool:
        """
        Delete an account that no transaction references.

        Raises:
            NotFoundError: If the account does not belong to the user
            EntityInUseError: If transactions still reference it
        """
        with self._get_connection(immediate=True) as conn:
            self.get_user_account(user_id, account_id, conn=conn)

            linked = conn.execute(
                "SELECT COUNT(*) FROM transactions WHERE account_id = ?",
                (account_id,),
            ).fetchone()[0]
            if linked:
                raise EntityInUseError(
                    f"Account {account_id} has {linked} linked transactions; "
                    "delete or reassign them first"
                )

            cursor = conn.execute(
                "DELETE FROM accounts WHERE id = ? AND user_id = ?",
                (account_id, user_id),
            )
            logger.info(f"Deleted account {account_id} for user {user_id}")
            return cursor.rowcount > 0

    # =========================================================================
    # Balance maintenance
    # =========================================================================

    def adjust_balance(
        self, account_id: int, delta_cents: int, conn: sqlite3.Connection
    ) -> None:
        """
        Add a signed delta to an account's current balance.

        Only valid inside a unit of work; the reconciler is the sole caller.

        Raises:
            PersistenceError: If the account row no longer exists
        """
        cursor = conn.execute(
            """
            UPDATE accounts
            SET current_balance_cents = current_balance_cents + ?
            WHERE id = ?
            """,
            (delta_cents, account_id),
        )
        if cursor.rowcount != 1:
            raise PersistenceError(
                f"Balance update for account {account_id} affected "
                f"{cursor.rowcount} rows"
            )
        logger.debug(f"Adjusted account {account_id} balance by {delta_cents} cents")

    def derived_balance_cents(self, conn: sqlite3.Connection, account_id: int) -> int:
        """Initial balance plus the effect of every live transaction, in cents."""
        row = conn.execute(
            """
            SELECT a.initial_balance_cents, a.account_type,
                   COALESCE(SUM(CASE WHEN t.type = ? THEN t.amount_cents END), 0)
                       AS income_cents,
                   COALESCE(SUM(CASE WHEN t.type = ? THEN t.amount_cents END), 0)
                       AS expense_cents
            FROM accounts a
            LEFT JOIN transactions t ON t.account_id = a.id
            WHERE a.id = ?
            GROUP BY a.id
            """,
            (TransactionType.INCOME.value, TransactionType.EXPENSE.value, account_id),
        ).fetchone()
        if row is None:
            raise NotFoundError("Account", account_id)

        account_type = AccountType(row["account_type"])
        return (
            row["initial_balance_cents"]
            + account_type.balance_multiplier(TransactionType.INCOME)
            * row["income_cents"]
            + account_type.balance_multiplier(TransactionType.EXPENSE)
            * row["expense_cents"]
        )

    def _recompute_balance(self, conn: sqlite3.Connection, account_id: int) -> int:
        balance_cents = self.derived_balance_cents(conn, account_id)
        conn.execute(
            "UPDATE accounts SET current_balance_cents = ? WHERE id = ?",
            (balance_cents, account_id),
        )
        return balance_cents

    def recompute_balance(self, user_id: int, account_id: int) -> Account:
        """Rebuild an account's current balance from its transaction history."""
        with self._get_connection(immediate=True) as conn:
            account = self.get_user_account(user_id, account_id, conn=conn)
            balance_cents = self._recompute_balance(conn, account_id)
            if to_cents(account.current_balance) != balance_cents:
                logger.warning(
                    f"Account {account_id} balance corrected from "
                    f"{account.current_balance} to {from_cents(balance_cents)}"
                )
            account.current_balance = from_cents(balance_cents)
            return account

    def verify_balances(self, user_id: int) -> dict[int, tuple[float, float]]:
        """
        Compare stored and derived balances for all of a user's accounts.

        Returns:
            Mapping of account ID to (stored, derived) for every mismatch
        """
        mismatches = {}
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT id, current_balance_cents FROM accounts WHERE user_id = ?",
                (user_id,),
            ).fetchall()
            for row in rows:
                derived = self.derived_balance_cents(conn, row["id"])
                if derived != row["current_balance_cents"]:
                    mismatches[row["id"]] = (
                        from_cents(row["current_balance_cents"]),
                        from_cents(derived),
                    )
        if mismatches:
            logger.warning(
                f"Found {len(mismatches)} accounts with inconsistent balances "
                f"for user {user_id}"
            )
        return mismatches

    # =========================================================================
    # Provisioning
    # =========================================================================

    def bulk_insert_accounts(
        self,
        user_id: int,
        accounts: Iterable[tuple[str, AccountType]],
        conn: sqlite3.Connection,
    ) -> int:
        """Insert (name, type) pairs with zero balances; returns rows inserted."""
        created_at = datetime.now(timezone.utc).isoformat()
        rows = [
            (user_id, name, account_type.value, 0, 0, created_at)
            for name, account_type in accounts
        ]
        conn.executemany(
            """
            INSERT INTO accounts (
                user_id, name, account_type, initial_balance_cents,
                current_balance_cents, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        logger.info(f"Inserted {len(rows)} default accounts for user {user_id}")
        return len(rows)
