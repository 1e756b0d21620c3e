"""
Base repository module with connection management and schema initialization.

Provides the foundation for all database operations in fintrack, including the
unit of work that lets several repository calls commit or roll back together.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fintrack.config import DB_TIMEOUT, get_db_path
from fintrack.errors import FinanceError, PersistenceError

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    Base repository class with SQLite connection management.

    Every public repository method accepts an optional ``conn``. When given,
    the call runs inside the caller's unit of work and neither commits nor
    rolls back; otherwise it opens, commits and closes its own connection.
    """

    def __init__(self, db_path: Optional[Path] = None, init_schema: bool = True):
        """
        Initialize the base repository.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/fintrack.db
            init_schema: Whether to initialize the schema on startup
        """
        self.db_path = Path(db_path) if db_path else get_db_path()
        self._ensure_db_directory()
        if init_schema:
            self._init_schema()

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT)
        conn.row_factory = sqlite3.Row
        # Enable foreign keys
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _get_connection(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """
        Context manager for database connections with proper error handling.

        Commits on success and rolls back on any exception. sqlite3 errors are
        re-raised as PersistenceError after the rollback.
        """
        conn = None
        try:
            conn = self._connect()
            if immediate:
                # Take the write lock up front so the whole unit is serialized
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except FinanceError:
            if conn:
                conn.rollback()
            raise
        except sqlite3.OperationalError as e:
            logger.error(f"Database locked or operational error: {e}", exc_info=True)
            if conn:
                conn.rollback()
            raise PersistenceError(f"Database unavailable: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}", exc_info=True)
            if conn:
                conn.rollback()
            raise PersistenceError(f"Database error: {e}") from e
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[sqlite3.Connection]:
        """
        Open an atomic unit of work.

        Everything executed on the yielded connection is committed together
        when the block exits normally, and rolled back if it raises.
        """
        with self._get_connection(immediate=True) as conn:
            yield conn

    @contextmanager
    def _use_connection(
        self, conn: Optional[sqlite3.Connection] = None
    ) -> Iterator[sqlite3.Connection]:
        """Reuse the caller's connection, or open a short-lived one."""
        if conn is not None:
            yield conn
            return
        with self._get_connection() as own:
            yield own

    def _init_schema(self):
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE CHECK(length(username) > 0),
                    password_hash TEXT NOT NULL,
                    password_salt TEXT NOT NULL,
                    is_admin INTEGER NOT NULL DEFAULT 0 CHECK(is_admin IN (0, 1)),
                    created_at TEXT NOT NULL
                )
            """)

            # Balances are stored as integer cents
            conn.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    name TEXT NOT NULL CHECK(length(name) > 0),
                    account_type TEXT NOT NULL CHECK(
                        account_type IN ('Checking', 'Savings', 'Credit Card',
                                         'Cash', 'Investment', 'Loan')
                    ),
                    initial_balance_cents INTEGER NOT NULL DEFAULT 0,
                    current_balance_cents INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    UNIQUE(user_id, name)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    name TEXT NOT NULL CHECK(length(name) > 0),
                    category_type TEXT NOT NULL CHECK(
                        category_type IN ('Income', 'Expense')
                    ),
                    is_default INTEGER NOT NULL DEFAULT 0 CHECK(is_default IN (0, 1)),
                    created_at TEXT NOT NULL,
                    UNIQUE(user_id, name)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    account_id INTEGER NOT NULL REFERENCES accounts(id),
                    category_id INTEGER NOT NULL REFERENCES categories(id),
                    amount_cents INTEGER NOT NULL CHECK(amount_cents > 0),
                    type TEXT NOT NULL CHECK(type IN ('Income', 'Expense')),
                    description TEXT,
                    transaction_date TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS budgets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    category_id INTEGER NOT NULL REFERENCES categories(id),
                    amount_limit_cents INTEGER NOT NULL CHECK(amount_limit_cents > 0),
                    month INTEGER NOT NULL CHECK(month >= 1 AND month <= 12),
                    year INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE(user_id, category_id, month, year)
                )
            """)

            # Create indexes for performance
            self._create_indexes(conn)

            logger.debug("Finance schema initialized successfully")

    def _create_indexes(self, conn):
        """Create database indexes for query performance."""
        indexes = [
            ("idx_accounts_user_id", "accounts", "user_id"),
            ("idx_categories_user_id", "categories", "user_id"),
            ("idx_transactions_user_id", "transactions", "user_id"),
            ("idx_transactions_account_id", "transactions", "account_id"),
            ("idx_transactions_category_id", "transactions", "category_id"),
            ("idx_transactions_date", "transactions", "transaction_date"),
            (
                "idx_transactions_user_type_date",
                "transactions",
                "user_id, type, transaction_date",
            ),
            ("idx_budgets_user_id", "budgets", "user_id"),
            ("idx_budgets_category_id", "budgets", "category_id"),
        ]

        for index_name, table, columns in indexes:
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS {index_name}
                ON {table}({columns})
            """)
