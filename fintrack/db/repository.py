"""
Main repository facade for fintrack.

Composes the user, account, category, transaction, budget and query
repositories over one database file and exposes the unit of work they share.
"""

import logging
from pathlib import Path
from typing import Optional

from .accounts import AccountRepository
from .base import BaseRepository
from .budgets import BudgetRepository
from .categories import CategoryRepository
from .queries import QueryRepository
from .transactions import TransactionRepository
from .users import UserRepository

logger = logging.getLogger(__name__)


class FinanceRepository(BaseRepository):
    """
    Facade over all fintrack repositories.

    Initializes the schema once, then hands the same database path to every
    sub-repository so they can join a single unit of work.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the repository and all sub-repositories.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/fintrack.db
        """
        super().__init__(db_path, init_schema=True)

        self.users = UserRepository(self.db_path)
        self.accounts = AccountRepository(self.db_path)
        self.categories = CategoryRepository(self.db_path)
        self.transactions = TransactionRepository(self.db_path)
        self.budgets = BudgetRepository(self.db_path)
        self.queries = QueryRepository(self.db_path)

        logger.info(f"FinanceRepository initialized with db_path: {self.db_path}")


# Singleton instance
_default_repository: Optional[FinanceRepository] = None


def get_repository() -> FinanceRepository:
    """Get or create the default repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = FinanceRepository()
    return _default_repository
