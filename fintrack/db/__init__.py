"""
Database module for the fintrack ledger.

This module provides the persistence gateway: SQLite repositories for users,
accounts, categories, transactions and budgets.

Structure:
- base.py: Base repository with connection management, schema and unit of work
- users.py: User identities
- accounts.py: Accounts and stored balances
- categories.py: Income/expense categories
- transactions.py: Transaction rows and expense sums
- budgets.py: Monthly category budgets
- queries.py: Read-only summary queries
- repository.py: Main facade that composes all sub-repositories
"""

from .accounts import AccountRepository
from .base import BaseRepository
from .budgets import BudgetRepository
from .categories import CategoryRepository
from .queries import QueryRepository
from .repository import FinanceRepository, get_repository
from .transactions import TransactionRepository, month_bounds
from .users import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Repositories
    "AccountRepository",
    "BudgetRepository",
    "CategoryRepository",
    "FinanceRepository",
    "QueryRepository",
    "TransactionRepository",
    "UserRepository",
    # Utilities
    "get_repository",
    "month_bounds",
]
