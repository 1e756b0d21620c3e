"""
Fintrack - Personal Finance Ledger Core

Accounts, categories, income/expense transactions and monthly budgets over
SQLite, with account balances kept consistent with the transaction history.
"""

from .config import VERSION
from .db import FinanceRepository, get_repository
from .errors import (
    DuplicateNameError,
    EntityInUseError,
    FinanceError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .models import (
    Account,
    AccountType,
    Budget,
    BudgetStatus,
    Category,
    CategoryType,
    Transaction,
    TransactionDraft,
    TransactionType,
    User,
)
from .services import (
    BudgetService,
    ExportFormat,
    ExportService,
    ProvisioningService,
    SummaryService,
    TransactionReconciler,
)

__version__ = VERSION

__all__ = [
    "Account",
    "AccountType",
    "Budget",
    "BudgetService",
    "BudgetStatus",
    "Category",
    "CategoryType",
    "DuplicateNameError",
    "EntityInUseError",
    "ExportFormat",
    "ExportService",
    "FinanceError",
    "FinanceRepository",
    "NotFoundError",
    "PersistenceError",
    "ProvisioningService",
    "SummaryService",
    "Transaction",
    "TransactionDraft",
    "TransactionReconciler",
    "TransactionType",
    "User",
    "ValidationError",
    "get_repository",
]
