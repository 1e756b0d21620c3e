from .account import (
    DEFAULT_ACCOUNTS,
    Account,
    AccountType,
    balance_effect,
    reversal_effect,
)
from .budget import Budget, BudgetStatus, classify_utilization
from .category import (
    DEFAULT_CATEGORIES,
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    Category,
    CategoryType,
)
from .transaction import Transaction, TransactionDraft, TransactionType
from .user import User

__all__ = [
    "AccountType",
    "Account",
    "Budget",
    "BudgetStatus",
    "Category",
    "CategoryType",
    "DEFAULT_ACCOUNTS",
    "DEFAULT_CATEGORIES",
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_CATEGORIES",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "User",
    "balance_effect",
    "classify_utilization",
    "reversal_effect",
]
