"""
Account models and the ledger sign rule.

Defines account types, the Account model, and the rule that decides how a
transaction moves an account's stored balance.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from fintrack.money import from_cents

from .transaction import TransactionType


class AccountType(str, Enum):
    """
    Kinds of account a user can hold.

    CREDIT_CARD balances are stored as outstanding debt: an expense grows the
    stored number, just like an income grows the balance of any other account.
    """

    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT_CARD = "Credit Card"
    CASH = "Cash"
    INVESTMENT = "Investment"
    LOAN = "Loan"

    def balance_multiplier(self, transaction_type: TransactionType) -> int:
        """
        Get the multiplier a transaction of the given type applies to this account.

        - Income on any account: +1
        - Expense on a credit card: +1
        - Expense on any other account: -1

        Returns:
            1 if the transaction increases the stored balance, -1 if it decreases it
        """
        if transaction_type == TransactionType.INCOME:
            return 1
        if self is AccountType.CREDIT_CARD:
            return 1
        return -1


def balance_effect(
    transaction_type: TransactionType, account_type: AccountType, amount_cents: int
) -> int:
    """Signed delta, in cents, that a transaction applies to its account."""
    return account_type.balance_multiplier(transaction_type) * amount_cents


def reversal_effect(
    transaction_type: TransactionType, account_type: AccountType, amount_cents: int
) -> int:
    """Delta that exactly undoes balance_effect for the same inputs."""
    return -balance_effect(transaction_type, account_type, amount_cents)


@dataclass
class Account:
    """
    Represents a money account owned by a user.

    current_balance always equals initial_balance plus the effect of every
    live transaction on the account.
    """

    id: Optional[int]
    user_id: int
    name: str
    account_type: AccountType
    initial_balance: float = 0.0
    current_balance: float = 0.0
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize account name (preserve case for display)."""
        if self.name:
            self.name = self.name.strip()

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "account_type": self.account_type.value,
            "initial_balance": self.initial_balance,
            "current_balance": self.current_balance,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row) -> "Account":
        """Create an Account from a database row (balances stored in cents)."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            account_type=AccountType(row["account_type"]),
            initial_balance=from_cents(row["initial_balance_cents"]),
            current_balance=from_cents(row["current_balance_cents"]),
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
            ),
        )


# Default accounts created for every new user: (name, type)
DEFAULT_ACCOUNTS = [
    ("Cash", AccountType.CASH),
    ("Checking Account", AccountType.CHECKING),
    ("Savings Account", AccountType.SAVINGS),
]
