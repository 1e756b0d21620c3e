from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from fintrack.errors import ValidationError
from fintrack.money import from_cents


class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


@dataclass
class Transaction:
    """A recorded income or expense against one account and one category."""

    id: Optional[int]
    user_id: int
    account_id: int
    category_id: int
    amount: float
    type: TransactionType
    description: Optional[str]
    transaction_date: date
    created_at: Optional[datetime] = None
    # Denormalized for display
    account_name: Optional[str] = None
    category_name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "account_id": self.account_id,
            "category_id": self.category_id,
            "amount": self.amount,
            "type": self.type.value,
            "description": self.description,
            "transaction_date": self.transaction_date.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "account_name": self.account_name,
            "category_name": self.category_name,
        }

    @classmethod
    def from_row(cls, row) -> "Transaction":
        """Create a Transaction from a database row (amount stored in cents)."""
        keys = row.keys() if hasattr(row, "keys") else ()
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            account_id=row["account_id"],
            category_id=row["category_id"],
            amount=from_cents(row["amount_cents"]),
            type=TransactionType(row["type"]),
            description=row["description"],
            transaction_date=date.fromisoformat(row["transaction_date"]),
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
            ),
            account_name=row["account_name"] if "account_name" in keys else None,
            category_name=row["category_name"] if "category_name" in keys else None,
        )


@dataclass
class TransactionDraft:
    """Caller-supplied field values for creating or replacing a transaction."""

    account_id: int
    category_id: int
    amount: float
    type: TransactionType
    transaction_date: date
    description: Optional[str] = None

    def __post_init__(self):
        """Accept plain strings for the transaction type."""
        if isinstance(self.type, str) and not isinstance(self.type, TransactionType):
            try:
                self.type = TransactionType(self.type)
            except ValueError:
                raise ValidationError(
                    f"Transaction type must be Income or Expense, got {self.type!r}"
                ) from None
        if self.description is not None:
            self.description = self.description.strip() or None
