from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .transaction import TransactionType

# Categories share the Income/Expense vocabulary with transactions
CategoryType = TransactionType


@dataclass
class Category:
    """A per-user income or expense category."""

    id: Optional[int]
    user_id: int
    name: str
    category_type: CategoryType
    is_default: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.name:
            self.name = self.name.strip()

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category_type": self.category_type.value,
            "is_default": self.is_default,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row) -> "Category":
        """Create a Category from a database row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category_type=CategoryType(row["category_type"]),
            is_default=bool(row["is_default"]),
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
            ),
        )


DEFAULT_EXPENSE_CATEGORIES = [
    "Food",
    "Transport",
    "Utilities",
    "Rent",
    "Shopping",
    "Entertainment",
    "Healthcare",
    "Education",
    "Donations",
    "Personal Care",
    "Travel",
    "Bills",
    "Miscellaneous",
]

DEFAULT_INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Investments",
    "Gifts",
    "Bonus",
    "Other Income",
]

# Default categories created for every new user: (name, type)
DEFAULT_CATEGORIES = [
    (name, CategoryType.EXPENSE) for name in DEFAULT_EXPENSE_CATEGORIES
] + [(name, CategoryType.INCOME) for name in DEFAULT_INCOME_CATEGORIES]
