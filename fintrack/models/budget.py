"""
Budget models.

A Budget stores only the limit for a (user, category, month, year) key. What
has been spent against it is derived from the live transaction set every time
it is read and is returned as a BudgetStatus.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fintrack.config import (
    NEARING_LIMIT_RATIO,
    STATUS_NEARING_LIMIT,
    STATUS_ON_TRACK,
    STATUS_OVER_BUDGET,
)
from fintrack.money import from_cents


@dataclass
class Budget:
    """Monthly spending limit for one expense category."""

    id: Optional[int]
    user_id: int
    category_id: int
    amount_limit: float
    month: int  # 1-12
    year: int
    created_at: Optional[datetime] = None
    category_name: Optional[str] = None  # Denormalized for display

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "amount_limit": self.amount_limit,
            "month": self.month,
            "year": self.year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "category_name": self.category_name,
        }

    @classmethod
    def from_row(cls, row) -> "Budget":
        """Create a Budget from a database row (limit stored in cents)."""
        keys = row.keys() if hasattr(row, "keys") else ()
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            category_id=row["category_id"],
            amount_limit=from_cents(row["amount_limit_cents"]),
            month=row["month"],
            year=row["year"],
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
            ),
            category_name=row["category_name"] if "category_name" in keys else None,
        )


@dataclass
class BudgetStatus:
    """Utilization of a budget computed from the current transactions."""

    budget: Budget
    spent: float
    remaining: float
    status: str

    @property
    def is_over_budget(self) -> bool:
        return self.status == STATUS_OVER_BUDGET

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            **self.budget.to_dict(),
            "spent": self.spent,
            "remaining": self.remaining,
            "status": self.status,
        }


def classify_utilization(limit_cents: int, spent_cents: int) -> str:
    """
    Label how much of a budget has been used.

    Over Budget when spent exceeds the limit, Nearing Limit when something is
    left but no more than 10% of the limit, otherwise On Track.
    """
    remaining_cents = limit_cents - spent_cents
    if spent_cents > limit_cents:
        return STATUS_OVER_BUDGET
    if 0 < remaining_cents <= limit_cents * NEARING_LIMIT_RATIO:
        return STATUS_NEARING_LIMIT
    return STATUS_ON_TRACK
