"""
Budget service.

Sets monthly category limits and reports how much of each limit has been
used. Utilization is computed from the live transactions on every read and
never stored.
"""

import logging

from fintrack.db import FinanceRepository
from fintrack.errors import FinanceError, NotFoundError, ValidationError
from fintrack.models import Budget, BudgetStatus, CategoryType, classify_utilization
from fintrack.money import from_cents, positive_cents, to_cents

logger = logging.getLogger(__name__)


def _validate_period(month: int, year: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
    if not isinstance(year, int) or not 1900 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")


class BudgetService:
    """Service for budget management and utilization."""

    def __init__(self, repository: FinanceRepository):
        self.repository = repository
        self.budgets = repository.budgets
        self.transactions = repository.transactions

    def get_budget_status(self, user_id: int, budget: Budget) -> BudgetStatus:
        """
        Compute spent, remaining and status for a budget.

        spent is the sum of the user's Expense transactions in the budget's
        category whose date falls in the budget's month and year. A budget
        without matching transactions reports spent = 0.

        Raises:
            NotFoundError: If the budget belongs to another user
        """
        if budget.user_id != user_id:
            raise NotFoundError("Budget", budget.id, user_id)

        limit_cents = to_cents(budget.amount_limit)
        spent_cents = self.transactions.sum_expenses_cents(
            user_id, budget.category_id, budget.month, budget.year
        )
        status = classify_utilization(limit_cents, spent_cents)
        logger.debug(
            f"Budget {budget.id} for user {user_id}: spent {spent_cents} of "
            f"{limit_cents} cents ({status})"
        )
        return BudgetStatus(
            budget=budget,
            spent=from_cents(spent_cents),
            remaining=from_cents(limit_cents - spent_cents),
            status=status,
        )

    def list_budget_statuses(self, user_id: int) -> list[BudgetStatus]:
        """Utilization of all the user's budgets, newest period first."""
        return [
            self.get_budget_status(user_id, budget)
            for budget in self.budgets.get_user_budgets(user_id)
        ]

    def set_budget(
        self,
        user_id: int,
        category_id: int,
        amount_limit: float,
        month: int,
        year: int,
    ) -> Budget:
        """
        Set the limit for a category and month.

        A second call for the same (category, month, year) updates the
        existing budget's limit instead of adding another one.

        Raises:
            ValidationError: If the limit or period is invalid, or the
                category is not an Expense category
            NotFoundError: If the category is not the user's
        """
        limit_cents = positive_cents(amount_limit, field="amount_limit")
        _validate_period(month, year)

        try:
            with self.repository.unit_of_work() as conn:
                category = self.repository.categories.get_user_category(
                    user_id, category_id, conn=conn
                )
                if category.category_type != CategoryType.EXPENSE:
                    raise ValidationError(
                        f"Budgets can only be set on Expense categories, "
                        f"'{category.name}' is {category.category_type.value}"
                    )
                return self.budgets.upsert(
                    conn, user_id, category_id, limit_cents, month, year
                )
        except FinanceError:
            raise
        except Exception as e:
            logger.error(f"Error setting budget for user {user_id}: {e}", exc_info=True)
            raise

    def update_budget_limit(
        self, user_id: int, budget_id: int, amount_limit: float
    ) -> Budget:
        """
        Change the limit of an existing budget.

        Raises:
            ValidationError: If the limit is not positive
            NotFoundError: If the budget is not the user's
        """
        limit_cents = positive_cents(amount_limit, field="amount_limit")
        with self.repository.unit_of_work() as conn:
            budget = self.budgets.get_user_budget(user_id, budget_id, conn=conn)
            self.budgets.update_limit(conn, budget_id, limit_cents)
            budget.amount_limit = from_cents(limit_cents)
            return budget

    def delete_budget(self, user_id: int, budget_id: int) -> None:
        """
        Delete a budget.

        Raises:
            NotFoundError: If the budget is not the user's
        """
        if not self.budgets.delete(user_id, budget_id):
            raise NotFoundError("Budget", budget_id, user_id)

    def get_budget(self, user_id: int, budget_id: int) -> BudgetStatus:
        """Load one of the user's budgets together with its utilization."""
        budget = self.budgets.get_user_budget(user_id, budget_id)
        return self.get_budget_status(user_id, budget)
