"""Shared fixtures: a fresh SQLite database per test."""

from datetime import date

import pytest

from fintrack.db import FinanceRepository
from fintrack.models import TransactionDraft, TransactionType
from fintrack.services import (
    BudgetService,
    ExportService,
    ProvisioningService,
    SummaryService,
    TransactionReconciler,
)


@pytest.fixture
def repository(tmp_path):
    return FinanceRepository(tmp_path / "fintrack.db")


@pytest.fixture
def user(repository):
    user = repository.users.create_user("alice", "hash", "salt")
    ProvisioningService(repository).ensure_defaults(user.id)
    return user


@pytest.fixture
def other_user(repository):
    user = repository.users.create_user("bob", "hash", "salt")
    ProvisioningService(repository).ensure_defaults(user.id)
    return user


@pytest.fixture
def reconciler(repository):
    return TransactionReconciler(repository)


@pytest.fixture
def budget_service(repository):
    return BudgetService(repository)


@pytest.fixture
def summary_service(repository):
    return SummaryService(repository)


@pytest.fixture
def export_service(repository):
    return ExportService(repository)


@pytest.fixture
def account(repository):
    """Look up one of a user's accounts by name."""

    def _account(user, name="Checking Account"):
        return repository.accounts.get_account_by_name(user.id, name)

    return _account


@pytest.fixture
def category(repository):
    """Look up one of a user's categories by name."""

    def _category(user, name="Food"):
        return repository.categories.get_category_by_name(user.id, name)

    return _category


@pytest.fixture
def draft():
    """Build a TransactionDraft with sensible defaults."""

    def _draft(
        account,
        category,
        amount,
        type=TransactionType.EXPENSE,
        transaction_date=date(2024, 5, 10),
        description=None,
    ):
        return TransactionDraft(
            account_id=account.id,
            category_id=category.id,
            amount=amount,
            type=type,
            transaction_date=transaction_date,
            description=description,
        )

    return _draft


@pytest.fixture
def balance(repository):
    """Current balance of an account, read fresh from the database."""

    def _balance(account):
        return repository.accounts.get_account(account.id).current_balance

    return _balance
