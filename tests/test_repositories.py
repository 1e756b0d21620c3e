"""
Tests for reference data management.

Covers users, accounts and categories, including the rules that protect
referenced rows and the balance audit.
"""

import sqlite3
from datetime import date

import pytest

from fintrack.errors import (
    DuplicateNameError,
    EntityInUseError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fintrack.models import AccountType, CategoryType, TransactionType


class TestUsers:
    """Tests for UserRepository."""

    def test_duplicate_username(self, repository, user):
        with pytest.raises(DuplicateNameError):
            repository.users.create_user("alice", "h", "s")

    def test_missing_credentials(self, repository):
        with pytest.raises(ValidationError):
            repository.users.create_user("dave", "", "salt")

    def test_lookup_and_update(self, repository, user):
        assert repository.users.get_user_by_username("alice").id == user.id

        updated = repository.users.update_user(user.id, username="alicia", is_admin=True)
        assert updated.username == "alicia"
        assert repository.users.get_user_by_id(user.id).is_admin is True

    def test_update_unknown_user(self, repository):
        with pytest.raises(NotFoundError):
            repository.users.update_user(9999, username="ghost")

    def test_delete_cascades(
        self, repository, reconciler, budget_service, user, account, category, draft
    ):
        reconciler.create_transaction(user.id, draft(account(user), category(user), 10))
        budget_service.set_budget(user.id, category(user).id, 100, 5, 2024)

        assert repository.users.delete_user(user.id) is True
        assert repository.users.get_user_by_id(user.id) is None
        assert repository.accounts.count_accounts(user.id) == 0
        assert repository.categories.count_categories(user.id) == 0
        assert repository.transactions.count_user_transactions(user.id) == 0
        assert repository.budgets.get_user_budgets(user.id) == []
        assert repository.users.delete_user(user.id) is False


class TestAccounts:
    """Tests for AccountRepository."""

    def test_create_sets_current_to_initial(self, repository, user):
        acc = repository.accounts.create_account(
            user.id, "Brokerage", AccountType.INVESTMENT, initial_balance=2500.5
        )
        assert acc.current_balance == 2500.5
        assert repository.accounts.get_account(acc.id).initial_balance == 2500.5

    def test_name_is_unique_per_user(self, repository, user, other_user):
        with pytest.raises(DuplicateNameError):
            repository.accounts.create_account(user.id, "cash", AccountType.CASH)
        repository.accounts.create_account(other_user.id, "Wallet", AccountType.CASH)
        repository.accounts.create_account(user.id, "Wallet", AccountType.CASH)

    def test_duplicate_name_is_a_persistence_error(self, repository, user):
        with pytest.raises(PersistenceError):
            repository.accounts.create_account(user.id, "Cash", AccountType.CASH)

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    def test_invalid_name(self, repository, user, name):
        with pytest.raises(ValidationError):
            repository.accounts.create_account(user.id, name, AccountType.CASH)

    def test_invalid_type(self, repository, user):
        with pytest.raises(ValidationError):
            repository.accounts.create_account(user.id, "Odd", "Piggy Bank")

    def test_foreign_account_is_not_found(self, repository, user, other_user, account):
        with pytest.raises(NotFoundError):
            repository.accounts.get_user_account(other_user.id, account(user).id)

    def test_delete_referenced_account_is_forbidden(
        self, repository, reconciler, user, account, category, draft
    ):
        checking = account(user)
        reconciler.create_transaction(user.id, draft(checking, category(user), 10))

        with pytest.raises(EntityInUseError):
            repository.accounts.delete_account(user.id, checking.id)
        assert repository.accounts.get_account(checking.id) is not None

    def test_delete_unused_account(self, repository, user, account):
        savings = account(user, "Savings Account")
        assert repository.accounts.delete_account(user.id, savings.id) is True
        assert repository.accounts.get_account(savings.id) is None

    def test_new_initial_balance_shifts_current(
        self, repository, reconciler, user, account, category, draft
    ):
        checking = account(user)
        reconciler.create_transaction(user.id, draft(checking, category(user), 30))

        updated = repository.accounts.update_account(
            user.id, checking.id, initial_balance=100
        )
        assert updated.initial_balance == 100.0
        assert updated.current_balance == 70.0

    def test_new_type_re_signs_expenses(
        self, repository, reconciler, user, account, category, draft
    ):
        checking = account(user)
        reconciler.create_transaction(user.id, draft(checking, category(user), 30))
        reconciler.create_transaction(
            user.id,
            draft(checking, category(user, "Salary"), 5, type=TransactionType.INCOME),
        )

        updated = repository.accounts.update_account(
            user.id, checking.id, account_type=AccountType.CREDIT_CARD
        )
        assert updated.current_balance == 35.0
        assert repository.accounts.verify_balances(user.id) == {}

    def test_rename_to_taken_name(self, repository, user, account):
        with pytest.raises(DuplicateNameError):
            repository.accounts.update_account(user.id, account(user).id, name="Cash")

    def test_verify_and_recompute_balances(self, repository, user, account):
        checking = account(user)
        with sqlite3.connect(repository.db_path) as conn:
            conn.execute(
                "UPDATE accounts SET current_balance_cents = 999 WHERE id = ?",
                (checking.id,),
            )

        assert repository.accounts.verify_balances(user.id) == {checking.id: (9.99, 0.0)}

        fixed = repository.accounts.recompute_balance(user.id, checking.id)
        assert fixed.current_balance == 0.0
        assert repository.accounts.verify_balances(user.id) == {}

    def test_account_balances_query(self, repository, user):
        assert repository.queries.get_account_balances(user.id) == {
            "Cash": 0.0,
            "Checking Account": 0.0,
            "Savings Account": 0.0,
        }


class TestCategories:
    """Tests for CategoryRepository."""

    def test_create_custom_category(self, repository, user):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        assert pets.is_default is False
        assert repository.categories.get_user_category(user.id, pets.id).name == "Pets"

    def test_duplicate_name(self, repository, user):
        with pytest.raises(DuplicateNameError):
            repository.categories.create_category(user.id, "food", CategoryType.EXPENSE)

    def test_invalid_type(self, repository, user):
        with pytest.raises(ValidationError):
            repository.categories.create_category(user.id, "Misc", "Transfer")

    def test_defaults_are_immutable(self, repository, user, category):
        food = category(user)
        with pytest.raises(ValidationError):
            repository.categories.update_category(user.id, food.id, name="Groceries")
        with pytest.raises(ValidationError):
            repository.categories.delete_category(user.id, food.id)

    def test_rename_custom_category(self, repository, user):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        renamed = repository.categories.update_category(user.id, pets.id, name="Animals")
        assert renamed.name == "Animals"

    def test_retype_referenced_category_is_forbidden(
        self, repository, reconciler, user, account, draft
    ):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        reconciler.create_transaction(user.id, draft(account(user), pets, 12))

        with pytest.raises(EntityInUseError):
            repository.categories.update_category(
                user.id, pets.id, category_type=CategoryType.INCOME
            )

    def test_delete_category_referenced_by_transaction(
        self, repository, reconciler, user, account, draft
    ):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        reconciler.create_transaction(user.id, draft(account(user), pets, 12))

        with pytest.raises(EntityInUseError):
            repository.categories.delete_category(user.id, pets.id)

    def test_delete_category_referenced_by_budget(self, repository, budget_service, user):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        budget_service.set_budget(user.id, pets.id, 50, 5, 2024)

        with pytest.raises(EntityInUseError):
            repository.categories.delete_category(user.id, pets.id)

    def test_delete_unused_category(self, repository, user):
        pets = repository.categories.create_category(user.id, "Pets", CategoryType.EXPENSE)
        assert repository.categories.delete_category(user.id, pets.id) is True
        assert repository.categories.get_category(pets.id) is None

    def test_foreign_category_is_not_found(self, repository, user, other_user, category):
        with pytest.raises(NotFoundError):
            repository.categories.delete_category(other_user.id, category(user).id)


class TestTransactionQueries:
    """Tests for transaction listings and sums."""

    @pytest.fixture
    def ledger(self, reconciler, user, account, category, draft):
        specs = [
            ("Checking Account", "Food", 10, TransactionType.EXPENSE, date(2024, 5, 1)),
            ("Cash", "Food", 20, TransactionType.EXPENSE, date(2024, 5, 20)),
            ("Checking Account", "Transport", 5, TransactionType.EXPENSE, date(2024, 6, 2)),
            ("Checking Account", "Salary", 900, TransactionType.INCOME, date(2024, 5, 31)),
        ]
        return [
            reconciler.create_transaction(
                user.id,
                draft(account(user, acc), category(user, cat), amount,
                      type=txn_type, transaction_date=day),
            )
            for acc, cat, amount, txn_type, day in specs
        ]

    def test_newest_first_with_filters(self, repository, user, account, ledger):
        listed = repository.transactions.get_user_transactions(user.id)
        assert [t.id for t in listed] == [ledger[2].id, ledger[3].id, ledger[1].id, ledger[0].id]

        expenses = repository.transactions.get_user_transactions(
            user.id, transaction_type=TransactionType.EXPENSE
        )
        assert len(expenses) == 3

        on_cash = repository.transactions.get_user_transactions(
            user.id, account_id=account(user, "Cash").id
        )
        assert [t.amount for t in on_cash] == [20.0]

        page = repository.transactions.get_user_transactions(user.id, limit=2, offset=1)
        assert [t.id for t in page] == [ledger[3].id, ledger[1].id]

    def test_sum_expenses(self, repository, user, category, ledger):
        food = category(user)
        assert repository.transactions.sum_expenses(user.id, food.id, 5, 2024) == 30.0
        assert repository.transactions.sum_expenses(user.id, food.id, 6, 2024) == 0.0

    def test_all_users(self, repository, user, other_user):
        assert [u.username for u in repository.users.get_all_users()] == ["alice", "bob"]
