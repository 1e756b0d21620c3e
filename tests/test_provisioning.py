"""Tests for default account and category provisioning."""

import pytest

from fintrack.errors import NotFoundError
from fintrack.models import AccountType, CategoryType
from fintrack.services import ProvisioningService


@pytest.fixture
def provisioning(repository):
    return ProvisioningService(repository)


@pytest.fixture
def new_user(repository):
    return repository.users.create_user("carol", "hash", "salt")


class TestEnsureDefaults:
    """Tests for ProvisioningService.ensure_defaults."""

    def test_first_call_seeds_everything(self, repository, provisioning, new_user):
        inserted = provisioning.ensure_defaults(new_user.id)

        assert inserted == {"accounts": 3, "categories": 19}
        accounts = repository.accounts.get_user_accounts(new_user.id)
        assert {a.name for a in accounts} == {"Cash", "Checking Account", "Savings Account"}
        assert all(a.current_balance == 0.0 for a in accounts)

        categories = repository.categories.get_user_categories(new_user.id)
        assert all(c.is_default for c in categories)
        assert len(repository.categories.get_user_categories(new_user.id, CategoryType.EXPENSE)) == 13
        assert len(repository.categories.get_user_categories(new_user.id, CategoryType.INCOME)) == 6

    def test_second_call_is_a_no_op(self, repository, provisioning, new_user):
        provisioning.ensure_defaults(new_user.id)
        inserted = provisioning.ensure_defaults(new_user.id)

        assert inserted == {"accounts": 0, "categories": 0}
        assert repository.accounts.count_accounts(new_user.id) == 3
        assert repository.categories.count_categories(new_user.id) == 19

    def test_existing_accounts_are_kept(self, repository, provisioning, new_user):
        repository.accounts.create_account(new_user.id, "Wallet", AccountType.CASH)

        inserted = provisioning.ensure_defaults(new_user.id)

        assert inserted == {"accounts": 0, "categories": 19}
        assert [a.name for a in repository.accounts.get_user_accounts(new_user.id)] == ["Wallet"]

    def test_users_are_provisioned_independently(self, repository, provisioning, user, new_user):
        provisioning.ensure_defaults(new_user.id)
        assert repository.accounts.count_accounts(user.id) == 3
        assert repository.accounts.count_accounts(new_user.id) == 3

    def test_unknown_user(self, provisioning):
        with pytest.raises(NotFoundError):
            provisioning.ensure_defaults(9999)
