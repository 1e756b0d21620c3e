"""
Default provisioning for new users.

Seeds the standard accounts and categories the first time a user is seen.
Safe to call on every login.
"""

import logging

from fintrack.db import FinanceRepository
from fintrack.errors import NotFoundError
from fintrack.models import DEFAULT_ACCOUNTS, DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)


class ProvisioningService:
    """Seeds default reference data for users."""

    def __init__(self, repository: FinanceRepository):
        self.repository = repository

    def ensure_defaults(self, user_id: int) -> dict[str, int]:
        """
        Ensure the user has accounts and categories to work with.

        Default accounts are inserted only when the user owns no account, and
        default categories only when the user owns no category. Both checks
        and inserts run in one unit of work, so repeated or concurrent calls
        never produce a second set.

        Args:
            user_id: The user to provision

        Returns:
            Number of accounts and categories inserted by this call

        Raises:
            NotFoundError: If the user does not exist
        """
        with self.repository.unit_of_work() as conn:
            if self.repository.users.get_user_by_id(user_id, conn=conn) is None:
                raise NotFoundError("User", user_id)

            inserted = {"accounts": 0, "categories": 0}

            if self.repository.accounts.count_accounts(user_id, conn=conn) == 0:
                inserted["accounts"] = self.repository.accounts.bulk_insert_accounts(
                    user_id, DEFAULT_ACCOUNTS, conn
                )
            else:
                logger.debug(f"User {user_id} already has accounts, skipping defaults")

            if self.repository.categories.count_categories(user_id, conn=conn) == 0:
                inserted["categories"] = (
                    self.repository.categories.bulk_insert_categories(
                        user_id, DEFAULT_CATEGORIES, conn
                    )
                )
            else:
                logger.debug(
                    f"User {user_id} already has categories, skipping defaults"
                )

        if any(inserted.values()):
            logger.info(
                f"Provisioned user {user_id} with {inserted['accounts']} accounts "
                f"and {inserted['categories']} categories"
            )
        return inserted
