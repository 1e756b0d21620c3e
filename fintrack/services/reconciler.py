"""
Transaction reconciler.

The only way to create, change or remove a transaction. Every call runs as a
single unit of work that writes the transaction row and the balance change
of every affected account together, so an account's current balance always
equals its initial balance plus the effect of its live transactions.
"""

import logging
import sqlite3
from datetime import date, datetime

from fintrack.config import MAX_DESCRIPTION_LENGTH
from fintrack.db import FinanceRepository
from fintrack.errors import FinanceError, NotFoundError, ValidationError
from fintrack.models import (
    Account,
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
    balance_effect,
    reversal_effect,
)
from fintrack.money import positive_cents, to_cents

logger = logging.getLogger(__name__)


class TransactionReconciler:
    """Applies and reverses transaction effects on account balances."""

    def __init__(self, repository: FinanceRepository):
        """
        Initialize the reconciler.

        Args:
            repository: Repository facade sharing one database
        """
        self.repository = repository
        self.accounts = repository.accounts
        self.categories = repository.categories
        self.transactions = repository.transactions

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_draft(self, draft: TransactionDraft) -> int:
        """Check caller input that needs no lookup; returns the amount in cents."""
        if draft.account_id is None:
            raise ValidationError("account_id is required")
        if draft.category_id is None:
            raise ValidationError("category_id is required")
        if not isinstance(draft.type, TransactionType):
            raise ValidationError(f"Invalid transaction type: {draft.type!r}")
        if isinstance(draft.transaction_date, datetime):
            draft.transaction_date = draft.transaction_date.date()
        if not isinstance(draft.transaction_date, date):
            raise ValidationError("transaction_date must be a date")
        if draft.description and len(draft.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )
        return positive_cents(draft.amount)

    def _resolve_references(
        self, conn: sqlite3.Connection, user_id: int, draft: TransactionDraft
    ) -> tuple[Account, Category]:
        """Load the draft's account and category and check they fit it."""
        account = self.accounts.get_user_account(user_id, draft.account_id, conn=conn)
        category = self.categories.get_user_category(
            user_id, draft.category_id, conn=conn
        )
        if category.category_type != draft.type:
            raise ValidationError(
                f"Category '{category.name}' is a {category.category_type.value} "
                f"category and cannot be used for a {draft.type.value} transaction"
            )
        return account, category

    def _load_owned(
        self, conn: sqlite3.Connection, user_id: int, transaction_id: int
    ) -> Transaction:
        stored = self.transactions.get_transaction_by_id(transaction_id, conn=conn)
        if stored is None or stored.user_id != user_id:
            if stored is not None:
                logger.warning(
                    f"User {user_id} attempted to modify transaction "
                    f"{transaction_id} owned by {stored.user_id}"
                )
            raise NotFoundError("Transaction", transaction_id, user_id)
        return stored

    def _reverse(self, conn: sqlite3.Connection, stored: Transaction) -> None:
        """Undo a stored transaction's effect on its account."""
        account = self.accounts.get_account(stored.account_id, conn=conn)
        if account is None:
            raise NotFoundError("Account", stored.account_id)
        delta = reversal_effect(stored.type, account.account_type, to_cents(stored.amount))
        self.accounts.adjust_balance(account.id, delta, conn)

    # =========================================================================
    # Operations
    # =========================================================================

    def create_transaction(self, user_id: int, draft: TransactionDraft) -> Transaction:
        """
        Record a new transaction and apply it to its account.

        Args:
            user_id: Owner of the transaction, account and category
            draft: Field values of the new transaction

        Returns:
            The stored Transaction with its generated ID

        Raises:
            ValidationError: On bad amount, date or category/type mismatch
            NotFoundError: If the account or category is not the user's
            PersistenceError: If the store rejects the write; no balance changes
        """
        amount_cents = self._validate_draft(draft)

        try:
            with self.repository.unit_of_work() as conn:
                account, _ = self._resolve_references(conn, user_id, draft)
                transaction_id = self.transactions.insert_transaction(
                    conn,
                    user_id=user_id,
                    account_id=account.id,
                    category_id=draft.category_id,
                    amount_cents=amount_cents,
                    transaction_type=draft.type,
                    transaction_date=draft.transaction_date,
                    description=draft.description,
                )
                delta = balance_effect(draft.type, account.account_type, amount_cents)
                self.accounts.adjust_balance(account.id, delta, conn)
                transaction = self.transactions.get_transaction_by_id(
                    transaction_id, conn=conn
                )
        except FinanceError:
            raise
        except Exception as e:
            logger.error(f"Error creating transaction: {e}", exc_info=True)
            raise

        logger.info(
            f"Created transaction {transaction.id} for user {user_id}: "
            f"{draft.type.value} {transaction.amount} on account {account.id} "
            f"(delta {delta} cents)"
        )
        return transaction

    def update_transaction(
        self, user_id: int, transaction_id: int, draft: TransactionDraft
    ) -> Transaction:
        """
        Replace a transaction's fields and move its balance effect accordingly.

        The stored transaction's effect is reversed on its original account,
        the row is rewritten and the new effect is applied to the (possibly
        different) new account. The end state equals deleting the old
        transaction and creating the new one.

        Args:
            user_id: Owner of the transaction
            transaction_id: ID of the transaction to replace
            draft: The complete new field values

        Returns:
            The updated Transaction

        Raises:
            ValidationError: On bad input; no balance changes
            NotFoundError: If the transaction, account or category is not the user's
            PersistenceError: If the store rejects a write; no balance changes
        """
        amount_cents = self._validate_draft(draft)

        try:
            with self.repository.unit_of_work() as conn:
                stored = self._load_owned(conn, user_id, transaction_id)
                self._reverse(conn, stored)

                account, _ = self._resolve_references(conn, user_id, draft)
                self.transactions.update_transaction_row(
                    conn,
                    transaction_id=transaction_id,
                    user_id=user_id,
                    account_id=account.id,
                    category_id=draft.category_id,
                    amount_cents=amount_cents,
                    transaction_type=draft.type,
                    transaction_date=draft.transaction_date,
                    description=draft.description,
                )
                delta = balance_effect(draft.type, account.account_type, amount_cents)
                self.accounts.adjust_balance(account.id, delta, conn)
                transaction = self.transactions.get_transaction_by_id(
                    transaction_id, conn=conn
                )
        except FinanceError:
            raise
        except Exception as e:
            logger.error(
                f"Error updating transaction {transaction_id}: {e}", exc_info=True
            )
            raise

        logger.info(
            f"Updated transaction {transaction_id} for user {user_id}: "
            f"account {stored.account_id} -> {account.id}, "
            f"{stored.type.value} {stored.amount} -> {draft.type.value} "
            f"{transaction.amount}"
        )
        return transaction

    def delete_transaction(self, user_id: int, transaction_id: int) -> Transaction:
        """
        Remove a transaction and reverse its effect on its account.

        The stored row is the only source for the reversal.

        Returns:
            The deleted Transaction as it was stored

        Raises:
            NotFoundError: If the transaction does not exist or is not the user's
            PersistenceError: If the store rejects the delete; no balance changes
        """
        try:
            with self.repository.unit_of_work() as conn:
                stored = self._load_owned(conn, user_id, transaction_id)
                self._reverse(conn, stored)
                self.transactions.delete_transaction_row(conn, transaction_id, user_id)
        except FinanceError:
            raise
        except Exception as e:
            logger.error(
                f"Error deleting transaction {transaction_id}: {e}", exc_info=True
            )
            raise

        logger.info(
            f"Deleted transaction {transaction_id} for user {user_id}: "
            f"reversed {stored.type.value} {stored.amount} on account "
            f"{stored.account_id}"
        )
        return stored
