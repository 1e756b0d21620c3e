"""
Error taxonomy for the fintrack core.

Validation and lookup failures never change state. Persistence failures are
raised only after the surrounding unit of work has been rolled back.
"""


class FinanceError(Exception):
    """Base class for all fintrack errors."""


class ValidationError(FinanceError, ValueError):
    """Invalid input: bad amount, type/category mismatch, missing field."""


class NotFoundError(FinanceError, LookupError):
    """Unknown account, category, transaction, budget or user, or owned by someone else."""

    def __init__(self, entity: str, entity_id, user_id=None):
        self.entity = entity
        self.entity_id = entity_id
        self.user_id = user_id
        if user_id is None:
            message = f"{entity} {entity_id} not found"
        else:
            message = f"{entity} {entity_id} not found for user {user_id}"
        super().__init__(message)


class PersistenceError(FinanceError):
    """The store failed or rejected a write."""


class DuplicateNameError(PersistenceError):
    """An account or category with this name already exists for the user."""


class EntityInUseError(PersistenceError):
    """The entity is still referenced and cannot be deleted."""
