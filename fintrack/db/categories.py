"""
Categories repository module.

Categories are per-user. Default categories are seeded once and can be
neither edited nor deleted; user categories can be deleted only while no
transaction or budget references them.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, Optional

from fintrack.config import MAX_CATEGORY_NAME_LENGTH
from fintrack.errors import (
    DuplicateNameError,
    EntityInUseError,
    NotFoundError,
    ValidationError,
)
from fintrack.models import Category, CategoryType

from .base import BaseRepository

logger = logging.getLogger(__name__)

_CATEGORY_COLUMNS = "id, user_id, name, category_type, is_default, created_at"


def _validate_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("Category name cannot be empty")
    name = name.strip()
    if len(name) > MAX_CATEGORY_NAME_LENGTH:
        raise ValidationError(
            f"Category name must be at most {MAX_CATEGORY_NAME_LENGTH} characters"
        )
    return name


def _coerce_type(category_type) -> CategoryType:
    try:
        return CategoryType(category_type)
    except ValueError:
        raise ValidationError(
            f"Category type must be Income or Expense, got {category_type!r}"
        ) from None


class CategoryRepository(BaseRepository):
    """Repository for managing income and expense categories."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def create_category(
        self,
        user_id: int,
        name: str,
        category_type: CategoryType,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Category:
        """
        Create a user-defined category.

        Raises:
            ValidationError: If the name or type is invalid
            DuplicateNameError: If the user already has a category with that name
        """
        name = _validate_name(name)
        category_type = _coerce_type(category_type)
        created_at = datetime.now(timezone.utc)

        with self._use_connection(conn) as c:
            if self.get_category_by_name(user_id, name, conn=c):
                raise DuplicateNameError(f"Category '{name}' already exists")

            cursor = c.execute(
                """
                INSERT INTO categories
                (user_id, name, category_type, is_default, created_at)
                VALUES (?, ?, ?, 0, ?)
                """,
                (user_id, name, category_type.value, created_at.isoformat()),
            )
            logger.info(
                f"Created category '{name}' ({category_type.value}) for user {user_id}"
            )
            return Category(
                id=cursor.lastrowid,
                user_id=user_id,
                name=name,
                category_type=category_type,
                is_default=False,
                created_at=created_at,
            )

    def get_category(
        self, category_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Category]:
        """Get a category by ID regardless of owner."""
        with self._use_connection(conn) as c:
            row = c.execute(
                f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE id = ?",
                (category_id,),
            ).fetchone()
            return Category.from_row(row) if row else None

    def get_user_category(
        self,
        user_id: int,
        category_id: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Category:
        """
        Get a category owned by the user.

        Raises:
            NotFoundError: If the category is missing or owned by someone else
        """
        category = self.get_category(category_id, conn=conn)
        if category is None or category.user_id != user_id:
            raise NotFoundError("Category", category_id, user_id)
        return category

    def get_category_by_name(
        self, user_id: int, name: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Category]:
        """Get a category by name (case-insensitive)."""
        if not name:
            return None
        with self._use_connection(conn) as c:
            row = c.execute(
                f"""
                SELECT {_CATEGORY_COLUMNS} FROM categories
                WHERE user_id = ? AND LOWER(name) = LOWER(?)
                """,
                (user_id, name.strip()),
            ).fetchone()
            return Category.from_row(row) if row else None

    def get_user_categories(
        self, user_id: int, category_type: Optional[CategoryType] = None
    ) -> list[Category]:
        """Get a user's categories ordered by name, optionally of one type."""
        with self._get_connection() as conn:
            if category_type is not None:
                cursor = conn.execute(
                    f"""
                    SELECT {_CATEGORY_COLUMNS} FROM categories
                    WHERE user_id = ? AND category_type = ?
                    ORDER BY name
                    """,
                    (user_id, _coerce_type(category_type).value),
                )
            else:
                cursor = conn.execute(
                    f"""
                    SELECT {_CATEGORY_COLUMNS} FROM categories
                    WHERE user_id = ?
                    ORDER BY name
                    """,
                    (user_id,),
                )
            return [Category.from_row(row) for row in cursor.fetchall()]

    def count_categories(
        self, user_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """Count the categories a user owns."""
        with self._use_connection(conn) as c:
            return c.execute(
                "SELECT COUNT(*) FROM categories WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

    def update_category(
        self,
        user_id: int,
        category_id: int,
        name: Optional[str] = None,
        category_type: Optional[CategoryType] = None,
    ) -> Category:
        """
        Rename or retype a user-defined category.

        A category's type cannot change while transactions or budgets use it,
        since that would break the category/transaction type match.

        Raises:
            NotFoundError: If the category does not belong to the user
            ValidationError: If the category is a default one
            EntityInUseError: If retyping a referenced category
        """
        with self._get_connection(immediate=True) as conn:
            category = self.get_user_category(user_id, category_id, conn=conn)
            if category.is_default:
                raise ValidationError("Default categories cannot be modified")

            if name is not None:
                name = _validate_name(name)
                existing = self.get_category_by_name(user_id, name, conn=conn)
                if existing and existing.id != category_id:
                    raise DuplicateNameError(f"Category '{name}' already exists")
                category.name = name

            if category_type is not None:
                category_type = _coerce_type(category_type)
                if category_type != category.category_type:
                    usage = self._usage_counts(conn, category_id)
                    if any(usage):
                        raise EntityInUseError(
                            f"Category {category_id} is in use and cannot change type"
                        )
                    category.category_type = category_type

            conn.execute(
                "UPDATE categories SET name = ?, category_type = ? WHERE id = ?",
                (category.name, category.category_type.value, category_id),
            )
            logger.info(f"Updated category {category_id} for user {user_id}")
            return category

    def delete_category(self, user_id: int, category_id: int) -> bool:
        """
        Delete an unused, user-defined category.

        Raises:
            NotFoundError: If the category does not belong to the user
            ValidationError: If the category is a default one
            EntityInUseError: If transactions or budgets reference it
        """
        with self._get_connection(immediate=True) as conn:
            category = self.get_user_category(user_id, category_id, conn=conn)
            if category.is_default:
                raise ValidationError("Default categories cannot be deleted")

            transactions, budgets = self._usage_counts(conn, category_id)
            if transactions:
                raise EntityInUseError(
                    f"Category {category_id} has {transactions} linked transactions"
                )
            if budgets:
                raise EntityInUseError(
                    f"Category {category_id} has {budgets} linked budgets"
                )

            cursor = conn.execute(
                "DELETE FROM categories WHERE id = ? AND user_id = ?",
                (category_id, user_id),
            )
            logger.info(f"Deleted category {category_id} for user {user_id}")
            return cursor.rowcount > 0

    def _usage_counts(
        self, conn: sqlite3.Connection, category_id: int
    ) -> tuple[int, int]:
        transactions = conn.execute(
            "SELECT COUNT(*) FROM transactions WHERE category_id = ?", (category_id,)
        ).fetchone()[0]
        budgets = conn.execute(
            "SELECT COUNT(*) FROM budgets WHERE category_id = ?", (category_id,)
        ).fetchone()[0]
        return transactions, budgets

    def bulk_insert_categories(
        self,
        user_id: int,
        categories: Iterable[tuple[str, CategoryType]],
        conn: sqlite3.Connection,
        is_default: bool = True,
    ) -> int:
        """Insert (name, type) pairs; returns rows inserted."""
        created_at = datetime.now(timezone.utc).isoformat()
        rows = [
            (user_id, name, category_type.value, 1 if is_default else 0, created_at)
            for name, category_type in categories
        ]
        conn.executemany(
            """
            INSERT INTO categories
            (user_id, name, category_type, is_default, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            rows,
        )
        logger.info(f"Inserted {len(rows)} categories for user {user_id}")
        return len(rows)
