"""
Users repository module.

Stores user identities. Password hashing happens in the authentication layer;
this repository only persists the hash and salt it is handed.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional

from fintrack.config import MAX_USERNAME_LENGTH
from fintrack.errors import DuplicateNameError, NotFoundError, ValidationError
from fintrack.models import User

from .base import BaseRepository

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, username, password_hash, password_salt, is_admin, created_at"


class UserRepository(BaseRepository):
    """Repository for managing users."""

    def __init__(self, db_path=None, init_schema: bool = False):
        super().__init__(db_path, init_schema=init_schema)

    def create_user(
        self,
        username: str,
        password_hash: str,
        password_salt: str,
        is_admin: bool = False,
        conn: Optional[sqlite3.Connection] = None,
    ) -> User:
        """
        Create a new user.

        Raises:
            ValidationError: If the username or credentials are missing
            DuplicateNameError: If the username is taken
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username cannot be empty")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at most {MAX_USERNAME_LENGTH} characters"
            )
        if not password_hash or not password_salt:
            raise ValidationError("Password hash and salt are required")

        created_at = datetime.now(timezone.utc)

        with self._use_connection(conn) as c:
            if self.get_user_by_username(username, conn=c):
                raise DuplicateNameError(f"Username '{username}' is already taken")

            cursor = c.execute(
                """
                INSERT INTO users
                (username, password_hash, password_salt, is_admin, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    username,
                    password_hash,
                    password_salt,
                    1 if is_admin else 0,
                    created_at.isoformat(),
                ),
            )
            logger.info(f"Created user '{username}' (id {cursor.lastrowid})")

            return User(
                id=cursor.lastrowid,
                username=username,
                password_hash=password_hash,
                password_salt=password_salt,
                is_admin=is_admin,
                created_at=created_at,
            )

    def get_user_by_id(
        self, user_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[User]:
        """Get a user by ID."""
        with self._use_connection(conn) as c:
            row = c.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return User.from_row(row) if row else None

    def get_user_by_username(
        self, username: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[User]:
        """Get a user by username (case-sensitive, as stored)."""
        if not username:
            return None
        with self._use_connection(conn) as c:
            row = c.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?",
                (username.strip(),),
            ).fetchone()
            return User.from_row(row) if row else None

    def get_all_users(self) -> list[User]:
        """Get all users, oldest first."""
        with self._get_connection() as conn:
            cursor = conn.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY id")
            return [User.from_row(row) for row in cursor.fetchall()]

    def update_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        is_admin: Optional[bool] = None,
    ) -> User:
        """
        Update a user's username and/or admin flag.

        Raises:
            NotFoundError: If the user does not exist
            DuplicateNameError: If the new username is taken
        """
        with self._get_connection() as conn:
            user = self.get_user_by_id(user_id, conn=conn)
            if not user:
                raise NotFoundError("User", user_id)

            if username is not None:
                username = username.strip()
                if not username:
                    raise ValidationError("Username cannot be empty")
                existing = self.get_user_by_username(username, conn=conn)
                if existing and existing.id != user_id:
                    raise DuplicateNameError(f"Username '{username}' is already taken")
                user.username = username
            if is_admin is not None:
                user.is_admin = is_admin

            conn.execute(
                "UPDATE users SET username = ?, is_admin = ? WHERE id = ?",
                (user.username, 1 if user.is_admin else 0, user_id),
            )
            logger.info(f"Updated user {user_id}")
            return user

    def delete_user(self, user_id: int) -> bool:
        """
        Delete a user and everything they own.

        Transactions and budgets go first because they reference the user's
        accounts and categories.

        Returns:
            True if deleted, False if not found
        """
        with self._get_connection(immediate=True) as conn:
            for table in ("transactions", "budgets", "accounts", "categories"):
                conn.execute(f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info(f"Deleted user {user_id} and all owned data")
            else:
                logger.debug(f"No user {user_id} to delete")
            return deleted
