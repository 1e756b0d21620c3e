from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """
    Represents a user of the tracker.

    Credentials are produced by the authentication layer; the core only
    stores the hash and salt it is given.
    """

    id: Optional[int]
    username: str
    password_hash: str
    password_salt: str
    is_admin: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation (credentials omitted)."""
        return {
            "id": self.id,
            "username": self.username,
            "is_admin": self.is_admin,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row) -> "User":
        """Create a User from a database row."""
        return cls(
            id=row["id"],
            username=row["username"],
            password_hash=row["password_hash"],
            password_salt=row["password_salt"],
            is_admin=bool(row["is_admin"]),
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
            ),
        )
