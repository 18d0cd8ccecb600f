"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class User:
    """Domain entity for an account holder.

    The password is only ever held as a bcrypt hash.
    """

    username: str
    password_hash: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __repr__(self) -> str:
        return f"User(id={self.id!s}, username={self.username!r})"


@dataclass
class RevokedToken:
    """A session token that was invalidated before its expiry."""

    jti: str
    user_id: UUID
    expires_at: datetime
    revoked_at: datetime = field(default_factory=datetime.utcnow)
