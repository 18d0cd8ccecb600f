"""User repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.user import RevokedToken, User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by username."""
        ...

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...


class IRevokedTokenRepository(Protocol):
    """Repository interface for revoked session tokens."""

    async def add(self, token: RevokedToken) -> None:
        """Record a revoked token (idempotent per jti)."""
        ...

    async def is_revoked(self, jti: str) -> bool:
        """Check whether a token id has been revoked."""
        ...

    async def purge_expired(self, now: datetime) -> int:
        """Delete records whose token has expired anyway. Returns the count."""
        ...
