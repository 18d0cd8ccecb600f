"""Authentication provider protocols."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token."""

    id: UUID
    username: str
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    def decode_token(self, token: str) -> TokenUser:
        """
        Verify a token and extract the user it was issued for.

        Raises:
            AuthenticationError: If the token is malformed, tampered or expired
        """
        ...

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """
        Create an authentication token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated token string
        """
        ...


class IPasswordHasher(Protocol):
    """Protocol for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Hash a plaintext password."""
        ...

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """Check a plaintext password against a stored hash.

        A ``None`` hash (unknown account) must cost the same as a real check
        and always return False.
        """
        ...
