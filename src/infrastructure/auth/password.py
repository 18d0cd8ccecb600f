"""bcrypt password hashing."""

from typing import Optional

import bcrypt

from core.config import settings

# bcrypt only looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptPasswordHasher:
    """Salted bcrypt hashing with timing-safe verification."""

    def __init__(self, rounds: int = settings.bcrypt_rounds) -> None:
        self._rounds = rounds
        self._dummy_hash: bytes | None = None

    def hash(self, password: str) -> str:
        """Hash a plain text password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """Verify a plain text password against a hashed password.

        When there is no stored hash the password is still checked against a
        throwaway hash of the same cost, so unknown usernames take as long to
        reject as wrong passwords.
        """
        if password_hash is None:
            bcrypt.checkpw(_encode(password), self._get_dummy_hash())
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def _get_dummy_hash(self) -> bytes:
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                b"not-a-real-password", bcrypt.gensalt(rounds=self._rounds)
            )
        return self._dummy_hash
