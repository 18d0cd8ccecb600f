"""JWT authentication provider implementation.

Session tokens are HS256-signed JWTs with the payload:
    {
        "sub": "user-uuid",
        "username": "alice",
        "jti": "random-token-id",
        "iat": 1234567890,
        "exp": 1235172690
    }

``jti`` identifies a single token so it can be revoked on logout.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from core.config import settings
from core.exceptions import AuthenticationError, ErrorCode
from infrastructure.auth.provider import TokenUser

logger = logging.getLogger(__name__)


class JWTAuthProvider:
    """JWT-based authentication provider.

    Issues and verifies the bearer tokens that represent a signed-in user.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def decode_token(self, token: str) -> TokenUser:
        """
        Verify a JWT and extract the user it was issued for.

        Args:
            token: The JWT to verify

        Returns:
            TokenUser carrying the user id, username, token id and expiry

        Raises:
            AuthenticationError: TOKEN_EXPIRED if past its expiry,
                INVALID_TOKEN for any other verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise AuthenticationError(
                message="Token has expired",
                error_code=ErrorCode.TOKEN_EXPIRED,
            ) from e
        except JWTError as e:
            raise AuthenticationError(
                message="Invalid token",
                error_code=ErrorCode.INVALID_TOKEN,
            ) from e

        user_id = payload.get("sub")
        username = payload.get("username")
        if not user_id or not username:
            raise AuthenticationError(
                message="Invalid token",
                error_code=ErrorCode.INVALID_TOKEN,
            )

        try:
            parsed_id = UUID(user_id)
        except (TypeError, ValueError) as e:
            raise AuthenticationError(
                message="Invalid token",
                error_code=ErrorCode.INVALID_TOKEN,
            ) from e

        return TokenUser(
            id=parsed_id,
            username=username,
            token_id=payload.get("jti"),
            expires_at=datetime.utcfromtimestamp(payload["exp"]),
        )

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT token and extract user info.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        try:
            return self.decode_token(token)
        except AuthenticationError as e:
            logger.debug("Rejected token: %s", e.error_code.value)
            return None

    def create_token(self, user: TokenUser) -> str:
        """
        Create a signed session token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        issued_at = datetime.utcnow()
        expire = issued_at + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "username": user.username,
            "jti": secrets.token_urlsafe(16),
            "iat": issued_at,
            "exp": expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
