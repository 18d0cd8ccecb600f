"""Account service: credential storage, login and session tokens."""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

import structlog

from core.exceptions import (
    AuthenticationError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidFieldError,
    UserNotFoundError,
)
from domain.entities.profile import Profile, default_profiles
from domain.entities.user import RevokedToken, User
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.auth.provider import IAuthProvider, IPasswordHasher, TokenUser

logger = structlog.get_logger()

MAX_USERNAME_LENGTH = 255
MAX_PASSWORD_LENGTH = 128


def validate_credentials(username: str, password: str) -> None:
    """Reject usernames and passwords no account may be created with."""
    if not username or not username.strip():
        raise InvalidFieldError("username", "Username cannot be empty")
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidFieldError(
            "username", f"Username must be at most {MAX_USERNAME_LENGTH} characters"
        )
    if not password:
        raise InvalidFieldError("password", "Password cannot be empty")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise InvalidFieldError(
            "password", f"Password must be at most {MAX_PASSWORD_LENGTH} characters"
        )


@dataclass(frozen=True, slots=True)
class AuthResult:
    """A signed-in user with their profiles and a fresh session token."""

    user: User
    profiles: List[Profile]
    token: str


class AuthService:
    """Service layer for account and session business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        auth_provider: IAuthProvider,
        password_hasher: IPasswordHasher,
    ) -> None:
        self._uow_factory = uow_factory
        self._auth_provider = auth_provider
        self._password_hasher = password_hasher

    async def create_user(self, username: str, password: str) -> User:
        """Create an account with a hashed password."""
        async with self._uow_factory() as uow:
            user = await self._create_user(uow, username, password)
            await uow.commit()
            return user

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Look up an account by username."""
        async with self._uow_factory() as uow:
            return await uow.users.get_by_username(username)

    async def authenticate(self, username: str, password: str) -> User:
        """Check a username/password pair.

        Unknown usernames and wrong passwords both raise the same
        InvalidCredentialsError and take the same time to reject.
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_username(username)

        password_hash = user.password_hash if user else None
        if not self._password_hasher.verify(password, password_hash) or user is None:
            logger.info("login_failed")
            raise InvalidCredentialsError()
        return user

    async def signup(self, username: str, password: str) -> AuthResult:
        """Create an account with its default profile and sign it in."""
        async with self._uow_factory() as uow:
            user = await self._create_user(uow, username, password)
            profiles = [
                await uow.profiles.create(profile) for profile in default_profiles(user.id)
            ]
            await uow.commit()

        logger.info("user_signed_up", user_id=str(user.id))
        return AuthResult(user=user, profiles=profiles, token=self._issue(user))

    async def login(self, username: str, password: str) -> AuthResult:
        """Authenticate and return the account's profiles with a new token."""
        user = await self.authenticate(username, password)
        async with self._uow_factory() as uow:
            profiles = await uow.profiles.get_all_for_user(user.id)

        logger.info("user_logged_in", user_id=str(user.id))
        return AuthResult(user=user, profiles=profiles, token=self._issue(user))

    async def me(self, user_id: UUID) -> tuple[User, List[Profile]]:
        """Get the signed-in user and their profiles."""
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))
            profiles = await uow.profiles.get_all_for_user(user_id)
            return user, profiles

    async def resolve_token(self, token: str) -> Optional[TokenUser]:
        """Verify a bearer token, including revocation.

        Returns None instead of raising so callers can fall back to an
        anonymous context.
        """
        try:
            return await self.verify_token(token)
        except AuthenticationError:
            return None

    async def verify_token(self, token: str) -> TokenUser:
        """Verify a bearer token, including revocation.

        Raises:
            AuthenticationError: If the token is invalid, expired or revoked
        """
        token_user = self._auth_provider.decode_token(token)
        if token_user.token_id:
            async with self._uow_factory() as uow:
                if await uow.revoked_tokens.is_revoked(token_user.token_id):
                    raise AuthenticationError(message="Token has been revoked")
        return token_user

    async def logout(self, token: Optional[str]) -> None:
        """Revoke the presented token. Invalid or missing tokens are ignored."""
        if not token:
            return
        token_user = await self._auth_provider.validate_token(token)
        if token_user is None or not token_user.token_id or token_user.expires_at is None:
            return

        async with self._uow_factory() as uow:
            await uow.revoked_tokens.add(
                RevokedToken(
                    jti=token_user.token_id,
                    user_id=token_user.id,
                    expires_at=token_user.expires_at,
                )
            )
            await uow.commit()
        logger.info("token_revoked", user_id=str(token_user.id))

    async def purge_revoked_tokens(self) -> int:
        """Drop revocation records for tokens that would be rejected as expired anyway."""
        async with self._uow_factory() as uow:
            deleted = await uow.revoked_tokens.purge_expired(datetime.utcnow())
            await uow.commit()
        if deleted:
            logger.info("revoked_tokens_purged", deleted_count=deleted)
        return deleted

    async def _create_user(self, uow: IUnitOfWork, username: str, password: str) -> User:
        """Insert a user within an open unit of work."""
        validate_credentials(username, password)
        existing = await uow.users.get_by_username(username)
        if existing:
            raise DuplicateUserError(username)

        user = User(
            username=username,
            password_hash=self._password_hasher.hash(password),
        )
        return await uow.users.create(user)

    def _issue(self, user: User) -> str:
        return self._auth_provider.create_token(TokenUser(id=user.id, username=user.username))
