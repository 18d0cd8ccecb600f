"""SQLAlchemy implementations of the User and revoked-token repositories."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateUserError
from domain.entities.user import RevokedToken, User
from infrastructure.database.models import RevokedTokenModel, UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        stmt = select(UserModel).where(UserModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by username."""
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = self._to_model(user)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same username
            raise DuplicateUserError(user.username) from e
        await self._session.refresh(model)
        return self._to_entity(model)

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            username=model.username,
            password_hash=model.password_hash,
            created_at=model.created_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            username=entity.username,
            password_hash=entity.password_hash,
            created_at=entity.created_at,
        )


class SQLAlchemyRevokedTokenRepository:
    """SQLAlchemy implementation of IRevokedTokenRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, token: RevokedToken) -> None:
        """Record a revoked token."""
        existing = await self._session.get(RevokedTokenModel, token.jti)
        if existing:
            return  # Already revoked

        self._session.add(
            RevokedTokenModel(
                jti=token.jti,
                user_id=token.user_id,
                expires_at=token.expires_at,
                revoked_at=token.revoked_at,
            )
        )
        await self._session.flush()

    async def is_revoked(self, jti: str) -> bool:
        """Check whether a token id has been revoked."""
        stmt = select(RevokedTokenModel.jti).where(RevokedTokenModel.jti == jti)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def purge_expired(self, now: datetime) -> int:
        """Delete revocation records for tokens that have expired."""
        stmt = delete(RevokedTokenModel).where(RevokedTokenModel.expires_at < now)
        result = await self._session.execute(stmt)
        return result.rowcount or 0
