"""Profile service layer with business logic."""

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    InvalidFieldError,
    InvalidProfileNameError,
    ProfileLimitReachedError,
    ProfileNotFoundError,
    UserNotFoundError,
)
from domain.entities.profile import Profile, normalize_profile_name, pick_avatar
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

MAX_AVATAR_LENGTH = 500


def _check_avatar(avatar: Optional[str]) -> None:
    if avatar is None:
        return
    if not avatar.strip():
        raise InvalidFieldError("avatar", "Avatar cannot be empty")
    if len(avatar) > MAX_AVATAR_LENGTH:
        raise InvalidFieldError(
            "avatar", f"Avatar must be at most {MAX_AVATAR_LENGTH} characters"
        )


class ProfileService:
    """Service layer for the per-user profile registry.

    Writes to one user's profile list are serialized through a per-user lock,
    so concurrent add/delete/update calls cannot interleave their
    read-then-write steps.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        max_profiles: int = settings.max_profiles_per_user,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_profiles = max_profiles
        # Entries live only while some coroutine holds or waits on them
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._lock_users: Counter[UUID] = Counter()

    async def list_profiles(self, user_id: UUID) -> List[Profile]:
        """Get a user's profiles in insertion order."""
        async with self._uow_factory() as uow:
            return await uow.profiles.get_all_for_user(user_id)  # type: ignore[no-any-return]

    async def add_profile(
        self,
        user_id: UUID,
        name: str,
        avatar: Optional[str] = None,
    ) -> Profile:
        """Append a profile to the user's list.

        Without an explicit avatar one is picked round-robin from the catalog
        based on how many profiles the user already has.
        """
        clean_name = normalize_profile_name(name)
        if clean_name is None:
            raise InvalidProfileNameError()
        _check_avatar(avatar)

        async with self._user_lock(user_id), self._uow_factory() as uow:
            if not await uow.users.get(user_id):
                raise UserNotFoundError(str(user_id))

            count = await uow.profiles.count_for_user(user_id)
            if count >= self._max_profiles:
                raise ProfileLimitReachedError(self._max_profiles)

            profile = Profile(
                user_id=user_id,
                name=clean_name,
                avatar=pick_avatar(count) if avatar is None else avatar,
                position=await uow.profiles.next_position(user_id),
            )
            created = await uow.profiles.create(profile)
            await uow.commit()

        logger.info("profile_created", user_id=str(user_id), profile_id=str(created.id))
        return created  # type: ignore[no-any-return]

    async def delete_profile(self, user_id: UUID, profile_id: UUID) -> bool:
        """Remove a profile from the user's list."""
        async with self._user_lock(user_id), self._uow_factory() as uow:
            await self._get_owned(uow, user_id, profile_id)
            deleted = await uow.profiles.delete(profile_id)
            await uow.commit()

        logger.info("profile_deleted", user_id=str(user_id), profile_id=str(profile_id))
        return deleted  # type: ignore[no-any-return]

    async def update_avatar(self, user_id: UUID, profile_id: UUID, avatar: str) -> Profile:
        """Replace a profile's avatar. Name and id are left untouched."""
        return await self.update_profile(user_id, profile_id, avatar=avatar)

    async def rename_profile(self, user_id: UUID, profile_id: UUID, name: str) -> Profile:
        """Change a profile's display name."""
        if normalize_profile_name(name) is None:
            raise InvalidProfileNameError()
        return await self.update_profile(user_id, profile_id, name=name)

    async def update_profile(
        self,
        user_id: UUID,
        profile_id: UUID,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Profile:
        """Update name and/or avatar. ``None`` leaves a field unchanged."""
        clean_name = None
        if name is not None:
            clean_name = normalize_profile_name(name)
            if clean_name is None:
                raise InvalidProfileNameError()
        _check_avatar(avatar)

        async with self._user_lock(user_id), self._uow_factory() as uow:
            profile = await self._get_owned(uow, user_id, profile_id)

            if clean_name is not None:
                profile.name = clean_name
            if avatar is not None:
                profile.avatar = avatar

            updated = await uow.profiles.update(profile)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    @asynccontextmanager
    async def _user_lock(self, user_id: UUID) -> AsyncIterator[None]:
        """Hold the user's write lock, dropping it once nobody needs it."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    async def _get_owned(self, uow: IUnitOfWork, user_id: UUID, profile_id: UUID) -> Profile:
        """Fetch a profile, treating other users' profiles as missing."""
        profile = await uow.profiles.get(profile_id)
        if not profile or profile.user_id != user_id:
            raise ProfileNotFoundError(str(profile_id))
        return profile
