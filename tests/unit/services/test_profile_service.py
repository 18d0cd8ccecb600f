"""Unit tests for ProfileService."""

import asyncio
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    InvalidFieldError,
    InvalidProfileNameError,
    ProfileLimitReachedError,
    ProfileNotFoundError,
    UserNotFoundError,
)
from domain.entities.profile import AVATAR_CATALOG, Profile
from domain.entities.user import User
from domain.services.profile_service import ProfileService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> ProfileService:
    return ProfileService(lambda: uow, max_profiles=5)


@pytest.fixture
def existing_user(uow: FakeUnitOfWork, user_id: UUID) -> User:
    user = User(id=user_id, username="alice", password_hash="x")
    uow.users.get.return_value = user
    uow.profiles.create.side_effect = lambda profile: profile
    uow.profiles.update.side_effect = lambda profile: profile
    return user


# --- list_profiles ---


class TestListProfiles:
    @pytest.mark.asyncio
    async def test_returns_repository_order(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ):
        profiles = [
            Profile(user_id=user_id, name="User", avatar=AVATAR_CATALOG[0], position=0),
            Profile(user_id=user_id, name="Kids", avatar=AVATAR_CATALOG[1], position=1),
        ]
        uow.profiles.get_all_for_user.return_value = profiles

        result = await service.list_profiles(user_id)

        assert [p.name for p in result] == ["User", "Kids"]
        uow.profiles.get_all_for_user.assert_called_once_with(user_id)


# --- add_profile ---


class TestAddProfile:
    @pytest.mark.asyncio
    async def test_appends_with_next_position(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 1
        uow.profiles.next_position.return_value = 1

        result = await service.add_profile(user_id, "Kids")

        assert result.name == "Kids"
        assert result.user_id == user_id
        assert result.position == 1
        assert uow.committed

    @pytest.mark.asyncio
    async def test_avatar_defaults_round_robin(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 2
        uow.profiles.next_position.return_value = 2

        result = await service.add_profile(user_id, "Guest")

        assert result.avatar == AVATAR_CATALOG[2]

    @pytest.mark.asyncio
    async def test_keeps_explicit_avatar(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 0
        uow.profiles.next_position.return_value = 0

        result = await service.add_profile(user_id, "Guest", avatar="/assets/profiles/green.jpg")

        assert result.avatar == "/assets/profiles/green.jpg"

    @pytest.mark.asyncio
    async def test_trims_name(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 0
        uow.profiles.next_position.return_value = 0

        result = await service.add_profile(user_id, "  Kids  ")

        assert result.name == "Kids"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    async def test_rejects_blank_name(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, name: str
    ):
        with pytest.raises(InvalidProfileNameError) as exc_info:
            await service.add_profile(user_id, name)

        assert exc_info.value.status_code == 400
        uow.profiles.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_unknown_user(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.add_profile(user_id, "Kids")

    @pytest.mark.asyncio
    async def test_enforces_limit(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 5

        with pytest.raises(ProfileLimitReachedError) as exc_info:
            await service.add_profile(user_id, "Sixth")

        assert exc_info.value.details == {"limit": 5}
        uow.profiles.create.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_concurrent_adds_are_serialized(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        stored: list[Profile] = []
        active = 0
        overlapped = False

        async def count(uid: UUID) -> int:
            nonlocal active, overlapped
            active += 1
            overlapped = overlapped or active > 1
            await asyncio.sleep(0)
            return len(stored)

        async def next_position(uid: UUID) -> int:
            return len(stored)

        async def create(profile: Profile) -> Profile:
            nonlocal active
            stored.append(profile)
            active -= 1
            return profile

        uow.profiles.count_for_user.side_effect = count
        uow.profiles.next_position.side_effect = next_position
        uow.profiles.create.side_effect = create

        await asyncio.gather(*(service.add_profile(user_id, f"P{i}") for i in range(3)))

        assert not overlapped
        assert [p.position for p in stored] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_user_locks_are_dropped_after_writes(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        uow.profiles.count_for_user.return_value = 0
        uow.profiles.next_position.return_value = 0

        await asyncio.gather(*(service.add_profile(user_id, f"P{i}") for i in range(3)))
        uow.profiles.count_for_user.return_value = 5
        with pytest.raises(ProfileLimitReachedError):
            await service.add_profile(user_id, "Sixth")

        assert service._locks == {}
        assert not service._lock_users

    @pytest.mark.asyncio
    @pytest.mark.parametrize("avatar", ["", "  "])
    async def test_rejects_blank_avatar(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, avatar: str
    ):
        with pytest.raises(InvalidFieldError) as exc_info:
            await service.add_profile(user_id, "Kids", avatar=avatar)

        assert exc_info.value.details == {"field": "avatar"}
        uow.profiles.create.assert_not_called()


# --- delete_profile ---


class TestDeleteProfile:
    @pytest.mark.asyncio
    async def test_deletes_owned_profile(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ):
        profile = Profile(user_id=user_id, name="Kids", avatar=AVATAR_CATALOG[0])
        uow.profiles.get.return_value = profile
        uow.profiles.delete.return_value = True

        assert await service.delete_profile(user_id, profile.id) is True
        uow.profiles.delete.assert_called_once_with(profile.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_missing_profile_raises_not_found(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError) as exc_info:
            await service.delete_profile(user_id, uuid4())

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_profile_is_not_found(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.profiles.get.return_value = Profile(
            user_id=other_user_id, name="Theirs", avatar=AVATAR_CATALOG[0]
        )

        with pytest.raises(ProfileNotFoundError):
            await service.delete_profile(user_id, uuid4())

        uow.profiles.delete.assert_not_called()


# --- update ---


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_update_avatar_keeps_name_and_id(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        profile = Profile(user_id=user_id, name="Kids", avatar=AVATAR_CATALOG[0])
        uow.profiles.get.return_value = profile

        result = await service.update_avatar(user_id, profile.id, AVATAR_CATALOG[4])

        assert result.id == profile.id
        assert result.name == "Kids"
        assert result.avatar == AVATAR_CATALOG[4]
        assert uow.committed

    @pytest.mark.asyncio
    async def test_rename_trims_name(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        profile = Profile(user_id=user_id, name="Kids", avatar=AVATAR_CATALOG[0])
        uow.profiles.get.return_value = profile

        result = await service.rename_profile(user_id, profile.id, "  Family ")

        assert result.name == "Family"
        assert result.avatar == AVATAR_CATALOG[0]

    @pytest.mark.asyncio
    async def test_rename_rejects_blank(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ):
        with pytest.raises(InvalidProfileNameError):
            await service.rename_profile(user_id, uuid4(), "  ")

        uow.profiles.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_other_users_profile_is_not_found(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, other_user_id: UUID
    ):
        uow.profiles.get.return_value = Profile(
            user_id=other_user_id, name="Theirs", avatar=AVATAR_CATALOG[0]
        )

        with pytest.raises(ProfileNotFoundError):
            await service.update_profile(user_id, uuid4(), name="Mine")

        uow.profiles.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_avatar_is_rejected_not_ignored(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, existing_user: User
    ):
        profile = Profile(user_id=user_id, name="Kids", avatar=AVATAR_CATALOG[0])
        uow.profiles.get.return_value = profile

        with pytest.raises(InvalidFieldError):
            await service.update_profile(user_id, profile.id, avatar="")

        assert profile.avatar == AVATAR_CATALOG[0]
        uow.profiles.update.assert_not_called()
        assert not uow.committed
