"""GraphQL object types."""

import strawberry

from domain.entities.profile import Profile as ProfileEntity
from domain.entities.user import User as UserEntity


@strawberry.type
class Profile:
    id: strawberry.ID
    user_id: strawberry.ID
    name: str
    avatar: str

    @classmethod
    def from_entity(cls, profile: ProfileEntity) -> "Profile":
        return cls(
            id=strawberry.ID(str(profile.id)),
            user_id=strawberry.ID(str(profile.user_id)),
            name=profile.name,
            avatar=profile.avatar,
        )


@strawberry.type
class User:
    id: strawberry.ID
    username: str
    profiles: list[Profile]

    @classmethod
    def from_entity(cls, user: UserEntity, profiles: list[ProfileEntity]) -> "User":
        return cls(
            id=strawberry.ID(str(user.id)),
            username=user.username,
            profiles=[Profile.from_entity(p) for p in profiles],
        )


@strawberry.type
class AuthPayload:
    token: str
    user: User
