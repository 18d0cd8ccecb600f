"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

DEFAULT_PROFILE_NAME = "User"

# Avatar choices offered to every profile, in display order.
AVATAR_CATALOG: tuple[str, ...] = (
    "/assets/profiles/robot.webp",
    "/assets/profiles/orange.jpg",
    "/assets/profiles/green.jpg",
    "/assets/profiles/kids.png",
    "/assets/profiles/classic-blue.png",
    "/assets/profiles/classic-yellow.png",
)


def pick_avatar(profile_count: int) -> str:
    """Round-robin avatar for the next profile of a list of ``profile_count``."""
    return AVATAR_CATALOG[profile_count % len(AVATAR_CATALOG)]


def normalize_profile_name(name: str | None) -> str | None:
    """Strip surrounding whitespace; ``None`` when nothing is left."""
    if name is None:
        return None
    stripped = name.strip()
    return stripped or None


@dataclass
class Profile:
    """Domain entity for a named viewing profile owned by a user."""

    user_id: UUID
    name: str
    avatar: str
    id: UUID = field(default_factory=uuid4)
    position: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)


def default_profiles(user_id: UUID) -> list[Profile]:
    """Profiles every new account starts with."""
    return [
        Profile(
            user_id=user_id,
            name=DEFAULT_PROFILE_NAME,
            avatar=pick_avatar(0),
            position=0,
        )
    ]
