"""Client-side views of the identity service's resources."""

from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID


@dataclass(frozen=True, slots=True)
class SessionProfile:
    """A viewing profile as returned by the server."""

    id: UUID
    user_id: UUID
    name: str
    avatar: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "SessionProfile":
        return cls(
            id=UUID(str(data["id"])),
            user_id=UUID(str(data["user_id"])),
            name=data["name"],
            avatar=data["avatar"],
        )


@dataclass(frozen=True, slots=True)
class SessionUser:
    """The signed-in account."""

    id: UUID
    username: str


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """A user with their profile list and, after signup/login, a token."""

    user: SessionUser
    profiles: list[SessionProfile] = field(default_factory=list)
    token: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "AccountSnapshot":
        return cls(
            user=SessionUser(id=UUID(str(data["id"])), username=data["username"]),
            profiles=[SessionProfile.from_json(p) for p in data.get("profiles") or []],
            token=data.get("token"),
        )
