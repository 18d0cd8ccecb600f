"""Pydantic schemas for Profile API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import Profile


class ProfileCreate(BaseModel):
    """Schema for creating a Profile. Emptiness is checked by the service."""

    name: str = Field(..., max_length=50)
    avatar: str | None = Field(None, min_length=1, max_length=500)


class ProfileUpdate(BaseModel):
    """Schema for updating a Profile."""

    name: str | None = Field(None, max_length=50)
    avatar: str | None = Field(None, min_length=1, max_length=500)


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    avatar: str

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            name=profile.name,
            avatar=profile.avatar,
        )


class ProfileListResponse(BaseModel):
    """Schema for list of Profiles."""

    data: list[ProfileResponse]


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile."""

    data: ProfileResponse
