"""Pydantic schemas for the auth API."""

from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from api.rest.schemas.profile import ProfileResponse


class SignupRequest(BaseModel):
    """Schema for creating an account.

    Older clients send the username in an ``email`` field.
    """

    username: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("username", "email"),
    )
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    """Schema for signing in. The ``email`` field holds the username."""

    email: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("email", "username"),
    )
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """Schema for the signed-in user with their profiles."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "alice",
                "profiles": [
                    {
                        "id": "456e4567-e89b-12d3-a456-426614174000",
                        "user_id": "123e4567-e89b-12d3-a456-426614174000",
                        "name": "User",
                        "avatar": "/assets/profiles/robot.webp",
                    }
                ],
            }
        },
    )

    id: UUID
    username: str
    profiles: list[ProfileResponse]


class AuthResponse(UserResponse):
    """Schema for signup/login: the user plus a bearer token."""

    token: str
