"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[Profile]:
        """Get a user's profiles in insertion order."""
        ...

    async def count_for_user(self, user_id: UUID) -> int:
        """Count a user's profiles."""
        ...

    async def next_position(self, user_id: UUID) -> int:
        """Position for a profile appended to the user's list."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        ...

    async def update(self, profile: Profile) -> Profile:
        """Update an existing profile."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a profile and return success status."""
        ...
