"""UserRepository protocol - user profile lookup and persistence contract."""
from typing import Optional, Protocol, runtime_checkable

from app.models.user import User, UserCreate, UserUpdate


@runtime_checkable
class UserRepository(Protocol):
    """Repository interface for User entity access."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Look up a user by ID.

        Args:
            user_id: The caller's user ID.

        Returns:
            The User, or None if no profile exists.
        """
        ...

    async def create(self, user_id: str, data: UserCreate) -> User:
        """Create a profile under a caller-chosen ID."""
        ...

    async def update(self, user_id: str, data: UserUpdate) -> Optional[User]:
        """Apply the supplied fields; None if the profile does not exist."""
        ...
