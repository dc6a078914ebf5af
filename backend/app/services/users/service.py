"""
Users Service - Profile read and self-service update
"""
import logging

from app.core.exceptions import InternalInvariantError, NotFoundError, ValidationError
from app.models.user import User, UserCreate, UserUpdate
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Profile operations available to the signed-in user"""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def get_me(self, user_id: str) -> User:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("user profile not found")
        return user

    async def update_me(self, user_id: str, data: UserUpdate) -> User:
        """
        Update (or create on first use) the caller's profile

        Plan tier cannot be changed here; billing owns is_premium.

        Raises:
            ValidationError: Empty display name
            NotFoundError: No profile yet and no display name to create one
        """
        changes = data.changes()
        changes.pop("is_premium", None)
        if "display_name" in changes:
            display_name = (changes["display_name"] or "").strip()
            if not display_name:
                raise ValidationError("display name must not be empty")
            changes["display_name"] = display_name
        safe = UserUpdate(**changes)

        existing = await self.repository.get_by_id(user_id)
        if existing is None:
            if not safe.display_name:
                raise NotFoundError("user profile not found and display name required for creation")
            logger.info(f"Creating profile for user {user_id}")
            return await self.repository.create(user_id, UserCreate(
                display_name=safe.display_name,
                photo_url=safe.photo_url,
                notification_settings=safe.notification_settings,
            ))

        updated = await self.repository.update(user_id, safe)
        if updated is None:
            raise InternalInvariantError(f"failed to update profile for user {user_id}")
        return updated
