"""
In-memory UserRepository for tests and local development
"""
from datetime import datetime
from typing import Callable, Dict, Optional

from app.models.user import NotificationSettings, User, UserCreate, UserUpdate
from app.utils.timezone import get_utc_now


class InMemoryUserRepository:
    """Dict-backed UserRepository keyed by user id"""

    def __init__(self, clock: Callable[[], datetime] = get_utc_now):
        self._clock = clock
        self._users: Dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def create(self, user_id: str, data: UserCreate) -> User:
        now = self._clock()
        user = User(
            id=user_id,
            display_name=data.display_name,
            photo_url=data.photo_url,
            is_premium=data.is_premium,
            notification_settings=data.notification_settings,
            created_at=now,
            updated_at=now,
        )
        self._users[user_id] = user
        return user.model_copy(deep=True)

    async def update(self, user_id: str, data: UserUpdate) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        changes = data.changes()
        if changes.get("notification_settings") is not None:
            changes["notification_settings"] = NotificationSettings(**changes["notification_settings"])
        user = user.model_copy(update={**changes, "updated_at": self._clock()})
        self._users[user_id] = user
        return user.model_copy(deep=True)
