"""
Supabase UserRepository - users table access
"""
from typing import Any, Dict, Optional
import logging

from supabase import AsyncClient

from app.core.exceptions import DatabaseError
from app.models.user import User, UserCreate, UserUpdate
from app.utils.timezone import get_utc_now

logger = logging.getLogger(__name__)


class SupabaseUserRepository:
    """UserRepository backed by a Supabase (PostgREST) table"""

    def __init__(self, client: AsyncClient, table: str = "users"):
        self.client = client
        self.table = table

    async def _execute(self, query, action: str):
        try:
            return await query.execute()
        except Exception as e:
            logger.error(f"Database error {action}: {e}")
            raise DatabaseError(f"Failed to {action}: {e}")

    @staticmethod
    def _to_user(row: Dict[str, Any]) -> User:
        return User.model_validate({
            **row,
            "is_premium": bool(row.get("is_premium")),
        })

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self._execute(
            self.client.table(self.table).select("*").eq("id", user_id),
            f"fetch user {user_id}",
        )
        return self._to_user(result.data[0]) if result.data else None

    async def create(self, user_id: str, data: UserCreate) -> User:
        now = get_utc_now().isoformat()
        row = {
            "id": user_id,
            **data.model_dump(mode="json"),
            "created_at": now,
            "updated_at": now,
        }
        result = await self._execute(
            self.client.table(self.table).insert(row),
            f"create user {user_id}",
        )
        if not result.data:
            raise DatabaseError(f"Failed to create user {user_id}: no row returned")
        return self._to_user(result.data[0])

    async def update(self, user_id: str, data: UserUpdate) -> Optional[User]:
        payload = data.model_dump(mode="json", exclude_unset=True)
        payload["updated_at"] = get_utc_now().isoformat()
        result = await self._execute(
            self.client.table(self.table).update(payload).eq("id", user_id),
            f"update user {user_id}",
        )
        return self._to_user(result.data[0]) if result.data else None
