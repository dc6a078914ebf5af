"""
Supabase RoutineRepository - routines and routine_completions table access

Ownership is part of every routine query's filter, so rows of other users
are never fetched. Any client or connectivity failure surfaces as
DatabaseError.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import uuid

from postgrest.exceptions import APIError
from supabase import AsyncClient

from app.core.exceptions import DatabaseError
from app.models.routine import (
    Completion,
    CompletionCreate,
    DateRange,
    Paginated,
    Pagination,
    Routine,
    RoutineCreate,
    StreakUpdate,
    Visibility,
)
from app.utils.timezone import ensure_utc, get_utc_now
from .repository import MUTABLE_FIELDS

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _to_routine(row: Dict[str, Any]) -> Routine:
    return Routine.model_validate({
        **row,
        "schedule": row.get("schedule") or {},
        "auto_share": bool(row.get("auto_share")),
        "visibility": row.get("visibility") or Visibility.PRIVATE.value,
        "current_streak": row.get("current_streak") or 0,
        "max_streak": row.get("max_streak") or 0,
    })


def _to_completion(row: Dict[str, Any]) -> Completion:
    return Completion.model_validate(row)


class SupabaseRoutineRepository:
    """RoutineRepository backed by Supabase (PostgREST) tables"""

    def __init__(
        self,
        client: AsyncClient,
        routines_table: str = "routines",
        completions_table: str = "routine_completions",
    ):
        self.client = client
        self.routines_table = routines_table
        self.completions_table = completions_table

    # ============================================================================
    # HELPERS
    # ============================================================================

    def _routines(self):
        return self.client.table(self.routines_table)

    def _completions(self):
        return self.client.table(self.completions_table)

    async def _execute(self, query, action: str):
        try:
            return await query.execute()
        except Exception as e:
            logger.error(f"Database error {action}: {e}")
            raise DatabaseError(f"Failed to {action}: {e}")

    async def _patch(self, user_id: str, routine_id: str, payload: Dict[str, Any], action: str) -> Optional[Routine]:
        result = await self._execute(
            self._routines().update(payload).eq("id", routine_id).eq("user_id", user_id),
            action,
        )
        return _to_routine(result.data[0]) if result.data else None

    async def _find_completion(self, routine_id: str, date: str) -> Optional[Completion]:
        result = await self._execute(
            self._completions().select("*").eq("routine_id", routine_id).eq("date", date),
            f"fetch completion for routine {routine_id} on {date}",
        )
        return _to_completion(result.data[0]) if result.data else None

    # ============================================================================
    # ROUTINES TABLE
    # ============================================================================

    async def list_by_user(self, user_id: str, pagination: Pagination) -> Paginated[Routine]:
        start = (pagination.page - 1) * pagination.limit
        result = await self._execute(
            self._routines()
            .select("*", count="exact")
            .eq("user_id", user_id)
            .is_("deleted_at", "null")
            .order("created_at", desc=True)
            .order("id", desc=True)
            .range(start, start + pagination.limit - 1),
            f"list routines for user {user_id}",
        )
        items = [_to_routine(row) for row in result.data or []]
        total = result.count if result.count is not None else len(items)
        return Paginated[Routine](items=items, page=pagination.page, limit=pagination.limit, total=total)

    async def get_by_id(self, user_id: str, routine_id: str) -> Optional[Routine]:
        result = await self._execute(
            self._routines().select("*").eq("id", routine_id).eq("user_id", user_id),
            f"fetch routine {routine_id}",
        )
        return _to_routine(result.data[0]) if result.data else None

    async def create(self, user_id: str, data: RoutineCreate) -> Routine:
        now = get_utc_now().isoformat()
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": data.title,
            "description": data.description,
            "schedule": data.schedule or {},
            "auto_share": bool(data.auto_share),
            "visibility": (data.visibility or Visibility.PRIVATE).value,
            "current_streak": 0,
            "max_streak": 0,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        result = await self._execute(self._routines().insert(row), "create routine")
        if not result.data:
            raise DatabaseError("Failed to create routine: no row returned")
        return _to_routine(result.data[0])

    async def update(self, user_id: str, routine_id: str, changes: Dict[str, Any]) -> Optional[Routine]:
        payload: Dict[str, Any] = {}
        for key, value in changes.items():
            if key not in MUTABLE_FIELDS:
                continue
            if key == "schedule":
                value = value or {}
            elif isinstance(value, Visibility):
                value = value.value
            payload[key] = value
        payload["updated_at"] = get_utc_now().isoformat()
        return await self._patch(user_id, routine_id, payload, f"update routine {routine_id}")

    async def update_streaks(self, user_id: str, routine_id: str, streaks: StreakUpdate) -> Optional[Routine]:
        return await self._patch(user_id, routine_id, {
            "current_streak": streaks.current_streak,
            "max_streak": streaks.max_streak,
            "updated_at": get_utc_now().isoformat(),
        }, f"update streaks for routine {routine_id}")

    async def soft_delete(self, user_id: str, routine_id: str, deleted_at: datetime) -> Optional[Routine]:
        stamp = ensure_utc(deleted_at).isoformat()
        return await self._patch(user_id, routine_id, {
            "deleted_at": stamp,
            "updated_at": stamp,
        }, f"soft-delete routine {routine_id}")

    async def restore(self, user_id: str, routine_id: str) -> Optional[Routine]:
        return await self._patch(user_id, routine_id, {
            "deleted_at": None,
            "updated_at": get_utc_now().isoformat(),
        }, f"restore routine {routine_id}")

    async def count_by_user(self, user_id: str) -> int:
        result = await self._execute(
            self._routines()
            .select("id", count="exact")
            .eq("user_id", user_id)
            .is_("deleted_at", "null"),
            f"count routines for user {user_id}",
        )
        return result.count if result.count is not None else len(result.data or [])

    async def list_by_schedule_time(self, time: str) -> List[Routine]:
        result = await self._execute(
            self._routines()
            .select("*")
            .eq("schedule->>time", time)
            .is_("deleted_at", "null")
            .order("created_at"),
            f"list routines scheduled at {time}",
        )
        return [_to_routine(row) for row in result.data or []]

    # ============================================================================
    # ROUTINE_COMPLETIONS TABLE
    # ============================================================================

    async def list_completions(
        self, user_id: str, routine_id: str, date_range: Optional[DateRange] = None
    ) -> List[Completion]:
        if await self.get_by_id(user_id, routine_id) is None:
            return []
        query = self._completions().select("*").eq("routine_id", routine_id)
        if date_range and date_range.from_date:
            query = query.gte("date", date_range.from_date)
        if date_range and date_range.to_date:
            query = query.lte("date", date_range.to_date)
        result = await self._execute(
            query.order("date"),
            f"list completions for routine {routine_id}",
        )
        return [_to_completion(row) for row in result.data or []]

    async def add_completion(self, user_id: str, routine_id: str, data: CompletionCreate) -> Optional[Completion]:
        if await self.get_by_id(user_id, routine_id) is None:
            return None
        existing = await self._find_completion(routine_id, data.date)
        if existing is not None:
            return existing

        row = {
            "id": str(uuid.uuid4()),
            "routine_id": routine_id,
            "user_id": user_id,
            "date": data.date,
            "created_at": get_utc_now().isoformat(),
        }
        try:
            result = await self._completions().insert(row).execute()
        except APIError as e:
            if e.code != UNIQUE_VIOLATION:
                logger.error(f"Database error creating completion: {e}")
                raise DatabaseError(f"Failed to create completion: {e}")
            # A concurrent request recorded the same date first
            result = None
        except Exception as e:
            logger.error(f"Database error creating completion: {e}")
            raise DatabaseError(f"Failed to create completion: {e}")

        if result is not None and result.data:
            return _to_completion(result.data[0])
        winner = await self._find_completion(routine_id, data.date)
        if winner is None:
            raise DatabaseError(f"Failed to create completion for routine {routine_id} on {data.date}")
        return winner

    async def remove_completion(self, user_id: str, routine_id: str, date: str) -> bool:
        if await self.get_by_id(user_id, routine_id) is None:
            return False
        result = await self._execute(
            self._completions().delete().eq("routine_id", routine_id).eq("date", date),
            f"delete completion for routine {routine_id} on {date}",
        )
        return bool(result.data)
