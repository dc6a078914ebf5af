"""
In-memory RoutineRepository

Single-process reference implementation for tests and local development.
Each instance owns its own state; there is no internal locking, so it is not
safe for concurrent writers in production.
"""
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

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
from app.utils.timezone import get_utc_now
from .repository import MUTABLE_FIELDS


@dataclass
class _StoredRoutine:
    routine: Routine
    seq: int
    completions: Dict[str, Completion] = field(default_factory=dict)


class InMemoryRoutineRepository:
    """Dict-backed RoutineRepository; returns copies so stored state is never shared."""

    def __init__(self, clock: Callable[[], datetime] = get_utc_now):
        self._clock = clock
        self._routines: Dict[str, _StoredRoutine] = {}
        self._seq = itertools.count()

    def _owned(self, user_id: str, routine_id: str) -> Optional[_StoredRoutine]:
        stored = self._routines.get(routine_id)
        if stored is None or stored.routine.user_id != user_id:
            return None
        return stored

    def _replace(self, stored: _StoredRoutine, **fields: Any) -> Routine:
        stored.routine = stored.routine.model_copy(update=fields)
        return stored.routine.model_copy(deep=True)

    async def list_by_user(self, user_id: str, pagination: Pagination) -> Paginated[Routine]:
        active = [
            s for s in self._routines.values()
            if s.routine.user_id == user_id and s.routine.deleted_at is None
        ]
        active.sort(key=lambda s: (s.routine.created_at, s.seq), reverse=True)
        start = (pagination.page - 1) * pagination.limit
        items = [s.routine.model_copy(deep=True) for s in active[start:start + pagination.limit]]
        return Paginated[Routine](
            items=items,
            page=pagination.page,
            limit=pagination.limit,
            total=len(active),
        )

    async def get_by_id(self, user_id: str, routine_id: str) -> Optional[Routine]:
        stored = self._owned(user_id, routine_id)
        return stored.routine.model_copy(deep=True) if stored else None

    async def create(self, user_id: str, data: RoutineCreate) -> Routine:
        now = self._clock()
        routine = Routine(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=data.title,
            description=data.description,
            schedule=dict(data.schedule or {}),
            auto_share=bool(data.auto_share),
            visibility=data.visibility or Visibility.PRIVATE,
            current_streak=0,
            max_streak=0,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )
        self._routines[routine.id] = _StoredRoutine(routine=routine, seq=next(self._seq))
        return routine.model_copy(deep=True)

    async def update(self, user_id: str, routine_id: str, changes: Dict[str, Any]) -> Optional[Routine]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return None
        fields = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
        if "schedule" in fields:
            fields["schedule"] = dict(fields["schedule"] or {})
        return self._replace(stored, updated_at=self._clock(), **fields)

    async def update_streaks(self, user_id: str, routine_id: str, streaks: StreakUpdate) -> Optional[Routine]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return None
        return self._replace(
            stored,
            current_streak=streaks.current_streak,
            max_streak=streaks.max_streak,
            updated_at=self._clock(),
        )

    async def soft_delete(self, user_id: str, routine_id: str, deleted_at: datetime) -> Optional[Routine]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return None
        return self._replace(stored, deleted_at=deleted_at, updated_at=deleted_at)

    async def restore(self, user_id: str, routine_id: str) -> Optional[Routine]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return None
        return self._replace(stored, deleted_at=None, updated_at=self._clock())

    async def list_completions(
        self, user_id: str, routine_id: str, date_range: Optional[DateRange] = None
    ) -> List[Completion]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return []
        date_range = date_range or DateRange()
        # ISO dates compare correctly as strings
        items = [
            c for c in stored.completions.values()
            if (date_range.from_date is None or c.date >= date_range.from_date)
            and (date_range.to_date is None or c.date <= date_range.to_date)
        ]
        items.sort(key=lambda c: c.date)
        return [c.model_copy() for c in items]

    async def add_completion(self, user_id: str, routine_id: str, data: CompletionCreate) -> Optional[Completion]:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return None
        completion = stored.completions.get(data.date)
        if completion is None:
            completion = Completion(
                id=str(uuid.uuid4()),
                routine_id=routine_id,
                user_id=user_id,
                date=data.date,
                created_at=self._clock(),
            )
            stored.completions[data.date] = completion
            self._replace(stored, updated_at=self._clock())
        return completion.model_copy()

    async def remove_completion(self, user_id: str, routine_id: str, date: str) -> bool:
        stored = self._owned(user_id, routine_id)
        if stored is None:
            return False
        if stored.completions.pop(date, None) is None:
            return False
        self._replace(stored, updated_at=self._clock())
        return True

    async def count_by_user(self, user_id: str) -> int:
        return sum(
            1 for s in self._routines.values()
            if s.routine.user_id == user_id and s.routine.deleted_at is None
        )

    async def list_by_schedule_time(self, time: str) -> List[Routine]:
        matches = [
            s for s in self._routines.values()
            if s.routine.deleted_at is None and s.routine.schedule.get("time") == time
        ]
        matches.sort(key=lambda s: s.seq)
        return [s.routine.model_copy(deep=True) for s in matches]

    def put_routine(self, routine: Routine) -> None:
        """Seed a routine directly (tests only); existing completions are dropped"""
        self._routines[routine.id] = _StoredRoutine(
            routine=routine.model_copy(deep=True),
            seq=next(self._seq),
        )

    def reset(self) -> None:
        self._routines.clear()
