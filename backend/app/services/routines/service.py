"""
Routines Service - Business rules for routines and completions
Ownership, plan limits, soft-delete visibility and streak refresh all live here;
HTTP handlers and scheduler jobs go through this class, never the repository.
"""
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional
import logging
import re

from app.core.constants import (
    DATE_PATTERN,
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    FREE_PLAN_ROUTINE_LIMIT,
    MAX_PAGE_LIMIT,
    RESTORE_WINDOW_DAYS,
    TIME_PATTERN,
)
from app.core.exceptions import (
    InternalInvariantError,
    NotFoundError,
    ValidationError,
)
from app.models.routine import (
    Completion,
    CompletionCreate,
    DateRange,
    Paginated,
    Pagination,
    Routine,
    RoutineCreate,
    RoutineUpdate,
    StreakUpdate,
    Visibility,
)
from app.services.users.repository import UserRepository
from app.utils.timezone import ensure_utc, get_utc_now
from .repository import RoutineRepository
from .streaks import calculate_streaks

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(DATE_PATTERN)
_TIME_RE = re.compile(TIME_PATTERN)
_RESTORE_WINDOW = timedelta(days=RESTORE_WINDOW_DAYS)


def clamp_pagination(page: Optional[int], limit: Optional[int]) -> Pagination:
    """
    Normalize paging input: page >= 1, limit within [1, MAX_PAGE_LIMIT]

    Args:
        page: Requested page, None for the default
        limit: Requested page size, None for the default

    Returns:
        Pagination safe to hand to a repository
    """
    page = DEFAULT_PAGE if page is None else max(1, page)
    limit = DEFAULT_PAGE_LIMIT if limit is None else min(max(1, limit), MAX_PAGE_LIMIT)
    return Pagination(page=page, limit=limit)


def validate_date(value: Optional[str], field: str = "date") -> str:
    """
    Validate a YYYY-MM-DD calendar date

    Raises:
        ValidationError: If the value is missing, malformed or not a real date
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"{field} must be YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date")
    return value


class RoutineService:
    """
    Enforces routine business rules on top of a RoutineRepository

    Args:
        repository: Routine storage
        user_repository: Read access to plan tier
        clock: Returns the current UTC time; also anchors "today" for streaks
    """

    def __init__(
        self,
        repository: RoutineRepository,
        user_repository: UserRepository,
        clock: Callable[[], datetime] = get_utc_now,
    ):
        self.repository = repository
        self.user_repository = user_repository
        self._clock = clock

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    async def list_routines(
        self, user_id: str, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Paginated[Routine]:
        return await self.repository.list_by_user(user_id, clamp_pagination(page, limit))

    async def get_routine(self, user_id: str, routine_id: str) -> Routine:
        return await self._ensure_routine_accessible(user_id, routine_id)

    async def create_routine(self, user_id: str, data: RoutineCreate) -> Routine:
        """
        Create a routine, enforcing the free-plan routine limit

        Raises:
            ValidationError: Empty title or free plan limit reached
        """
        title = (data.title or "").strip()
        if not title:
            raise ValidationError("title is required")

        user = await self.user_repository.get_by_id(user_id)
        # Users without a profile are on the free plan
        is_premium = bool(user and user.is_premium)
        if not is_premium:
            count = await self.repository.count_by_user(user_id)
            if count >= FREE_PLAN_ROUTINE_LIMIT:
                raise ValidationError(
                    f"Free plan limit reached ({FREE_PLAN_ROUTINE_LIMIT} routines). "
                    "Upgrade to Premium to create more."
                )

        routine = await self.repository.create(user_id, RoutineCreate(
            title=title,
            description=data.description,
            schedule=data.schedule or {},
            auto_share=bool(data.auto_share),
            visibility=data.visibility or Visibility.PRIVATE,
        ))
        logger.info(f"Routine {routine.id} created for user {user_id}")
        return routine

    async def update_routine(self, user_id: str, routine_id: str, data: RoutineUpdate) -> Routine:
        """
        Apply a partial update to an active routine

        Raises:
            ValidationError: Explicit empty title or routine is deleted
            NotFoundError: Routine absent or not owned
        """
        changes = data.changes()
        # Non-nullable fields sent as null are treated as not supplied
        for key in ("title", "auto_share", "visibility"):
            if key in changes and changes[key] is None:
                del changes[key]
        if "title" in changes:
            title = changes["title"].strip()
            if not title:
                raise ValidationError("title must not be empty")
            changes["title"] = title

        await self._ensure_routine_accessible(user_id, routine_id)
        routine = await self.repository.update(user_id, routine_id, changes)
        if routine is None:
            raise InternalInvariantError(f"failed to update routine {routine_id}")
        return routine

    async def delete_routine(self, user_id: str, routine_id: str) -> None:
        """Soft-delete a routine; it stays restorable for RESTORE_WINDOW_DAYS"""
        await self._ensure_routine_accessible(user_id, routine_id)
        routine = await self.repository.soft_delete(user_id, routine_id, self._clock())
        if routine is None or routine.deleted_at is None:
            raise InternalInvariantError(f"failed to delete routine {routine_id}")
        logger.info(f"Routine {routine_id} soft-deleted by user {user_id}")

    async def restore_routine(self, user_id: str, routine_id: str) -> Routine:
        """
        Restore a soft-deleted routine within the restore window

        Raises:
            NotFoundError: Routine absent or not owned
            ValidationError: Routine not deleted, or restore window expired
        """
        routine = await self.repository.get_by_id(user_id, routine_id)
        if routine is None:
            raise NotFoundError("routine not found")
        if routine.deleted_at is None:
            raise ValidationError("routine is not deleted")
        if self._clock() - ensure_utc(routine.deleted_at) > _RESTORE_WINDOW:
            raise ValidationError(f"restore window ({RESTORE_WINDOW_DAYS} days) has expired")

        restored = await self.repository.restore(user_id, routine_id)
        if restored is None:
            raise InternalInvariantError(f"failed to restore routine {routine_id}")
        logger.info(f"Routine {routine_id} restored by user {user_id}")
        return restored

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------

    async def list_completions(
        self, user_id: str, routine_id: str, date_range: Optional[DateRange] = None
    ) -> List[Completion]:
        await self._ensure_routine_accessible(user_id, routine_id)
        date_range = date_range or DateRange()
        if date_range.from_date is not None:
            validate_date(date_range.from_date, "from")
        if date_range.to_date is not None:
            validate_date(date_range.to_date, "to")
        if (
            date_range.from_date is not None
            and date_range.to_date is not None
            and date_range.from_date > date_range.to_date
        ):
            raise ValidationError("from must be earlier than to")
        return await self.repository.list_completions(user_id, routine_id, date_range)

    async def add_completion(self, user_id: str, routine_id: str, data: CompletionCreate) -> Completion:
        """Record a completion (idempotent per date) and refresh streaks"""
        routine = await self._ensure_routine_accessible(user_id, routine_id)
        validate_date(data.date)
        completion = await self.repository.add_completion(user_id, routine_id, CompletionCreate(date=data.date))
        if completion is None:
            raise InternalInvariantError(f"failed to record completion for routine {routine_id}")
        await self._refresh_streaks(routine.user_id, routine_id)
        return completion

    async def remove_completion(self, user_id: str, routine_id: str, date_value: str) -> None:
        """
        Remove the completion for a date and refresh streaks

        Raises:
            NotFoundError: Routine or completion not found
        """
        routine = await self._ensure_routine_accessible(user_id, routine_id)
        validate_date(date_value)
        removed = await self.repository.remove_completion(user_id, routine_id, date_value)
        if not removed:
            raise NotFoundError("completion not found")
        await self._refresh_streaks(routine.user_id, routine_id)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    async def list_by_schedule_time(self, time: str) -> Dict[str, List[Routine]]:
        """
        Find routines due for a reminder at a wall-clock time, grouped by owner

        Args:
            time: Time in HH:MM format (24-hour)

        Returns:
            Mapping of user id to that user's due routines, in repository order
        """
        if not isinstance(time, str) or not _TIME_RE.match(time):
            raise ValidationError(f"Invalid time format '{time}'. Use HH:MM (24-hour format)")

        grouped: Dict[str, List[Routine]] = OrderedDict()
        for routine in await self.repository.list_by_schedule_time(time):
            if routine.deleted_at is not None or routine.schedule.get("notify") is False:
                continue
            grouped.setdefault(routine.user_id, []).append(routine)
        return grouped

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_routine_accessible(self, user_id: str, routine_id: str) -> Routine:
        """Routine must exist, belong to the caller and not be soft-deleted"""
        routine = await self.repository.get_by_id(user_id, routine_id)
        if routine is None:
            raise NotFoundError("routine not found")
        if routine.deleted_at is not None:
            raise ValidationError("routine is deleted")
        return routine

    async def _refresh_streaks(self, owner_id: str, routine_id: str) -> Routine:
        completions = await self.repository.list_completions(owner_id, routine_id)
        streaks = calculate_streaks(
            (c.date for c in completions),
            today=ensure_utc(self._clock()).date(),
        )
        routine = await self.repository.update_streaks(owner_id, routine_id, StreakUpdate(
            current_streak=streaks.current,
            max_streak=streaks.max,
        ))
        if routine is None:
            raise InternalInvariantError(f"failed to store streaks for routine {routine_id}")
        return routine
