"""RoutineRepository protocol - storage contract for a user's routines and completions.

Every user-scoped method takes the caller's user id and answers "not found"
(None / False / empty list) for routines owned by someone else, so callers
cannot probe for the existence of other users' data. Backend failures are
raised as DatabaseError.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from app.models.routine import (
    Completion,
    CompletionCreate,
    DateRange,
    Paginated,
    Pagination,
    Routine,
    RoutineCreate,
    StreakUpdate,
)

# Fields a caller may change through update()
MUTABLE_FIELDS = ("title", "description", "schedule", "auto_share", "visibility")


@runtime_checkable
class RoutineRepository(Protocol):
    """Repository interface for Routine and Completion persistence."""

    async def list_by_user(self, user_id: str, pagination: Pagination) -> Paginated[Routine]:
        """List a user's non-deleted routines, newest first.

        Args:
            user_id: The owner's user ID.
            pagination: Page (1-based) and page size, already clamped by the caller.

        Returns:
            One page of routines plus the total count of non-deleted routines.
        """
        ...

    async def get_by_id(self, user_id: str, routine_id: str) -> Optional[Routine]:
        """Fetch a routine, including soft-deleted ones.

        Returns:
            The routine, or None if absent or owned by another user.
        """
        ...

    async def create(self, user_id: str, data: RoutineCreate) -> Routine:
        """Persist a new routine with a fresh id, timestamps and zero streaks."""
        ...

    async def update(self, user_id: str, routine_id: str, changes: Dict[str, Any]) -> Optional[Routine]:
        """Apply only the supplied fields and refresh updated_at.

        Args:
            changes: Mapping of attribute name to new value; keys outside
                MUTABLE_FIELDS are ignored.
        """
        ...

    async def update_streaks(self, user_id: str, routine_id: str, streaks: StreakUpdate) -> Optional[Routine]:
        """Store recomputed streak counters."""
        ...

    async def soft_delete(self, user_id: str, routine_id: str, deleted_at: datetime) -> Optional[Routine]:
        """Set the tombstone timestamp."""
        ...

    async def restore(self, user_id: str, routine_id: str) -> Optional[Routine]:
        """Clear the tombstone and bump updated_at."""
        ...

    async def list_completions(
        self, user_id: str, routine_id: str, date_range: Optional[DateRange] = None
    ) -> List[Completion]:
        """List completions in ascending date order, bounds inclusive.

        Returns:
            Empty list when the routine is absent or not owned.
        """
        ...

    async def add_completion(self, user_id: str, routine_id: str, data: CompletionCreate) -> Optional[Completion]:
        """Record a completion; returns the existing record if the date is already recorded.

        Returns:
            The completion, or None when the routine is absent or not owned.
        """
        ...

    async def remove_completion(self, user_id: str, routine_id: str, date: str) -> bool:
        """Delete the completion for a date; False when none existed."""
        ...

    async def count_by_user(self, user_id: str) -> int:
        """Count the user's non-deleted routines."""
        ...

    async def list_by_schedule_time(self, time: str) -> List[Routine]:
        """List non-deleted routines of all users whose schedule time equals HH:MM."""
        ...
