"""
Pydantic models for the application
"""
from app.models.routine import (
    Visibility,
    Routine,
    Completion,
    RoutineCreate,
    RoutineUpdate,
    CompletionCreate,
    StreakUpdate,
    Pagination,
    DateRange,
    Paginated,
    Streaks
)
from app.models.user import (
    NotificationSettings,
    User,
    UserCreate,
    UserUpdate
)

__all__ = [
    "Visibility",
    "Routine",
    "Completion",
    "RoutineCreate",
    "RoutineUpdate",
    "CompletionCreate",
    "StreakUpdate",
    "Pagination",
    "DateRange",
    "Paginated",
    "Streaks",
    "NotificationSettings",
    "User",
    "UserCreate",
    "UserUpdate"
]
