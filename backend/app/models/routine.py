"""
Pydantic models for routines and completions
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Visibility(str, Enum):
    """Who a routine is shared with"""
    PRIVATE = "private"
    PUBLIC = "public"
    FOLLOWERS = "followers"


class Routine(CamelModel):
    """A recurring commitment owned by a single user"""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    schedule: Dict[str, Any] = Field(default_factory=dict)
    auto_share: bool = False
    visibility: Visibility = Visibility.PRIVATE
    current_streak: int = Field(0, ge=0)
    max_streak: int = Field(0, ge=0)
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class Completion(CamelModel):
    """A record that a routine was performed on a calendar date"""
    id: str
    routine_id: str
    user_id: str
    date: str
    created_at: datetime


class RoutineCreate(CamelModel):
    """Request model for creating a routine"""
    title: str = Field("", description="Routine title, trimmed before storage")
    description: Optional[str] = None
    schedule: Optional[Dict[str, Any]] = None
    auto_share: Optional[bool] = None
    visibility: Optional[Visibility] = None


class RoutineUpdate(CamelModel):
    """Request model for partially updating a routine; unset fields stay untouched"""
    title: Optional[str] = None
    description: Optional[str] = None
    schedule: Optional[Dict[str, Any]] = None
    auto_share: Optional[bool] = None
    visibility: Optional[Visibility] = None

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller, keyed by attribute name"""
        return self.model_dump(exclude_unset=True)


class CompletionCreate(CamelModel):
    """Request model for recording a completion"""
    date: str = Field(..., description="Completion date in YYYY-MM-DD format")


class StreakUpdate(CamelModel):
    current_streak: int = Field(..., ge=0)
    max_streak: int = Field(..., ge=0)


class Pagination(CamelModel):
    page: int
    limit: int


class DateRange(CamelModel):
    """Inclusive completion date range; either bound may be open"""
    from_date: Optional[str] = Field(None, alias="from")
    to_date: Optional[str] = Field(None, alias="to")


class Paginated(CamelModel, Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int


class Streaks(CamelModel):
    current: int = 0
    max: int = 0
