"""
Routine Routes - Endpoints for routines and their completions
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.core.dependencies import get_current_user_id, get_routine_service
from app.models.routine import (
    Completion,
    CompletionCreate,
    DateRange,
    Paginated,
    Routine,
    RoutineCreate,
    RoutineUpdate,
)
from app.services.routines import RoutineService

router = APIRouter(prefix="/v1/routines", tags=["routines"])


def parse_positive_int(value: Optional[str], default: int, maximum: Optional[int] = None) -> int:
    """Lenient query parsing: bad or non-positive values fall back to the default"""
    try:
        parsed = int(value) if value else default
    except ValueError:
        return default
    if parsed <= 0:
        return default
    if maximum is not None and parsed > maximum:
        return maximum
    return parsed


@router.get("", response_model=Paginated[Routine])
async def list_routines(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """List the caller's active routines, newest first"""
    return await service.list_routines(
        user_id,
        parse_positive_int(page, DEFAULT_PAGE),
        parse_positive_int(limit, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT),
    )


@router.post("", response_model=Routine, status_code=201)
async def create_routine(
    request: RoutineCreate,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """Create a routine (free plan: at most 2 active routines)"""
    return await service.create_routine(user_id, request)


@router.get("/{routine_id}", response_model=Routine)
async def get_routine(
    routine_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    return await service.get_routine(user_id, routine_id)


@router.patch("/{routine_id}", response_model=Routine)
async def update_routine(
    routine_id: str,
    request: RoutineUpdate,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """Update only the supplied fields"""
    return await service.update_routine(user_id, routine_id, request)


@router.delete("/{routine_id}", status_code=204)
async def delete_routine(
    routine_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """Soft-delete a routine; restorable for 7 days"""
    await service.delete_routine(user_id, routine_id)
    return Response(status_code=204)


@router.post("/{routine_id}/restore", response_model=Routine)
async def restore_routine(
    routine_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    return await service.restore_routine(user_id, routine_id)


@router.get("/{routine_id}/completions")
async def list_completions(
    routine_id: str,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """List completions in ascending date order, optionally within an inclusive range"""
    completions = await service.list_completions(
        user_id,
        routine_id,
        DateRange(from_date=from_date or None, to_date=to_date or None),
    )
    return {"items": [c.model_dump(mode="json", by_alias=True) for c in completions]}


@router.post("/{routine_id}/completions", response_model=Completion, status_code=201)
async def add_completion(
    routine_id: str,
    request: CompletionCreate,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    """Mark a routine done for a date; repeating the same date returns the same record"""
    return await service.add_completion(user_id, routine_id, request)


@router.delete("/{routine_id}/completions/{date}", status_code=204)
async def remove_completion(
    routine_id: str,
    date: str,
    user_id: str = Depends(get_current_user_id),
    service: RoutineService = Depends(get_routine_service),
):
    await service.remove_completion(user_id, routine_id, date)
    return Response(status_code=204)
