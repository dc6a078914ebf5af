"""
Routines module - Routine lifecycle, completions and streaks
"""
from .repository import RoutineRepository
from .memory import InMemoryRoutineRepository
from .supabase_repository import SupabaseRoutineRepository
from .streaks import calculate_streaks
from .service import RoutineService, clamp_pagination, validate_date

__all__ = [
    'RoutineRepository',
    'InMemoryRoutineRepository',
    'SupabaseRoutineRepository',
    'calculate_streaks',
    'RoutineService',
    'clamp_pagination',
    'validate_date'
]
