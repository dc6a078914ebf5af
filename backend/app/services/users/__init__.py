"""
Users module - Profiles, plan tier and notification preferences
"""
from .repository import UserRepository
from .memory import InMemoryUserRepository
from .supabase_repository import SupabaseUserRepository
from .service import UserService

__all__ = [
    'UserRepository',
    'InMemoryUserRepository',
    'SupabaseUserRepository',
    'UserService'
]
