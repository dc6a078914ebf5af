"""
Business logic services
"""
from . import routines
from . import users
from . import scheduler
from . import notifications
from . import external

__all__ = [
    'routines',
    'users',
    'scheduler',
    'notifications',
    'external'
]
