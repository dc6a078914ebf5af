"""
Notifications module
Message formatting and delivery for routine reminders
"""
from .service import (
    NotificationService,
    format_routine_reminder
)

__all__ = [
    'NotificationService',
    'format_routine_reminder'
]
