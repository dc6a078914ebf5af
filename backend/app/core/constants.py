"""
Application-wide constants
"""

# Plan limits
FREE_PLAN_ROUTINE_LIMIT = 2

# Soft delete
RESTORE_WINDOW_DAYS = 7

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

# Formats
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Scheduler
REMINDER_JOB_ID = "routine_reminders"
DEFAULT_WHATSAPP_SENDER = "whatsapp:+14155238886"
