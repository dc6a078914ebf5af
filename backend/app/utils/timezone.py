"""
Timezone Utilities - Centralized timezone handling
"""
from datetime import date, datetime
import pytz

from app.core.config import settings


def get_app_tz(name: str = None):
    """
    Get the timezone used for reminder scheduling

    Args:
        name: Optional IANA zone name; defaults to settings.APP_TIMEZONE

    Returns:
        pytz timezone object
    """
    return pytz.timezone(name or settings.APP_TIMEZONE)


def get_utc_now() -> datetime:
    """
    Get current datetime in UTC

    Returns:
        Timezone-aware datetime object in UTC
    """
    return datetime.now(pytz.utc)


def get_utc_today() -> date:
    """Calendar date in UTC; streaks are anchored to it"""
    return get_utc_now().date()


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def format_schedule_time(moment: datetime, tz=None) -> str:
    """
    Format a moment as the HH:MM wall-clock time used by routine schedules

    Args:
        moment: Timezone-aware datetime
        tz: Target timezone; defaults to the application timezone

    Returns:
        Time string like "07:30"
    """
    return ensure_utc(moment).astimezone(tz or get_app_tz()).strftime("%H:%M")
