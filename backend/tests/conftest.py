import os
from datetime import datetime, timedelta

import pytest
import pytz

# Set test environment variables before the app modules read them
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["REMINDERS_ENABLED"] = "false"
os.environ["ALLOW_DEV_IMPERSONATION"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""

from app.models.user import NotificationSettings, UserCreate  # noqa: E402
from app.services.routines import InMemoryRoutineRepository, RoutineService  # noqa: E402
from app.services.users import InMemoryUserRepository  # noqa: E402


class FakeClock:
    """Controllable UTC clock"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 4, 3, 9, 0, tzinfo=pytz.utc))


@pytest.fixture
def routine_repo(clock):
    return InMemoryRoutineRepository(clock=clock)


@pytest.fixture
def user_repo(clock):
    return InMemoryUserRepository(clock=clock)


@pytest.fixture
def service(routine_repo, user_repo, clock):
    return RoutineService(routine_repo, user_repo, clock=clock)


@pytest.fixture
def make_user(user_repo):
    """Create a profile: make_user("alice", premium=True, whatsapp="+15550001")"""

    async def _make(user_id, premium=False, whatsapp=None):
        settings = None
        if whatsapp is not None:
            settings = NotificationSettings(whatsapp_enabled=True, whatsapp_number=whatsapp)
        return await user_repo.create(user_id, UserCreate(
            display_name=user_id.title(),
            is_premium=premium,
            notification_settings=settings,
        ))

    return _make
