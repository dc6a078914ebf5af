"""
Pydantic models for users and their notification preferences
"""
from datetime import datetime
from typing import Optional

from app.models.routine import CamelModel


class NotificationSettings(CamelModel):
    """Where reminder messages are delivered"""
    whatsapp_enabled: bool = False
    whatsapp_number: Optional[str] = None


class User(CamelModel):
    id: str
    display_name: str
    photo_url: Optional[str] = None
    is_premium: bool = False
    notification_settings: Optional[NotificationSettings] = None
    created_at: datetime
    updated_at: datetime


class UserCreate(CamelModel):
    display_name: str
    photo_url: Optional[str] = None
    is_premium: bool = False
    notification_settings: Optional[NotificationSettings] = None


class UserUpdate(CamelModel):
    """Partial profile update; is_premium is only honoured by internal callers"""
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    notification_settings: Optional[NotificationSettings] = None
    is_premium: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
