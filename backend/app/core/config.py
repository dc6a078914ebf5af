"""
Application configuration and environment variables
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables"""

    def __init__(self):
        # Storage
        self.STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory").strip().lower()
        self.SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
        self.SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
        self.ROUTINES_TABLE: str = os.getenv("ROUTINES_TABLE", "routines")
        self.COMPLETIONS_TABLE: str = os.getenv("COMPLETIONS_TABLE", "routine_completions")
        self.USERS_TABLE: str = os.getenv("USERS_TABLE", "users")

        # Identity
        self.ALLOW_DEV_IMPERSONATION: bool = _env_flag("ALLOW_DEV_IMPERSONATION", False)

        # Reminders
        self.APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")
        self.REMINDERS_ENABLED: bool = _env_flag("REMINDERS_ENABLED", True)

        # WhatsApp / Twilio
        self.TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
        self.TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
        self.TWILIO_WHATSAPP_NUMBER: str = os.getenv("TWILIO_WHATSAPP_NUMBER", "")

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


# Create a global settings instance
settings = Settings()
