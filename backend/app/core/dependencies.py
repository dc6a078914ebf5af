"""
Dependency injection for shared clients and resources

Storage implementations are chosen once at startup from settings and shared
through a Container stored on the FastAPI application state.
"""
from dataclasses import dataclass
from typing import Optional
import logging
import re

from fastapi import Depends, HTTPException, Request
from supabase import AsyncClient, acreate_client

from app.core.config import Settings
from app.core.exceptions import ConfigurationError
from app.services.external import WhatsAppSender
from app.services.notifications import NotificationService
from app.services.routines import (
    InMemoryRoutineRepository,
    RoutineRepository,
    RoutineService,
    SupabaseRoutineRepository,
)
from app.services.users import (
    InMemoryUserRepository,
    SupabaseUserRepository,
    UserRepository,
    UserService,
)

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"^Bearer (.+)$", re.IGNORECASE)


@dataclass
class Container:
    """Everything a request handler or scheduler job needs"""
    settings: Settings
    routine_repository: RoutineRepository
    user_repository: UserRepository
    routine_service: RoutineService
    user_service: UserService
    notification_service: NotificationService


async def get_supabase_client(settings: Settings) -> AsyncClient:
    """Get Supabase async client instance"""
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required for the supabase backend")
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def build_notification_service(settings: Settings) -> NotificationService:
    sender = WhatsAppSender(
        settings.TWILIO_ACCOUNT_SID,
        settings.TWILIO_AUTH_TOKEN,
        settings.TWILIO_WHATSAPP_NUMBER,
    )
    return NotificationService(sender.send if sender.is_configured else None)


def build_services(
    settings: Settings,
    routine_repository: RoutineRepository,
    user_repository: UserRepository,
    notification_service: Optional[NotificationService] = None,
) -> Container:
    """Wire services around already-built repositories"""
    return Container(
        settings=settings,
        routine_repository=routine_repository,
        user_repository=user_repository,
        routine_service=RoutineService(routine_repository, user_repository),
        user_service=UserService(user_repository),
        notification_service=notification_service or NotificationService(),
    )


async def build_container(settings: Settings) -> Container:
    """
    Build repositories and services for the configured storage backend

    Raises:
        ConfigurationError: Unknown backend or missing credentials
    """
    backend = settings.STORAGE_BACKEND
    if backend == "memory":
        logger.warning("Using in-memory storage - data is lost on restart")
        routine_repository = InMemoryRoutineRepository()
        user_repository = InMemoryUserRepository()
    elif backend == "supabase":
        client = await get_supabase_client(settings)
        routine_repository = SupabaseRoutineRepository(
            client,
            routines_table=settings.ROUTINES_TABLE,
            completions_table=settings.COMPLETIONS_TABLE,
        )
        user_repository = SupabaseUserRepository(client, table=settings.USERS_TABLE)
    else:
        raise ConfigurationError(f"Unknown STORAGE_BACKEND '{backend}'. Use 'memory' or 'supabase'")

    logger.info(f"Storage backend: {backend}")
    return build_services(
        settings,
        routine_repository,
        user_repository,
        build_notification_service(settings),
    )


# ============================================================================
# FASTAPI DEPENDENCIES
# ============================================================================

def get_container(request: Request) -> Container:
    return request.app.state.container


def get_routine_service(container: Container = Depends(get_container)) -> RoutineService:
    return container.routine_service


def get_user_service(container: Container = Depends(get_container)) -> UserService:
    return container.user_service


def get_current_user_id(request: Request, container: Container = Depends(get_container)) -> str:
    """
    Resolve the caller's user id

    Token verification happens upstream; the bearer value is the user id.
    X-User-Id is accepted only when dev impersonation is enabled.
    """
    header = request.headers.get("authorization", "")
    match = _BEARER_RE.match(header.strip())
    if match and match.group(1).strip():
        return match.group(1).strip()

    if container.settings.ALLOW_DEV_IMPERSONATION:
        fallback = request.headers.get("x-user-id", "").strip()
        if fallback:
            return fallback

    raise HTTPException(status_code=401, detail="unauthorized")
