"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import Settings, settings
from app.core.dependencies import Container, build_container
from app.core.exceptions import RoutineTrackerException, ValidationError
from app.routes import health, routines, users
from app.services.scheduler import start_scheduler, stop_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Silence noisy third-party loggers
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)
logging.getLogger('hpack').setLevel(logging.WARNING)
logging.getLogger('apscheduler.scheduler').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors.default').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def handle_service_error(request: Request, exc: RoutineTrackerException) -> JSONResponse:
    """Translate domain errors into status codes"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc), "code": exc.code},
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as validation errors"""
    errors = exc.errors()
    message = "invalid body"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"message": message, "code": ValidationError.code},
    )


def create_app(container: Optional[Container] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        container: Pre-built services (tests); built from settings on startup when omitted
        app_settings: Settings to use; defaults to the environment
    """
    app_settings = app_settings or (container.settings if container else settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        FastAPI lifespan context manager for startup/shutdown events
        """
        # Startup
        if app.state.container is None:
            app.state.container = await build_container(app_settings)

        if app_settings.REMINDERS_ENABLED:
            try:
                start_scheduler(app.state.container)
                logger.info("✓ Routine reminder scheduler started")
            except Exception as e:
                logger.warning(f"Could not start scheduler: {e}")

        yield

        # Shutdown
        if app_settings.REMINDERS_ENABLED:
            try:
                stop_scheduler()
                logger.info("✓ Routine reminder scheduler stopped")
            except Exception as e:
                logger.warning(f"Error stopping scheduler: {e}")

    app = FastAPI(
        title="Routine Tracker API",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.container = container

    app.add_exception_handler(RoutineTrackerException, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    # Register routes
    app.include_router(health.router)
    app.include_router(routines.router)
    app.include_router(users.router)

    return app


app = create_app()
