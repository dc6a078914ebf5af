"""
Scheduler Job Definitions
Contains the per-minute routine reminder job
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from app.services.notifications.service import NotificationService
from app.services.routines import RoutineService
from app.services.users import UserRepository
from app.utils.timezone import format_schedule_time, get_app_tz, get_utc_now

logger = logging.getLogger(__name__)


async def send_due_reminders(
    routine_service: RoutineService,
    user_repository: UserRepository,
    notification_service: NotificationService,
    now: Optional[datetime] = None,
    tz=None,
) -> Dict[str, Any]:
    """
    Find routines scheduled for the current minute and remind their owners

    One message per owner lists every routine due at this minute. Owners
    without WhatsApp enabled or without a number are skipped.

    Args:
        routine_service: Source of due routines
        user_repository: Owner notification preferences
        notification_service: Delivery channel
        now: Tick time; defaults to the current UTC time
        tz: Zone for the HH:MM lookup; defaults to the application timezone

    Returns:
        Dict with time, and counts of owners notified, skipped and failed
    """
    time = format_schedule_time(now or get_utc_now(), tz)
    due = await routine_service.list_by_schedule_time(time)
    summary = {"time": time, "owners": len(due), "sent": 0, "skipped": 0, "failed": 0}

    if not due:
        return summary

    logger.info(f"[SCHEDULER] {len(due)} owner(s) have routines due at {time}")

    for user_id, routines in due.items():
        user = await user_repository.get_by_id(user_id)
        prefs = user.notification_settings if user else None
        if not prefs or not prefs.whatsapp_enabled or not prefs.whatsapp_number:
            summary["skipped"] += 1
            continue

        titles = [r.title for r in routines]
        # Twilio's client blocks; keep the event loop free
        sent = await asyncio.to_thread(
            notification_service.send_routine_reminder,
            prefs.whatsapp_number,
            titles,
            time,
        )
        if sent:
            summary["sent"] += 1
            logger.info(f"[SCHEDULER] Reminder sent to user {user_id} for {len(titles)} routine(s)")
        else:
            summary["failed"] += 1
            logger.warning(f"[SCHEDULER] Failed to send reminder to user {user_id}")

    return summary


async def check_reminders(container) -> None:
    """
    Scheduler entry point, called once per minute
    Errors are logged so a bad tick never stops the scheduler
    """
    try:
        await send_due_reminders(
            container.routine_service,
            container.user_repository,
            container.notification_service,
            tz=get_app_tz(container.settings.APP_TIMEZONE),
        )
    except Exception as e:
        logger.error(f"[SCHEDULER] Error in check_reminders: {e}", exc_info=True)
