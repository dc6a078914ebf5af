"""
Scheduler Service - Background scheduler lifecycle management
Handles starting, stopping, and configuring the APScheduler instance
"""
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.constants import REMINDER_JOB_ID
from .jobs import check_reminders

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def start_scheduler(container):
    """
    Start the background scheduler
    Runs the reminder check at the top of every minute
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return

    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        func=check_reminders,
        trigger=CronTrigger(second=0),
        args=[container],
        id=REMINDER_JOB_ID,
        name='Send routine reminders',
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )

    scheduler.start()
    logger.info("Scheduler started - checking routine reminders every minute")


def stop_scheduler():
    """Stop the background scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler stopped")
