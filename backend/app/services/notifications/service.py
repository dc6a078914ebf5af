"""
Notifications Service - Message formatting and delivery
Centralizes reminder message templates and sending logic
"""
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# MESSAGE FORMATTING
# ============================================================================

def format_routine_reminder(routine_titles: List[str], time: str) -> str:
    """
    Format a reminder message for routines scheduled at a time

    Args:
        routine_titles: Titles of the routines due now
        time: Scheduled time in HH:MM format

    Returns:
        Formatted reminder message
    """
    if len(routine_titles) == 1:
        return f"🔔 {time} - time for your routine: {routine_titles[0]}\n\nKeep your streak going!"

    lines = "\n".join(f"• {title}" for title in routine_titles)
    return f"🔔 {time} - time for your routines:\n{lines}\n\nKeep your streaks going!"


# ============================================================================
# NOTIFICATION SENDING
# ============================================================================

class NotificationService:
    """
    Service for sending notifications via various channels
    """

    def __init__(self, send_callback: Optional[Callable[[str, str], object]] = None):
        """
        Initialize notification service

        Args:
            send_callback: Optional callback function for sending messages
                          Should have signature: callback(recipient: str, message: str)
                          and raise on failure
        """
        self.send_callback = send_callback

    def send_notification(self, recipient: str, message: str) -> bool:
        """
        Send a notification message

        Args:
            recipient: Channel-specific address (WhatsApp number)
            message: The message to send

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.send_callback:
            logger.warning("No send callback configured - notification not sent")
            logger.info(f"Would have sent to {recipient}: {message}")
            return False

        try:
            self.send_callback(recipient, message)
        except Exception as e:
            logger.error(f"Failed to send notification to {recipient}: {e}")
            return False

        logger.info("Notification sent successfully")
        return True

    def send_routine_reminder(self, recipient: str, routine_titles: List[str], time: str) -> bool:
        """
        Send one reminder covering every routine due at a time

        Returns:
            True if sent successfully, False otherwise
        """
        if not routine_titles:
            return False
        return self.send_notification(recipient, format_routine_reminder(routine_titles, time))
