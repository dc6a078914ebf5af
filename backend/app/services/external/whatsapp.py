"""
WhatsApp Service - Twilio messaging for routine reminders
"""
import logging
from typing import Optional

from twilio.rest import Client

from app.core.constants import DEFAULT_WHATSAPP_SENDER
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class WhatsAppSender:
    """
    Sends WhatsApp messages through Twilio

    Args:
        account_sid: Twilio account SID
        auth_token: Twilio auth token
        from_number: Sender, e.g. "whatsapp:+14155238886"
        client: Optional pre-built Twilio client
    """

    def __init__(
        self,
        account_sid: str = "",
        auth_token: str = "",
        from_number: str = "",
        client: Optional[Client] = None,
    ):
        self.from_number = from_number or DEFAULT_WHATSAPP_SENDER
        self.client = client
        if self.client is None and account_sid and auth_token:
            self.client = Client(account_sid, auth_token)
            logger.info("Twilio client initialized successfully")
        elif self.client is None:
            logger.warning("Twilio credentials not found. WhatsApp reminders will be disabled.")

    @property
    def is_configured(self) -> bool:
        """Check if Twilio client is configured"""
        return self.client is not None

    def send(self, to_number: str, message: str) -> str:
        """
        Send a WhatsApp message via Twilio

        Args:
            to_number: Recipient WhatsApp number (e.g., "whatsapp:+13128856151")
            message: Message text to send

        Returns:
            Message SID from Twilio

        Raises:
            ExternalServiceError: If Twilio client not configured or send fails
        """
        if not self.client:
            raise ExternalServiceError("Twilio client not configured")

        if not to_number.startswith("whatsapp:"):
            to_number = f"whatsapp:{to_number}"

        logger.info(f"[TWILIO] Sending message to {to_number}")
        try:
            twilio_message = self.client.messages.create(
                from_=self.from_number,
                body=message,
                to=to_number
            )
        except Exception as e:
            logger.error(f"[TWILIO] Send failed: {str(e)}")
            raise ExternalServiceError(f"Failed to send WhatsApp message: {e}")

        logger.info(f"[TWILIO] Message sent with SID: {twilio_message.sid}")
        return twilio_message.sid
