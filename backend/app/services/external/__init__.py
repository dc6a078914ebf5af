"""
External integrations module
Handles connections to external services (WhatsApp)
"""
from .whatsapp import WhatsAppSender

__all__ = ['WhatsAppSender']
