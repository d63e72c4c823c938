"""Notification back-ends."""
from .base import Notifier, NotificationMessage
from .webhook import WebhookNotifier
from .email import EmailNotifier
from .discord import DiscordNotifier
from .telegram import TelegramNotifier

__all__ = [
    "Notifier",
    "NotificationMessage",
    "WebhookNotifier",
    "EmailNotifier",
    "DiscordNotifier",
    "TelegramNotifier",
]
