"""Pydantic schemas for channel configuration and ingress responses."""
from .channels import (
    WebhookChannelConfig,
    EmailChannelConfig,
    DiscordChannelConfig,
    TelegramChannelConfig,
)
from .heartbeat import HeartbeatAck

__all__ = [
    "WebhookChannelConfig",
    "EmailChannelConfig",
    "DiscordChannelConfig",
    "TelegramChannelConfig",
    "HeartbeatAck",
]
