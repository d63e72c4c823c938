"""Discord webhook notifier - one colored embed per status change."""
from datetime import datetime, timezone

from ...models import ChannelType, Status
from ...schemas.channels import DiscordChannelConfig
from .base import HttpNotifier, NotificationMessage

COLOR_UP = 0x2ECC71
COLOR_DOWN = 0xE74C3C
COLOR_UNKNOWN = 0x95A5A6


def embed_color(status: str) -> int:
    if status == Status.UP.value:
        return COLOR_UP
    if status == Status.DOWN.value:
        return COLOR_DOWN
    return COLOR_UNKNOWN


class DiscordNotifier(HttpNotifier):

    channel_type = ChannelType.DISCORD
    config_schema = DiscordChannelConfig

    def build_payload(self, message: NotificationMessage) -> dict:
        return {
            "embeds": [
                {
                    "title": f"Monitor Status: {message.status}",
                    "description": f"**{message.monitor_name}** is {message.status}",
                    "color": embed_color(message.status),
                    "fields": [
                        {"name": "Target", "value": message.target or "-", "inline": True},
                        {"name": "Message", "value": message.message or "-", "inline": True},
                        {"name": "Time", "value": message.timestamp, "inline": False},
                    ],
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            ]
        }

    async def deliver(self, config: DiscordChannelConfig, message: NotificationMessage):
        await self._post_json(config.webhook_url, self.build_payload(message))
