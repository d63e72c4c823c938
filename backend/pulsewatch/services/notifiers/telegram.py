"""Telegram Bot API notifier."""
from typing import Optional

import httpx

from ...models import ChannelType, Status
from ...schemas.channels import TelegramChannelConfig
from .base import DEFAULT_SEND_TIMEOUT, HttpNotifier, NotificationMessage

TELEGRAM_API_BASE = "https://api.telegram.org"

STATUS_ICONS = {
    Status.UP.value: "✅",
    Status.DOWN.value: "\U0001F534",
}


class TelegramNotifier(HttpNotifier):

    channel_type = ChannelType.TELEGRAM
    config_schema = TelegramChannelConfig

    def __init__(
        self,
        timeout: float = DEFAULT_SEND_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        api_base: str = TELEGRAM_API_BASE,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_base = api_base.rstrip("/")

    def format_text(self, message: NotificationMessage) -> str:
        icon = STATUS_ICONS.get(message.status, "❓")
        return (
            f"{icon} *Monitor Status Update*\n\n"
            f"*Monitor:* {message.monitor_name}\n"
            f"*Status:* {message.status}\n"
            f"*Target:* {message.target}\n"
            f"*Message:* {message.message}\n"
            f"*Time:* {message.timestamp}"
        )

    async def deliver(self, config: TelegramChannelConfig, message: NotificationMessage):
        url = f"{self.api_base}/bot{config.bot_token}/sendMessage"
        await self._post_json(url, {
            "chat_id": config.chat_id,
            "text": self.format_text(message),
            "parse_mode": "Markdown",
        })
