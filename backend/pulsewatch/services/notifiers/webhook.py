"""Generic JSON webhook notifier."""
import logging

from ...models import ChannelType
from ...schemas.channels import WebhookChannelConfig
from .base import HttpNotifier, NotificationMessage

logger = logging.getLogger(__name__)


class WebhookNotifier(HttpNotifier):
    """POSTs the notification message as JSON to ``url``."""

    channel_type = ChannelType.WEBHOOK
    config_schema = WebhookChannelConfig

    async def deliver(self, config: WebhookChannelConfig, message: NotificationMessage):
        await self._post_json(config.url, message.to_dict())
        logger.info(f"Webhook sent: {message.status} for {message.monitor_name}")
