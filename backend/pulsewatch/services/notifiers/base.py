"""Notifier abstraction - one back-end per channel type."""
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from ...exceptions import ChannelConfigError, NotificationFailure
from ...models import ChannelType

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 10.0


@dataclass(frozen=True)
class NotificationMessage:
    """A status change, rendered once and shared by every channel."""
    monitor_name: str
    target: str
    status: str
    message: str
    timestamp: str  # ISO 8601, UTC

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Notifier:
    """Parses its channel's configuration blob and delivers a message.

    ``send`` raises ChannelConfigError for a malformed blob and
    NotificationFailure for a delivery error; it never retries.
    """

    channel_type: ChannelType
    config_schema: Type[BaseModel]

    def parse_config(self, raw: Optional[str]) -> BaseModel:
        if not raw:
            raise ChannelConfigError(f"missing {self.channel_type.value} config")
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise ChannelConfigError(f"invalid {self.channel_type.value} config: {e}") from e
        try:
            return self.config_schema.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "config" for err in e.errors())
            raise ChannelConfigError(f"invalid {self.channel_type.value} config: {fields}") from e

    async def send(self, raw_config: Optional[str], message: NotificationMessage):
        config = self.parse_config(raw_config)
        await self.deliver(config, message)

    async def deliver(self, config: BaseModel, message: NotificationMessage):
        raise NotImplementedError


class HttpNotifier(Notifier):
    """Notifier that delivers with a single JSON POST."""

    def __init__(self, timeout: float = DEFAULT_SEND_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    async def _post_json(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        service = self.channel_type.value
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationFailure(f"{service} request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise NotificationFailure(f"{service} returned status {response.status_code}")
        return response
