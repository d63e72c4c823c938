"""Notification dispatcher - fans status changes out to subscribed channels."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from ..exceptions import NotificationFailure, PersistenceFailure
from ..models import ChannelType, Monitor, NotificationChannel, NotificationLog
from ..repositories import ChannelRepository
from ..utils.task_pool import TaskPool
from ..utils.timeutils import utcnow
from .notifiers import (
    Notifier,
    NotificationMessage,
    WebhookNotifier,
    EmailNotifier,
    DiscordNotifier,
    TelegramNotifier,
)
from .notifiers.base import DEFAULT_SEND_TIMEOUT

logger = logging.getLogger(__name__)

MAX_CONCURRENT_SENDS = 20


@dataclass
class DeliveryResult:
    """Outcome of one channel send."""
    channel_id: int
    channel_name: str
    success: bool
    error: Optional[str] = None


def default_notifiers(timeout: float = DEFAULT_SEND_TIMEOUT) -> Iterable[Notifier]:
    return [
        WebhookNotifier(timeout=timeout),
        EmailNotifier(timeout=timeout),
        DiscordNotifier(timeout=timeout),
        TelegramNotifier(timeout=timeout),
    ]


class NotificationDispatcher:
    """Resolves a monitor's channels and sends to each one independently.

    Every send is its own task in a bounded pool with its own time budget, so
    a slow or broken channel never holds up or fails another. Nothing is
    retried.
    """

    def __init__(
        self,
        channels: ChannelRepository,
        notifiers: Optional[Iterable[Notifier]] = None,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
        max_concurrent_sends: int = MAX_CONCURRENT_SENDS,
    ):
        self.channels = channels
        self.send_timeout = send_timeout
        self._notifiers: Dict[ChannelType, Notifier] = {}
        for notifier in notifiers if notifiers is not None else default_notifiers(send_timeout):
            self.register(notifier)
        self._sends = TaskPool("notification-send", limit=max_concurrent_sends)
        self._fanouts = TaskPool("notification-fanout")

    def register(self, notifier: Notifier):
        self._notifiers[notifier.channel_type] = notifier

    def notifier_for(self, channel_type: str) -> Optional[Notifier]:
        try:
            return self._notifiers.get(ChannelType(channel_type))
        except ValueError:
            return None

    def dispatch(self, monitor: Monitor, new_status: str, message: str) -> asyncio.Task:
        """Start ``notify`` in the background and return immediately."""
        return self._fanouts.spawn(self.notify(monitor, new_status, message))

    async def drain(self):
        """Wait for all background fan-outs (and their sends) to finish."""
        await self._fanouts.drain()
        await self._sends.drain()

    @property
    def in_flight(self) -> int:
        return self._fanouts.in_flight

    async def notify(self, monitor: Monitor, new_status: str, message: str) -> List[DeliveryResult]:
        """Send one status change to every enabled subscribed channel."""
        try:
            channels = await self.channels.list_for_monitor(monitor.id)
        except PersistenceFailure as e:
            logger.error(f"Failed to fetch subscriptions for {monitor.name}: {e}")
            return []

        targets = [channel for channel in channels if channel.enabled]
        if not targets:
            return []

        payload = NotificationMessage(
            monitor_name=monitor.name,
            target=monitor.target or "",
            status=new_status,
            message=message or "",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

        tasks = [self._sends.spawn(self._deliver(channel, payload)) for channel in targets]
        results: List[DeliveryResult] = list(await asyncio.gather(*tasks))

        await self._log_deliveries(monitor, new_status, results)
        return results

    async def _deliver(self, channel: NotificationChannel, payload: NotificationMessage) -> DeliveryResult:
        notifier = self.notifier_for(channel.type)
        if notifier is None:
            logger.warning(f"Unknown notifier type '{channel.type}' for channel {channel.name}")
            return DeliveryResult(channel.id, channel.name, False, f"Unknown notifier type: {channel.type}")

        try:
            await asyncio.wait_for(notifier.send(channel.config, payload), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            error = f"send timed out after {self.send_timeout:g}s"
        except NotificationFailure as e:
            error = str(e)
        except Exception as e:
            logger.exception(f"Notifier {channel.type} crashed for channel {channel.name}")
            error = f"{type(e).__name__}: {e}"
        else:
            logger.info(f"Notification sent: {payload.status} for {payload.monitor_name} via {channel.name}")
            return DeliveryResult(channel.id, channel.name, True)

        logger.error(f"Failed to send notification via {channel.name}: {error}")
        return DeliveryResult(channel.id, channel.name, False, error)

    async def _log_deliveries(self, monitor: Monitor, event: str, results: List[DeliveryResult]):
        sent_at = utcnow()
        entries = [
            NotificationLog(
                monitor_id=monitor.id,
                channel_id=result.channel_id,
                event=event,
                success=result.success,
                error=result.error,
                sent_at=sent_at,
            )
            for result in results
        ]
        try:
            await self.channels.log_deliveries(entries)
        except PersistenceFailure as e:
            logger.error(f"Failed to record notification log for {monitor.name}: {e}")
