"""Subscribed channel lookup and delivery logging."""
from typing import Iterable, List

from sqlalchemy import select

from ..models import NotificationChannel, NotificationLog, subscriptions
from .base import Repository


class ChannelRepository(Repository):

    async def list_for_monitor(self, monitor_id: int) -> List[NotificationChannel]:
        """All channels subscribed to a monitor, enabled or not."""
        async with self._session("list subscribed channels") as session:
            result = await session.execute(
                select(NotificationChannel)
                .join(subscriptions, subscriptions.c.channel_id == NotificationChannel.id)
                .where(subscriptions.c.monitor_id == monitor_id)
                .order_by(NotificationChannel.id)
            )
            return list(result.scalars().all())

    async def log_deliveries(self, entries: Iterable[NotificationLog]):
        rows = list(entries)
        if not rows:
            return
        async with self._session("log notification deliveries") as session:
            session.add_all(rows)
