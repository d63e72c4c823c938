"""Monitor reads and cached-status writes."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update

from ..models import Monitor
from ..utils.timeutils import utcnow
from .base import Repository

logger = logging.getLogger(__name__)


class MonitorRepository(Repository):

    async def list_enabled(self) -> List[Monitor]:
        async with self._session("list monitors") as session:
            result = await session.execute(
                select(Monitor).where(Monitor.enabled.is_(True)).order_by(Monitor.id)
            )
            return list(result.scalars().all())

    async def get(self, monitor_id: int) -> Optional[Monitor]:
        async with self._session("get monitor") as session:
            return await session.get(Monitor, monitor_id)

    async def get_by_push_token(self, token: str) -> Optional[Monitor]:
        async with self._session("get monitor by push token") as session:
            result = await session.execute(select(Monitor).where(Monitor.push_token == token))
            return result.scalar_one_or_none()

    async def add(self, monitor: Monitor) -> Monitor:
        async with self._session("add monitor") as session:
            session.add(monitor)
            await session.flush()
        return monitor

    async def update_status(
        self,
        monitor_id: int,
        status: str,
        checked_at: Optional[datetime] = None,
        certificate_expiry: Optional[datetime] = None,
    ):
        """Write the cached status in a single UPDATE.

        ``checked_at`` and ``certificate_expiry`` are only written when given,
        so overdue detection can leave the last-seen time untouched.
        """
        values = {"last_status": status, "updated_at": utcnow()}
        if checked_at is not None:
            values["last_checked_at"] = checked_at
        if certificate_expiry is not None:
            values["certificate_expiry"] = certificate_expiry

        async with self._session("update monitor status") as session:
            await session.execute(
                update(Monitor).where(Monitor.id == monitor_id).values(**values)
            )
