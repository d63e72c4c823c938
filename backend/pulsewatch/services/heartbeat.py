"""Heartbeat monitor - push-based liveness and overdue detection."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..exceptions import InvalidHeartbeatStatus, InvalidHeartbeatToken
from ..models import Monitor, Status
from ..repositories import MonitorRepository
from ..utils.timeutils import utcnow
from .transitions import StatusOutcome, TransitionProcessor

logger = logging.getLogger(__name__)

# Statuses a heartbeat may report
HEARTBEAT_STATUSES = (Status.UP.value, Status.DOWN.value)

# Added to the monitor's interval before a missing heartbeat counts as down
DEFAULT_GRACE_SECONDS = 30
DEFAULT_PUSH_INTERVAL = 60

OVERDUE_MESSAGE = "heartbeat overdue"


class HeartbeatService:
    """Two write paths for push monitors.

    ``process_heartbeat`` handles a signal from the monitored system.
    ``check_overdue`` runs on every scheduler tick and forces a silent
    monitor down without moving its last-seen time.
    """

    def __init__(
        self,
        monitors: MonitorRepository,
        processor: TransitionProcessor,
        grace_seconds: int = DEFAULT_GRACE_SECONDS,
    ):
        self.monitors = monitors
        self.processor = processor
        self.grace_seconds = grace_seconds

    async def process_heartbeat(
        self,
        token: str,
        status: Optional[str] = None,
        message: Optional[str] = None,
        ping: Optional[int] = None,
    ) -> StatusOutcome:
        """Record a pushed heartbeat as if a probe had returned it.

        Raises InvalidHeartbeatToken when no monitor owns ``token`` and
        InvalidHeartbeatStatus for a status other than up or down; neither
        writes anything.
        """
        if status is None:
            status = Status.UP.value
        elif status not in HEARTBEAT_STATUSES:
            raise InvalidHeartbeatStatus(status)

        monitor = await self.monitors.get_by_push_token(token) if token else None
        if monitor is None:
            raise InvalidHeartbeatToken(token)

        outcome = await self.processor.apply(
            monitor,
            status,
            message or "",
            response_time_ms=ping,
        )
        logger.debug(f"Heartbeat from {monitor.name}: {status}")
        return outcome

    def grace_period(self, monitor: Monitor) -> timedelta:
        interval = DEFAULT_PUSH_INTERVAL if monitor.interval is None else monitor.interval
        return timedelta(seconds=interval + self.grace_seconds)

    def is_overdue(self, monitor: Monitor, now: Optional[datetime] = None) -> bool:
        """True when a previously seen push monitor has gone silent past its grace period."""
        if monitor.last_checked_at is None:
            # Never received a first heartbeat
            return False
        now = now or utcnow()
        return now - monitor.last_checked_at > self.grace_period(monitor)

    async def check_overdue(self, monitor: Monitor, now: Optional[datetime] = None) -> Optional[StatusOutcome]:
        """Force an overdue monitor down once; returns None when nothing changed."""
        if not self.is_overdue(monitor, now):
            return None
        if monitor.last_status == Status.DOWN.value:
            return None

        logger.warning(f"Push monitor overdue: {monitor.name} (last seen {monitor.last_checked_at})")
        return await self.processor.apply(
            monitor,
            Status.DOWN.value,
            OVERDUE_MESSAGE,
            advance_checked_at=False,
        )
