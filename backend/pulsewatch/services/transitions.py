"""Transition detection and the persist -> detect -> update sequence."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..exceptions import PersistenceFailure
from ..models import Monitor, Status
from ..repositories import MonitorRepository
from ..utils.timeutils import utcnow
from .dispatcher import NotificationDispatcher
from .probes import ProbeResult
from .recorder import ResultRecorder

logger = logging.getLogger(__name__)


def derive_status(result: ProbeResult) -> str:
    return Status.UP.value if result.success else Status.DOWN.value


def is_transition(previous: Optional[str], current: str) -> bool:
    """Any change from the cached status counts, including from unknown."""
    return (previous or Status.UNKNOWN.value) != current


@dataclass
class StatusOutcome:
    monitor_id: int
    previous: str
    status: str
    transitioned: bool
    recorded: bool


class TransitionProcessor:
    """Applies one outcome to a monitor.

    ``monitor`` is the snapshot loaded at the start of the tick (or the
    heartbeat request); its ``last_status`` is what the new status is
    compared against, it is never re-read mid-check.
    """

    def __init__(self, monitors: MonitorRepository, recorder: ResultRecorder, dispatcher: NotificationDispatcher):
        self.monitors = monitors
        self.recorder = recorder
        self.dispatcher = dispatcher

    async def apply(
        self,
        monitor: Monitor,
        status: str,
        message: str = "",
        response_time_ms: Optional[int] = None,
        certificate_expiry: Optional[datetime] = None,
        advance_checked_at: bool = True,
    ) -> StatusOutcome:
        previous = monitor.last_status or Status.UNKNOWN.value

        # 1. Persist
        row = await self.recorder.record(monitor.id, status, response_time_ms, message)

        # 2. Detect
        transitioned = is_transition(previous, status)
        if transitioned:
            logger.info(f"Monitor status changed: {monitor.name} {previous} -> {status}")
            self.dispatcher.dispatch(monitor, status, message)

        # 3. Update the cached status whether or not it changed
        try:
            await self.monitors.update_status(
                monitor.id,
                status,
                checked_at=utcnow() if advance_checked_at else None,
                certificate_expiry=certificate_expiry,
            )
        except PersistenceFailure as e:
            logger.error(f"Failed to update monitor status for {monitor.name}: {e}")

        return StatusOutcome(monitor.id, previous, status, transitioned, row is not None)

    async def apply_probe_result(self, monitor: Monitor, result: ProbeResult) -> StatusOutcome:
        expiry = result.metadata.get("cert_expiry")
        return await self.apply(
            monitor,
            derive_status(result),
            result.message,
            response_time_ms=result.response_time_ms,
            certificate_expiry=expiry if isinstance(expiry, datetime) else None,
        )
