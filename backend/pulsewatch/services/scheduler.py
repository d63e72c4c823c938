"""Scheduler service - drives the fixed-cadence check loop.

Every tick loads all enabled monitors and checks each active one. The
per-monitor ``interval`` is not used to stagger active checks; it only
feeds the push-monitor grace period.

Concurrency:
- One APScheduler job fires the tick (max_instances=1, so ticks never overlap)
- Active checks are independent tasks in a pool capped at max_concurrent_checks
- A monitor whose previous check is still queued or running is skipped
- Push monitors are handled inline in the tick (database work only)
- stop() refuses new ticks and drains ticks, checks and notification fan-outs
"""
import asyncio
import logging
from datetime import timedelta
from typing import List, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..exceptions import PersistenceFailure
from ..models import Monitor
from ..repositories import MonitorRepository, CheckResultRepository
from ..utils.task_pool import TaskPool
from ..utils.timeutils import utcnow
from .checker import CheckerService
from .dispatcher import NotificationDispatcher
from .heartbeat import HeartbeatService
from .transitions import TransitionProcessor

logger = logging.getLogger(__name__)

# Scheduler tick interval in seconds
SCHEDULER_TICK_SECONDS = 10

# Default ceiling on concurrently running probes
MAX_CONCURRENT_CHECKS = 50

DEFAULT_RETENTION_DAYS = 365


class SchedulerService:
    """Service for scheduling and running periodic checks."""

    def __init__(
        self,
        monitors: MonitorRepository,
        results: CheckResultRepository,
        checker: CheckerService,
        processor: TransitionProcessor,
        heartbeat: HeartbeatService,
        dispatcher: NotificationDispatcher,
        tick_seconds: int = SCHEDULER_TICK_SECONDS,
        max_concurrent_checks: int = MAX_CONCURRENT_CHECKS,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.monitors = monitors
        self.results = results
        self.checker = checker
        self.processor = processor
        self.heartbeat = heartbeat
        self.dispatcher = dispatcher
        self.tick_seconds = tick_seconds
        self.max_concurrent_checks = max_concurrent_checks
        self.retention_days = retention_days

        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self._stopping = False
        self._ticks = TaskPool("tick")
        self._checks = TaskPool("check", limit=max_concurrent_checks)
        # Monitors with a check queued or running; at most one per monitor
        self._pending: Set[int] = set()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> int:
        """Checks submitted and not yet finished."""
        return self._checks.in_flight

    def start(self):
        """Start the scheduler. Must be called from a running event loop."""
        if self._running:
            return

        self._stopping = False
        self.scheduler = AsyncIOScheduler()

        self.scheduler.add_job(
            self._tick_job,
            trigger=IntervalTrigger(seconds=self.tick_seconds),
            id="run_checks",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.tick_seconds,
        )

        self.scheduler.add_job(
            self._cleanup_old_results,
            trigger=IntervalTrigger(hours=1),
            id="cleanup_old_results",
            replace_existing=True,
            max_instances=1,
        )

        self.scheduler.start()
        self._running = True
        logger.info(f"Scheduler started (tick={self.tick_seconds}s, max_concurrent={self.max_concurrent_checks})")

    async def stop(self):
        """Stop ticking and wait for every in-flight check and notification."""
        self._stopping = True
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
        self._running = False

        await self.drain()
        logger.info("Scheduler stopped")

    async def drain(self):
        """Wait until ticks, checks and notification fan-outs have all finished."""
        await self._ticks.drain()
        await self._checks.drain()
        await self.dispatcher.drain()

    async def _tick_job(self):
        await self._ticks.spawn(self.run_tick())

    async def run_tick(self) -> List[asyncio.Task]:
        """One pass over all enabled monitors; returns the spawned check tasks."""
        if self._stopping:
            return []

        try:
            monitors = await self.monitors.list_enabled()
        except PersistenceFailure as e:
            logger.error(f"Failed to fetch monitors: {e}")
            return []

        now = utcnow()
        spawned: List[asyncio.Task] = []
        for monitor in monitors:
            if monitor.is_push:
                await self._check_push_monitor(monitor, now)
                continue

            if not self.checker.supports(monitor.type):
                logger.warning(f"No probe found for type '{monitor.type}' (monitor {monitor.name})")
                continue

            if monitor.id in self._pending:
                logger.debug(f"Previous check still pending for {monitor.name}, skipping")
                continue

            self._pending.add(monitor.id)
            task = self._checks.spawn(self._check_monitor(monitor))
            task.add_done_callback(lambda _task, monitor_id=monitor.id: self._pending.discard(monitor_id))
            spawned.append(task)

        if spawned:
            logger.debug(f"Dispatched {len(spawned)} checks ({self._checks.in_flight} in flight)")
        return spawned

    async def _check_push_monitor(self, monitor: Monitor, now):
        try:
            await self.heartbeat.check_overdue(monitor, now)
        except Exception as e:
            logger.error(f"Error checking push monitor {monitor.id}: {e}")

    async def _check_monitor(self, monitor: Monitor):
        """Probe one monitor and apply the outcome."""
        try:
            logger.debug(f"Executing check: {monitor.name} -> {monitor.target}")
            result = await self.checker.check(monitor)
            await self.processor.apply_probe_result(monitor, result)

            log_level = logging.DEBUG if result.success else logging.WARNING
            logger.log(
                log_level,
                f"Probe finished: {monitor.name} success={result.success} "
                f"duration={result.response_time_ms}ms msg={result.message}",
            )
        except Exception as e:
            logger.error(f"Error checking monitor {monitor.id}: {e}")

    async def _cleanup_old_results(self):
        """Delete check results older than the retention window."""
        cutoff = utcnow() - timedelta(days=self.retention_days)
        try:
            deleted = await self.results.delete_older_than(cutoff)
            logger.info(f"Cleaned up {deleted} old check results")
        except PersistenceFailure as e:
            logger.error(f"Error cleaning up results: {e}")
