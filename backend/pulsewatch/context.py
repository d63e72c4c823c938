"""Application context - the dependency bundle handed to every component."""
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import Settings, get_database_url
from .database import Database
from .repositories import MonitorRepository, CheckResultRepository, ChannelRepository
from .services.checker import CheckerService, default_probes
from .services.dispatcher import NotificationDispatcher
from .services.heartbeat import HeartbeatService
from .services.notifiers import Notifier
from .services.probes import Probe
from .services.recorder import ResultRecorder
from .services.scheduler import SchedulerService
from .services.transitions import TransitionProcessor


@dataclass
class AppContext:
    settings: Settings
    database: Database
    monitors: MonitorRepository
    results: CheckResultRepository
    channels: ChannelRepository
    checker: CheckerService
    dispatcher: NotificationDispatcher
    processor: TransitionProcessor
    heartbeat: HeartbeatService
    scheduler: SchedulerService


def build_context(
    settings: Settings,
    database: Optional[Database] = None,
    probes: Optional[Iterable[Probe]] = None,
    notifiers: Optional[Iterable[Notifier]] = None,
) -> AppContext:
    """Wire the engine together. ``probes``/``notifiers`` override the defaults."""
    if database is None:
        database = Database(get_database_url(settings), data_path=settings.data_path)

    monitors = MonitorRepository(database.session)
    results = CheckResultRepository(database.session)
    channels = ChannelRepository(database.session)

    checker = CheckerService(probes if probes is not None else default_probes(settings.user_agent))
    dispatcher = NotificationDispatcher(
        channels,
        notifiers=notifiers,
        send_timeout=settings.notification_timeout,
        max_concurrent_sends=settings.max_concurrent_notifications,
    )
    processor = TransitionProcessor(monitors, ResultRecorder(results), dispatcher)
    heartbeat = HeartbeatService(monitors, processor, grace_seconds=settings.push_grace_seconds)
    scheduler = SchedulerService(
        monitors,
        results,
        checker,
        processor,
        heartbeat,
        dispatcher,
        tick_seconds=settings.tick_seconds,
        max_concurrent_checks=settings.max_concurrent_checks,
        retention_days=settings.result_retention_days,
    )

    return AppContext(
        settings=settings,
        database=database,
        monitors=monitors,
        results=results,
        channels=channels,
        checker=checker,
        dispatcher=dispatcher,
        processor=processor,
        heartbeat=heartbeat,
        scheduler=scheduler,
    )
