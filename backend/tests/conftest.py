"""Shared fixtures: a throwaway SQLite database and a wired application context."""
import asyncio
import json
from typing import List, Optional

import pytest
from sqlalchemy import select

from pulsewatch.config import Settings
from pulsewatch.context import build_context
from pulsewatch.database import Database
from pulsewatch.models import (
    CheckResult,
    Monitor,
    MonitorType,
    NotificationChannel,
    NotificationLog,
    subscriptions,
)
from pulsewatch.schemas.channels import WebhookChannelConfig
from pulsewatch.services.notifiers.base import Notifier
from pulsewatch.services.probes import Probe, ProbeResult
from pulsewatch.models import ChannelType


class ScriptedProbe(Probe):
    """Returns queued results in order, repeating the last one."""

    monitor_types = (MonitorType.HTTP,)

    def __init__(self, *results: ProbeResult, delay: float = 0.0):
        self.results = list(results) or [ProbeResult.ok("OK")]
        self.delay = delay
        self.calls: List[int] = []

    async def check(self, monitor):
        self.calls.append(monitor.id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


class RecordingNotifier(Notifier):
    """Webhook-typed notifier that keeps messages instead of sending them."""

    channel_type = ChannelType.WEBHOOK
    config_schema = WebhookChannelConfig

    def __init__(self):
        self.sent = []

    async def deliver(self, config, message):
        self.sent.append((config.url, message))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_path=str(tmp_path),
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pulsewatch-test.db'}",
        notification_timeout=2.0,
    )


@pytest.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.init()
    yield db
    await db.close()


@pytest.fixture
def probe():
    return ScriptedProbe()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def context(settings, database, probe, notifier):
    ctx = build_context(settings, database=database, probes=[probe], notifiers=[notifier])
    yield ctx
    await ctx.scheduler.drain()


@pytest.fixture
def make_monitor(database):
    async def _make(**fields) -> Monitor:
        fields.setdefault("name", "api")
        fields.setdefault("type", MonitorType.HTTP.value)
        fields.setdefault("target", "http://example/health")
        monitor = Monitor(**fields)
        async with database.session() as session:
            session.add(monitor)
            await session.commit()
        return monitor
    return _make


@pytest.fixture
def make_channel(database):
    async def _make(monitor: Monitor, type: str = "webhook", config=None, enabled: bool = True,
                    name: Optional[str] = None) -> NotificationChannel:
        if config is None:
            config = {"url": "http://hooks.example/notify"}
        channel = NotificationChannel(
            name=name or f"{type}-channel",
            type=type,
            config=config if isinstance(config, str) else json.dumps(config),
            enabled=enabled,
        )
        async with database.session() as session:
            session.add(channel)
            await session.flush()
            await session.execute(
                subscriptions.insert().values(monitor_id=monitor.id, channel_id=channel.id)
            )
            await session.commit()
        return channel
    return _make


@pytest.fixture
def fetch_monitor(database):
    async def _fetch(monitor_id: int) -> Monitor:
        async with database.session() as session:
            return await session.get(Monitor, monitor_id)
    return _fetch


@pytest.fixture
def fetch_results(database):
    async def _fetch(monitor_id: int) -> List[CheckResult]:
        async with database.session() as session:
            result = await session.execute(
                select(CheckResult).where(CheckResult.monitor_id == monitor_id).order_by(CheckResult.id)
            )
            return list(result.scalars().all())
    return _fetch


@pytest.fixture
def fetch_notification_log(database):
    async def _fetch(monitor_id: int) -> List[NotificationLog]:
        async with database.session() as session:
            result = await session.execute(
                select(NotificationLog).where(NotificationLog.monitor_id == monitor_id).order_by(NotificationLog.id)
            )
            return list(result.scalars().all())
    return _fetch
