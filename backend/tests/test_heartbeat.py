"""Push monitors: heartbeat ingress and overdue detection."""
from datetime import timedelta

import httpx
import pytest

from pulsewatch.exceptions import InvalidHeartbeatStatus, InvalidHeartbeatToken
from pulsewatch.main import create_app
from pulsewatch.models import Monitor, MonitorType
from pulsewatch.utils.timeutils import utcnow


@pytest.fixture
def make_push_monitor(make_monitor):
    async def _make(token: str = "tok-123", **fields):
        fields.setdefault("name", "nightly-backup")
        fields.setdefault("interval", 60)
        return await make_monitor(type=MonitorType.PUSH.value, target="", push_token=token, **fields)
    return _make


@pytest.fixture
async def client(context):
    app = create_app(context=context)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


# Overdue detection

@pytest.mark.asyncio
async def test_overdue_past_interval_plus_grace(context, notifier, make_push_monitor, make_channel,
                                                fetch_monitor, fetch_results):
    last_seen = utcnow() - timedelta(seconds=95)
    monitor = await make_push_monitor(last_status="up", last_checked_at=last_seen)
    await make_channel(monitor)

    outcome = await context.heartbeat.check_overdue(monitor)
    await context.dispatcher.drain()

    assert outcome.transitioned is True
    assert outcome.status == "down"
    stored = await fetch_monitor(monitor.id)
    assert stored.last_status == "down"
    # Last-seen time is left where the last heartbeat put it
    assert stored.last_checked_at == last_seen
    assert [(r.status, r.message) for r in await fetch_results(monitor.id)] == [("down", "heartbeat overdue")]
    assert [m.status for _, m in notifier.sent] == ["down"]


@pytest.mark.asyncio
async def test_within_grace_is_not_overdue(context, make_push_monitor, fetch_results):
    monitor = await make_push_monitor(last_status="up", last_checked_at=utcnow() - timedelta(seconds=85))

    assert await context.heartbeat.check_overdue(monitor) is None
    assert await fetch_results(monitor.id) == []


@pytest.mark.asyncio
async def test_never_seen_monitor_is_exempt(context, make_push_monitor, fetch_monitor, fetch_results):
    monitor = await make_push_monitor()

    assert context.heartbeat.is_overdue(monitor, utcnow() + timedelta(days=30)) is False
    assert await context.heartbeat.check_overdue(monitor) is None
    assert (await fetch_monitor(monitor.id)).last_status == "unknown"
    assert await fetch_results(monitor.id) == []


@pytest.mark.asyncio
async def test_already_down_is_not_recorded_again(context, notifier, make_push_monitor, fetch_results):
    monitor = await make_push_monitor(last_status="down", last_checked_at=utcnow() - timedelta(hours=2))

    assert await context.heartbeat.check_overdue(monitor) is None
    assert await fetch_results(monitor.id) == []
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_grace_period_uses_interval(context):
    assert context.heartbeat.grace_period(Monitor(interval=300)) == timedelta(seconds=330)
    assert context.heartbeat.grace_period(Monitor(interval=None)) == timedelta(seconds=90)
    # Zero is a real interval, not a missing one
    assert context.heartbeat.grace_period(Monitor(interval=0)) == timedelta(seconds=30)


# Heartbeat processing

@pytest.mark.asyncio
async def test_heartbeat_marks_up(context, notifier, make_push_monitor, make_channel, fetch_monitor, fetch_results):
    monitor = await make_push_monitor()
    await make_channel(monitor)

    outcome = await context.heartbeat.process_heartbeat("tok-123", ping=15)
    await context.dispatcher.drain()

    assert outcome.previous == "unknown"
    assert outcome.transitioned is True
    stored = await fetch_monitor(monitor.id)
    assert stored.last_status == "up"
    assert stored.last_checked_at is not None
    results = await fetch_results(monitor.id)
    assert [(r.status, r.response_time_ms) for r in results] == [("up", 15)]
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_heartbeat_can_report_down(context, make_push_monitor, fetch_results):
    monitor = await make_push_monitor(last_status="up", last_checked_at=utcnow())

    outcome = await context.heartbeat.process_heartbeat("tok-123", status="down", message="disk full")

    assert outcome.transitioned is True
    assert [(r.status, r.message) for r in await fetch_results(monitor.id)] == [("down", "disk full")]


@pytest.mark.asyncio
async def test_heartbeat_recovers_overdue_monitor(context, make_push_monitor, fetch_monitor):
    monitor = await make_push_monitor(last_status="down", last_checked_at=utcnow() - timedelta(hours=1))

    outcome = await context.heartbeat.process_heartbeat("tok-123")

    assert outcome.transitioned is True
    stored = await fetch_monitor(monitor.id)
    assert stored.last_status == "up"
    assert context.heartbeat.is_overdue(stored) is False


@pytest.mark.asyncio
async def test_unknown_token(context, make_push_monitor):
    await make_push_monitor()
    with pytest.raises(InvalidHeartbeatToken):
        await context.heartbeat.process_heartbeat("nope")
    with pytest.raises(InvalidHeartbeatToken):
        await context.heartbeat.process_heartbeat("")


@pytest.mark.asyncio
async def test_unrecognised_status_is_rejected(context, make_push_monitor, fetch_monitor, fetch_results):
    monitor = await make_push_monitor(last_status="up", last_checked_at=utcnow())

    with pytest.raises(InvalidHeartbeatStatus):
        await context.heartbeat.process_heartbeat("tok-123", status="sideways")
    with pytest.raises(InvalidHeartbeatStatus):
        await context.heartbeat.process_heartbeat("tok-123", status="unknown")

    assert await fetch_results(monitor.id) == []
    assert (await fetch_monitor(monitor.id)).last_status == "up"


# Ingress endpoint

@pytest.mark.asyncio
async def test_push_endpoint_accepts_get_and_post(client, make_push_monitor, fetch_results):
    monitor = await make_push_monitor()

    first = await client.get("/api/push/tok-123")
    second = await client.post("/api/push/tok-123", params={"status": "down", "msg": "job failed", "ping": 3})

    assert first.status_code == 200
    assert first.json() == {"ok": True}
    assert second.status_code == 200
    results = await fetch_results(monitor.id)
    assert [(r.status, r.message, r.response_time_ms) for r in results] == [
        ("up", "", None),
        ("down", "job failed", 3),
    ]


@pytest.mark.asyncio
async def test_push_endpoint_unknown_token(client, make_push_monitor):
    await make_push_monitor()
    response = await client.get("/api/push/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Monitor not found"


@pytest.mark.parametrize("params", [{"status": "sideways"}, {"ping": -1}])
@pytest.mark.asyncio
async def test_push_endpoint_validates_query(client, make_push_monitor, fetch_results, params):
    monitor = await make_push_monitor()
    response = await client.get("/api/push/tok-123", params=params)
    assert response.status_code == 422
    assert await fetch_results(monitor.id) == []


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["scheduler_running"] is False
