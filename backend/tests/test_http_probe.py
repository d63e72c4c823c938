"""HTTP probe: status matching, content checks and transport errors."""
import json

import httpx
import pytest

from pulsewatch.models import Monitor, MonitorType
from pulsewatch.services.probes import HttpProbe
from pulsewatch.services.probes.http import normalize_json_path, status_matches, stringify_json_value


def _monitor(**fields) -> Monitor:
    fields.setdefault("id", 1)
    fields.setdefault("name", "api")
    fields.setdefault("type", MonitorType.HTTP.value)
    fields.setdefault("target", "http://example/health")
    fields.setdefault("timeout", 5)
    return Monitor(**fields)


def _probe(handler) -> HttpProbe:
    return HttpProbe(transport=httpx.MockTransport(handler))


def _respond(status_code: int, **kwargs):
    def handler(request):
        return httpx.Response(status_code, **kwargs)
    return handler


@pytest.mark.parametrize("code", [200, 201, 204, 299])
@pytest.mark.asyncio
async def test_2xx_wildcard_accepts_success_codes(code):
    result = await _probe(_respond(code)).check(_monitor(expected_status="2xx"))
    assert result.success is True
    assert result.metadata["status_code"] == code


@pytest.mark.parametrize("code", [300, 301, 404, 500, 503])
@pytest.mark.asyncio
async def test_2xx_wildcard_rejects_other_codes(code):
    def handler(request):
        # No Location header, so redirects are not followed
        return httpx.Response(code)

    result = await _probe(handler).check(_monitor(expected_status="2xx"))
    assert result.success is False
    assert result.message == f"Unexpected status: {code} (expected 2xx)"


@pytest.mark.asyncio
async def test_connection_error_fails_without_raising():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await _probe(handler).check(_monitor(expected_status="2xx"))
    assert result.success is False
    assert result.message.startswith("Connection error")


@pytest.mark.asyncio
async def test_timeout_fails_with_message():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = await _probe(handler).check(_monitor(timeout=3))
    assert result.success is False
    assert result.message == "Request timeout after 3s"


@pytest.mark.asyncio
async def test_default_expected_status_is_exact_200():
    ok = await _probe(_respond(200)).check(_monitor())
    created = await _probe(_respond(201)).check(_monitor())
    assert ok.success is True
    assert ok.message == "HTTP 200 OK"
    assert created.success is False


@pytest.mark.asyncio
async def test_server_error_against_exact_200():
    result = await _probe(_respond(500)).check(_monitor(expected_status="200"))
    assert result.success is False
    assert "500" in result.message


@pytest.mark.asyncio
async def test_method_body_and_headers_are_sent():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = request.content
        seen["headers"] = request.headers
        return httpx.Response(200)

    monitor = _monitor(
        method="post",
        body='{"ping": true}',
        headers=json.dumps({"X-Token": "abc"}),
    )
    result = await HttpProbe(user_agent="Tester/2", transport=httpx.MockTransport(handler)).check(monitor)

    assert result.success is True
    assert seen["method"] == "POST"
    assert seen["body"] == b'{"ping": true}'
    assert seen["headers"]["x-token"] == "abc"
    assert seen["headers"]["user-agent"] == "Tester/2"


@pytest.mark.asyncio
async def test_malformed_headers_are_ignored():
    result = await _probe(_respond(200)).check(_monitor(headers="{not json"))
    assert result.success is True


@pytest.mark.asyncio
async def test_keyword_present():
    monitor = _monitor(type=MonitorType.HTTP_KEYWORD.value, keyword="healthy")
    result = await _probe(_respond(200, text="status: healthy")).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_keyword_missing():
    monitor = _monitor(type=MonitorType.HTTP_KEYWORD.value, keyword="healthy")
    result = await _probe(_respond(200, text="status: degraded")).check(monitor)
    assert result.success is False
    assert result.message == "Keyword 'healthy' not found"


@pytest.mark.asyncio
async def test_content_checks_skipped_when_status_fails():
    monitor = _monitor(type=MonitorType.HTTP_KEYWORD.value, keyword="healthy")
    result = await _probe(_respond(500, text="nope")).check(monitor)
    assert result.success is False
    assert result.message.startswith("Unexpected status")


@pytest.mark.asyncio
async def test_json_path_value_match():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="$.data.status", json_value="ok")
    result = await _probe(_respond(200, json={"data": {"status": "ok"}})).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_json_path_value_mismatch():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="data.status", json_value="ok")
    result = await _probe(_respond(200, json={"data": {"status": "failing"}})).check(monitor)
    assert result.success is False
    assert result.message == "JSON value mismatch: expected 'ok', got 'failing'"


@pytest.mark.asyncio
async def test_json_path_missing():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="$.data.status")
    result = await _probe(_respond(200, json={"other": 1})).check(monitor)
    assert result.success is False
    assert "not found" in result.message


@pytest.mark.asyncio
async def test_json_path_without_value_only_requires_presence():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="$.items[0].id")
    result = await _probe(_respond(200, json={"items": [{"id": 7}]})).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_json_path_with_dot_index():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="data.items.0.id", json_value="7")
    result = await _probe(_respond(200, json={"data": {"items": [{"id": 7}]}})).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_json_integral_float_compares_as_integer():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="stats.ratio", json_value="1")
    response = _respond(200, content=b'{"stats": {"ratio": 1.0}}', headers={"content-type": "application/json"})
    result = await _probe(response).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_content_fields_ignored_on_plain_http():
    monitor = _monitor(keyword="healthy", json_path="$.status", json_value="ok")
    result = await _probe(_respond(200, text="<html>degraded</html>")).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_json_check_ignored_on_keyword_monitor():
    monitor = _monitor(type=MonitorType.HTTP_KEYWORD.value, keyword="ok", json_path="$.missing")
    result = await _probe(_respond(200, json={"status": "ok"})).check(monitor)
    assert result.success is True


@pytest.mark.asyncio
async def test_json_check_on_non_json_body():
    monitor = _monitor(type=MonitorType.HTTP_JSON.value, json_path="$.status")
    result = await _probe(_respond(200, text="<html></html>")).check(monitor)
    assert result.success is False
    assert result.message == "Response is not valid JSON"


@pytest.mark.asyncio
async def test_invalid_url():
    result = await HttpProbe().check(_monitor(target="not a url"))
    assert result.success is False


def test_status_matches():
    assert status_matches(204, "2xx")
    assert status_matches(301, "3XX")
    assert not status_matches(301, "2xx")
    assert status_matches(418, "418")
    assert status_matches(200, "")
    assert not status_matches(201, "")


def test_stringify_json_value():
    assert stringify_json_value(True) == "true"
    assert stringify_json_value(None) == "null"
    assert stringify_json_value(3) == "3"
    assert stringify_json_value({"a": 1}) == '{"a":1}'


def test_stringify_json_floats():
    assert stringify_json_value(1.0) == "1"
    assert stringify_json_value(-3.0) == "-3"
    assert stringify_json_value(2.5) == "2.5"
    assert stringify_json_value(1e-07) == "0.0000001"


def test_normalize_json_path():
    assert normalize_json_path("data.items.0.id") == "data.items[0].id"
    assert normalize_json_path("items.12") == "items[12]"
    assert normalize_json_path("0.name") == "[0].name"
    assert normalize_json_path("$.items[0].id") == "$.items[0].id"
    assert normalize_json_path("data.v2.status") == "data.v2.status"
