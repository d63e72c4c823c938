"""HTTP probe - status code, keyword and JSON path checks."""
import json
import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from cryptography import x509
from jsonpath_ng import parse as parse_jsonpath
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError

from ...exceptions import ProbeFailure
from ...models import Monitor, MonitorType
from ...utils.timeutils import to_naive_utc
from .base import Probe, ProbeResult, Stopwatch

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_STATUS = "200"

# "2xx", "3xx", ... match a whole status class
STATUS_CLASS_PATTERN = re.compile(r"^([1-5])xx$", re.IGNORECASE)

# Dot-style array index, as in "data.items.0.id"
DOT_INDEX_PATTERN = re.compile(r"(^|\.)(\d+)(?=\.|$)")


def status_matches(status_code: int, expected: str) -> bool:
    """Compare a response code with an exact code or an ``Nxx`` class."""
    expected = (expected or DEFAULT_EXPECTED_STATUS).strip()
    match = STATUS_CLASS_PATTERN.match(expected)
    if match:
        return status_code // 100 == int(match.group(1))
    return str(status_code) == expected


def normalize_json_path(path: str) -> str:
    """Rewrite numeric dot segments (``items.0.id``) as subscripts (``items[0].id``)."""
    return DOT_INDEX_PATTERN.sub(lambda m: f"[{m.group(2)}]", path.strip())


def stringify_json_value(value: Any) -> str:
    """Render a JSON value the way it reads in the document."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        # 1.0 -> "1", 1e-07 -> "0.0000001"
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


class HttpProbe(Probe):
    """Issue one request and validate the response.

    Checks in order:
    1. Status code against ``expected_status`` (default "200", "2xx" wildcard)
    2. ``http_keyword``: keyword present in the body
    3. ``http_json``: value at ``json_path`` exists, optionally equal to ``json_value``

    Content checks only run when the status check passed.
    """

    monitor_types = (MonitorType.HTTP, MonitorType.HTTP_KEYWORD, MonitorType.HTTP_JSON)

    def __init__(self, user_agent: str = "PulseWatch/1.0", transport: Optional[httpx.AsyncBaseTransport] = None):
        self.user_agent = user_agent
        # Injected transport lets tests answer without a network
        self._transport = transport

    def _build_headers(self, monitor: Monitor) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if monitor.headers:
            try:
                custom = json.loads(monitor.headers)
            except json.JSONDecodeError:
                logger.debug(f"Ignoring malformed headers for monitor {monitor.name}")
                custom = None
            if isinstance(custom, dict):
                headers.update({str(k): str(v) for k, v in custom.items()})
        return headers

    async def check(self, monitor: Monitor) -> ProbeResult:
        timeout = self.timeout_for(monitor)
        method = (monitor.method or "GET").upper()
        expected = monitor.expected_status or DEFAULT_EXPECTED_STATUS
        watch = Stopwatch()

        try:
            # Disable SSL verification to handle self-signed certificates
            async with httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=True,
                verify=False,
                transport=self._transport,
            ) as client:
                async with client.stream(
                    method,
                    monitor.target,
                    content=monitor.body or None,
                    headers=self._build_headers(monitor),
                ) as response:
                    body = await response.aread()
                    cert_expiry = self._peer_certificate_expiry(response)
        except httpx.TimeoutException:
            return ProbeResult.failed(f"Request timeout after {timeout:g}s", watch.elapsed_ms)
        except httpx.ConnectError as e:
            return ProbeResult.failed(f"Connection error: {e}", watch.elapsed_ms)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            return ProbeResult.failed(f"Invalid URL: {e}")
        except httpx.HTTPError as e:
            return ProbeResult.failed(f"Request failed: {type(e).__name__}: {e}", watch.elapsed_ms)

        response_time = watch.elapsed_ms
        metadata: Dict[str, Any] = {"status_code": response.status_code}
        if cert_expiry is not None:
            metadata["cert_expiry"] = cert_expiry

        if not status_matches(response.status_code, expected):
            return ProbeResult(
                False,
                response_time,
                f"Unexpected status: {response.status_code} (expected {expected})",
                metadata,
            )

        try:
            self._check_content(monitor, response, body)
        except ProbeFailure as e:
            return ProbeResult(False, response_time, str(e), metadata)

        return ProbeResult(True, response_time, f"HTTP {response.status_code} {response.reason_phrase}".strip(), metadata)

    def _check_content(self, monitor: Monitor, response: httpx.Response, body: bytes):
        """Raise ProbeFailure when a configured keyword or JSON check does not hold."""
        if monitor.type == MonitorType.HTTP_KEYWORD.value and monitor.keyword:
            if monitor.keyword not in response.text:
                raise ProbeFailure(f"Keyword '{monitor.keyword}' not found")

        if monitor.type == MonitorType.HTTP_JSON.value and monitor.json_path:
            try:
                document = json.loads(body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise ProbeFailure("Response is not valid JSON")

            try:
                expression = parse_jsonpath(normalize_json_path(monitor.json_path))
            except (JsonPathLexerError, JsonPathParserError) as e:
                raise ProbeFailure(f"Invalid JSON path '{monitor.json_path}': {e}")

            matches = expression.find(document)
            if not matches:
                raise ProbeFailure(f"JSON path '{monitor.json_path}' not found")

            actual = stringify_json_value(matches[0].value)
            if monitor.json_value and actual != monitor.json_value:
                raise ProbeFailure(
                    f"JSON value mismatch: expected '{monitor.json_value}', got '{actual}'"
                )

    def _peer_certificate_expiry(self, response: httpx.Response) -> Optional[datetime]:
        """Read notAfter from the peer certificate of a TLS response, if any."""
        stream = response.extensions.get("network_stream")
        if stream is None:
            return None
        ssl_object = stream.get_extra_info("ssl_object")
        if ssl_object is None:
            return None

        # getpeercert() is empty when not verifying, the DER form is not
        cert_der = ssl_object.getpeercert(binary_form=True)
        if not cert_der:
            return None
        try:
            cert = x509.load_der_x509_certificate(cert_der)
        except ValueError as e:
            logger.debug(f"Could not parse peer certificate: {e}")
            return None
        return to_naive_utc(cert.not_valid_after_utc)
