"""WebSocket probe - opening handshake only."""
import asyncio
from typing import List

import aiohttp

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult, Stopwatch


def _status_trace(statuses: List[int]) -> aiohttp.TraceConfig:
    """Collect the HTTP status of every response the session receives."""

    async def on_request_end(session, context, params):
        statuses.append(params.response.status)

    trace = aiohttp.TraceConfig()
    trace.on_request_end.append(on_request_end)
    return trace


class WebSocketProbe(Probe):
    """Succeeds iff the WebSocket opening handshake completes."""

    monitor_types = (MonitorType.WS,)

    def __init__(self, user_agent: str = "PulseWatch/1.0"):
        self.user_agent = user_agent

    async def check(self, monitor: Monitor) -> ProbeResult:
        timeout = self.timeout_for(monitor)
        statuses: List[int] = []
        watch = Stopwatch()
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=timeout),
                trace_configs=[_status_trace(statuses)],
            ) as session:
                # ssl=False: self-signed endpoints are still monitored
                async with session.ws_connect(
                    monitor.target,
                    ssl=False,
                    headers={"User-Agent": self.user_agent},
                    autoping=False,
                ):
                    response_time = watch.elapsed_ms
        except aiohttp.WSServerHandshakeError as e:
            return ProbeResult.failed(
                f"Handshake rejected: {e.message} (HTTP {e.status})",
                watch.elapsed_ms,
                status_code=e.status,
            )
        except asyncio.TimeoutError:
            return ProbeResult.failed(f"Handshake timeout after {timeout:g}s", watch.elapsed_ms)
        except aiohttp.InvalidURL as e:
            return ProbeResult.failed(f"Invalid URL: {e}")
        except (aiohttp.ClientError, OSError) as e:
            return ProbeResult.failed(f"Connection failed: {e}", watch.elapsed_ms)

        # Last response is the handshake after any redirects
        status = statuses[-1] if statuses else None
        return ProbeResult.ok(f"Connected (HTTP {status})", response_time, status_code=status)
