"""TCP probe - connection establishment only."""
import asyncio

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult, Stopwatch, split_host_port


class TcpProbe(Probe):
    """Succeeds iff a TCP connection to ``host:port`` completes within the timeout."""

    monitor_types = (MonitorType.TCP,)

    async def check(self, monitor: Monitor) -> ProbeResult:
        try:
            host, port = split_host_port(monitor.target)
        except ValueError as e:
            return ProbeResult.failed(f"Invalid target: {e}")

        timeout = self.timeout_for(monitor)
        watch = Stopwatch()
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
        except asyncio.TimeoutError:
            return ProbeResult.failed(f"Connection timeout after {timeout:g}s", watch.elapsed_ms)
        except OSError as e:
            return ProbeResult.failed(f"Connection failed: {e}", watch.elapsed_ms)

        response_time = watch.elapsed_ms
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass  # peer reset while closing; the connection itself succeeded

        return ProbeResult.ok("Connection established", response_time)
