"""DNS probe - hostname resolution."""
import asyncio
import socket

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult, Stopwatch


class DnsProbe(Probe):
    """Succeeds iff the target hostname resolves to at least one address."""

    monitor_types = (MonitorType.DNS,)

    async def check(self, monitor: Monitor) -> ProbeResult:
        hostname = (monitor.target or "").strip()
        if not hostname:
            return ProbeResult.failed("Invalid target: hostname required")

        timeout = self.timeout_for(monitor)
        loop = asyncio.get_running_loop()
        watch = Stopwatch()
        try:
            infos = await asyncio.wait_for(
                loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return ProbeResult.failed(f"Lookup timeout after {timeout:g}s", watch.elapsed_ms)
        except (socket.gaierror, UnicodeError) as e:
            return ProbeResult.failed(f"Lookup failed: {e}", watch.elapsed_ms)

        response_time = watch.elapsed_ms
        addresses = sorted({info[4][0] for info in infos})
        if not addresses:
            return ProbeResult.failed("No IP addresses found", response_time)

        return ProbeResult.ok(
            f"Resolved {len(addresses)} IPs: {', '.join(addresses)}",
            response_time,
            addresses=addresses,
        )
