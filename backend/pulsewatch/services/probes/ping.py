"""ICMP probe using the system ping command."""
import asyncio
import logging
import re
from typing import Dict

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult

logger = logging.getLogger(__name__)

PING_COUNT = 3

# Example line: "64 bytes from 8.8.8.8: icmp_seq=1 ttl=117 time=14.2 ms"
REPLY_PATTERN = re.compile(r'icmp_seq=(\d+).*?time=(\d+\.?\d*)\s*ms')


class PingProbe(Probe):
    """Send a fixed number of echo requests.

    Succeeds unless every packet is lost; the response time is the average
    round trip of the replies. Partial loss is logged but not a failure.
    """

    monitor_types = (MonitorType.PING,)

    async def check(self, monitor: Monitor) -> ProbeResult:
        target = (monitor.target or "").strip()
        if not target or target.startswith("-"):
            return ProbeResult.failed(f"Invalid target: '{target}'")

        timeout = self.timeout_for(monitor)
        deadline = max(int(timeout), 1)

        try:
            # -c: number of echo requests
            # -w: overall deadline in seconds, bounded by the monitor timeout
            proc = await asyncio.create_subprocess_exec(
                "ping", "-c", str(PING_COUNT), "-w", str(deadline), target,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return ProbeResult.failed(f"Failed to run ping: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=deadline + 2)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return ProbeResult.failed("Ping timeout")

        replies: Dict[int, float] = {}
        for match in REPLY_PATTERN.finditer(stdout.decode(errors="replace")):
            replies[int(match.group(1))] = float(match.group(2))

        received = min(len(replies), PING_COUNT)
        loss = 100.0 * (PING_COUNT - received) / PING_COUNT

        if received == 0:
            error = stderr.decode(errors="replace").strip()
            message = "100% packet loss"
            if error:
                message = f"{message} ({error})"
            return ProbeResult.failed(message, packet_loss=100.0)

        avg_rtt = sum(replies.values()) / len(replies)
        if loss > 0:
            logger.warning(f"Partial packet loss for {monitor.name}: {loss:.0f}% ({received}/{PING_COUNT})")

        return ProbeResult.ok(
            f"Avg RTT: {avg_rtt:.1f}ms, Loss: {loss:.2f}%",
            int(round(avg_rtt)),
            packet_loss=loss,
            avg_rtt_ms=avg_rtt,
        )
