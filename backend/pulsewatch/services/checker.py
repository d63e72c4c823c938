"""Checker service - maps monitor types to probes and runs single checks."""
import asyncio
import logging
from typing import Dict, Iterable, Optional

from ..exceptions import ProbeFailure
from ..models import Monitor, MonitorType
from .probes import (
    Probe,
    ProbeResult,
    HttpProbe,
    TcpProbe,
    PingProbe,
    DnsProbe,
    WebSocketProbe,
    SteamProbe,
    DockerProbe,
)
from .probes.base import Stopwatch

logger = logging.getLogger(__name__)

# Outer guard on top of each probe's own timeout handling
CHECK_TIMEOUT_SLACK_SECONDS = 5


def default_probes(user_agent: str = "PulseWatch/1.0") -> Iterable[Probe]:
    """One probe for every active monitor type."""
    return [
        HttpProbe(user_agent=user_agent),
        TcpProbe(),
        PingProbe(),
        DnsProbe(),
        WebSocketProbe(user_agent=user_agent),
        SteamProbe(),
        DockerProbe(),
    ]


class CheckerService:
    """Dispatch table from monitor type to probe.

    Adding a protocol means registering a probe for a new MonitorType;
    callers only ever go through ``check``.
    """

    def __init__(self, probes: Optional[Iterable[Probe]] = None):
        self._probes: Dict[MonitorType, Probe] = {}
        for probe in probes if probes is not None else default_probes():
            self.register(probe)

    def register(self, probe: Probe):
        for monitor_type in probe.monitor_types:
            self._probes[MonitorType(monitor_type)] = probe

    def probe_for(self, monitor_type: str) -> Optional[Probe]:
        try:
            return self._probes.get(MonitorType(monitor_type))
        except ValueError:
            return None

    def supports(self, monitor_type: str) -> bool:
        return self.probe_for(monitor_type) is not None

    async def check(self, monitor: Monitor) -> ProbeResult:
        """Run the monitor's probe once. Never raises."""
        probe = self.probe_for(monitor.type)
        if probe is None:
            return ProbeResult.failed(f"Unsupported monitor type: {monitor.type}")

        guard = probe.timeout_for(monitor) + CHECK_TIMEOUT_SLACK_SECONDS
        watch = Stopwatch()
        try:
            return await asyncio.wait_for(probe.check(monitor), timeout=guard)
        except asyncio.TimeoutError:
            return ProbeResult.failed(f"Check timeout after {guard:g}s", watch.elapsed_ms)
        except ProbeFailure as e:
            return ProbeResult.failed(str(e), watch.elapsed_ms)
        except Exception as e:
            logger.exception(f"Probe {type(probe).__name__} crashed for monitor {monitor.id}")
            return ProbeResult.failed(f"Check error: {type(e).__name__}: {e}", watch.elapsed_ms)
