"""Probe abstraction - one protocol-specific health check per monitor type."""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ...models import Monitor, MonitorType

DEFAULT_TIMEOUT_SECONDS = 10


@dataclass
class ProbeResult:
    """Outcome of a single check."""
    success: bool
    response_time_ms: int = 0
    message: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, response_time_ms: int = 0, **metadata: Any) -> "ProbeResult":
        return cls(True, response_time_ms, message, metadata)

    @classmethod
    def failed(cls, message: str, response_time_ms: int = 0, **metadata: Any) -> "ProbeResult":
        return cls(False, response_time_ms, message, metadata)


class Probe:
    """Base class for protocol probes.

    Subclasses list the monitor types they serve in ``monitor_types`` and
    implement ``check``. A probe is stateless, issues one attempt, and should
    turn expected network errors into a failed ProbeResult. Anything it lets
    escape is converted by the checker.
    """

    monitor_types: Tuple[MonitorType, ...] = ()

    async def check(self, monitor: Monitor) -> ProbeResult:
        raise NotImplementedError

    @staticmethod
    def timeout_for(monitor: Monitor) -> float:
        return float(monitor.timeout or DEFAULT_TIMEOUT_SECONDS)


class Stopwatch:
    """Measures elapsed wall time in whole milliseconds."""

    def __init__(self):
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)


def split_host_port(target: str, default_port: Optional[int] = None) -> Tuple[str, int]:
    """Parse ``host:port``, ``[v6]:port`` or a bare host when a default port is given.

    Raises ValueError for a missing or malformed port.
    """
    target = target.strip()
    if "://" in target:
        target = target.split("://", 1)[1]
    target = target.split("/", 1)[0]

    if target.startswith("["):
        host, _, rest = target[1:].partition("]")
        port_str = rest[1:] if rest.startswith(":") else ""
    elif target.count(":") == 1:
        host, port_str = target.split(":", 1)
    else:
        host, port_str = target, ""

    if not host:
        raise ValueError(f"missing host in '{target}'")
    if not port_str:
        if default_port is None:
            raise ValueError(f"missing port in '{target}'")
        return host, default_port

    port = int(port_str)
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {port}")
    return host, port
