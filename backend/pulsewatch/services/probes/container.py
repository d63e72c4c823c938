"""Container-runtime probe - is the named container running?"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import docker
from docker.errors import DockerException, NotFound

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult, Stopwatch

logger = logging.getLogger(__name__)

LOCAL_TARGETS = ("", "local")


def default_client_factory(host: Optional[str], timeout: int) -> docker.DockerClient:
    """Local daemon from the environment, or an explicit daemon URL."""
    if host is None:
        return docker.from_env(timeout=timeout)
    return docker.DockerClient(base_url=host, timeout=timeout)


class DockerProbe(Probe):
    """Inspect ``monitor.container`` on the daemon named by ``monitor.target``.

    ``target`` is empty or ``local`` for the local daemon, otherwise a daemon
    URL such as ``tcp://192.168.1.100:2375`` or ``unix:///var/run/docker.sock``.
    """

    monitor_types = (MonitorType.DOCKER,)

    def __init__(self, client_factory: Callable[[Optional[str], int], Any] = default_client_factory):
        self._client_factory = client_factory

    def _inspect(self, host: Optional[str], container: str, timeout: int) -> Dict[str, Any]:
        """Blocking inspect call; runs in the default executor."""
        client = self._client_factory(host, timeout)
        try:
            return client.containers.get(container).attrs
        finally:
            client.close()

    async def check(self, monitor: Monitor) -> ProbeResult:
        container = (monitor.container or "").strip()
        if not container:
            return ProbeResult.failed("Container name/id required")

        target = (monitor.target or "").strip()
        host = None if target.lower() in LOCAL_TARGETS else target
        timeout = int(self.timeout_for(monitor))

        watch = Stopwatch()
        loop = asyncio.get_running_loop()
        try:
            attrs = await asyncio.wait_for(
                loop.run_in_executor(None, self._inspect, host, container, timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return ProbeResult.failed(f"Inspect timeout after {timeout}s", watch.elapsed_ms)
        except NotFound:
            return ProbeResult.failed(f"Container '{container}' not found", watch.elapsed_ms)
        except (DockerException, OSError) as e:
            return ProbeResult.failed(f"Failed to inspect container: {e}", watch.elapsed_ms)

        response_time = watch.elapsed_ms
        state = attrs.get("State") or {}
        status = state.get("Status", "unknown")
        metadata = {
            "state": status,
            "image": (attrs.get("Config") or {}).get("Image"),
            "created": attrs.get("Created"),
        }

        if not state.get("Running"):
            return ProbeResult(False, response_time, f"Container is not running (status: {status})", metadata)
        return ProbeResult(True, response_time, f"Container is {status}", metadata)
