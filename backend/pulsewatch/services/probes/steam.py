"""Steam/Source game server probe via an A2S_INFO query."""
import asyncio
import socket

import a2s

from ...models import Monitor, MonitorType
from .base import Probe, ProbeResult, Stopwatch, split_host_port

DEFAULT_QUERY_PORT = 27015


class SteamProbe(Probe):
    """Succeeds iff the server answers an info query with its metadata."""

    monitor_types = (MonitorType.STEAM,)

    async def check(self, monitor: Monitor) -> ProbeResult:
        try:
            address = split_host_port(monitor.target, default_port=DEFAULT_QUERY_PORT)
        except ValueError as e:
            return ProbeResult.failed(f"Invalid address: {e}")

        timeout = self.timeout_for(monitor)
        watch = Stopwatch()
        try:
            info = await a2s.ainfo(address, timeout=timeout)
        except (asyncio.TimeoutError, socket.timeout):
            return ProbeResult.failed(f"Query timeout after {timeout:g}s", watch.elapsed_ms)
        except (a2s.BrokenMessageError, a2s.BufferExhaustedError) as e:
            return ProbeResult.failed(f"Query failed: malformed response ({e})", watch.elapsed_ms)
        except OSError as e:
            return ProbeResult.failed(f"Query failed: {e}", watch.elapsed_ms)

        return ProbeResult.ok(
            f"{info.server_name} ({info.player_count}/{info.max_players} players)",
            watch.elapsed_ms,
            server_name=info.server_name,
            map=info.map_name,
            players=info.player_count,
            max_players=info.max_players,
            game=info.game,
        )
