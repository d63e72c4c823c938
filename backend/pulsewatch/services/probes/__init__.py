"""Protocol probes."""
from .base import Probe, ProbeResult
from .http import HttpProbe
from .tcp import TcpProbe
from .ping import PingProbe
from .dns import DnsProbe
from .websocket import WebSocketProbe
from .steam import SteamProbe
from .container import DockerProbe

__all__ = [
    "Probe",
    "ProbeResult",
    "HttpProbe",
    "TcpProbe",
    "PingProbe",
    "DnsProbe",
    "WebSocketProbe",
    "SteamProbe",
    "DockerProbe",
]
