"""Heartbeat ingress responses."""
from pydantic import BaseModel


class HeartbeatAck(BaseModel):
    """Acknowledgment returned for an accepted heartbeat."""
    ok: bool = True
