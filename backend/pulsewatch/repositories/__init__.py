"""Repositories - the persistence contract the engine talks to."""
from .monitors import MonitorRepository
from .results import CheckResultRepository
from .channels import ChannelRepository

__all__ = ["MonitorRepository", "CheckResultRepository", "ChannelRepository"]
