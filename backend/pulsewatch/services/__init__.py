"""Services for checking, transition handling, notification and scheduling."""
from .checker import CheckerService
from .dispatcher import NotificationDispatcher, DeliveryResult
from .recorder import ResultRecorder
from .transitions import TransitionProcessor, StatusOutcome
from .heartbeat import HeartbeatService
from .scheduler import SchedulerService

__all__ = [
    "CheckerService",
    "NotificationDispatcher",
    "DeliveryResult",
    "ResultRecorder",
    "TransitionProcessor",
    "StatusOutcome",
    "HeartbeatService",
    "SchedulerService",
]
