"""Database models."""
from .notification_channel import NotificationChannel, ChannelType, subscriptions
from .monitor import Monitor, MonitorType, Status
from .check_result import CheckResult
from .notification_log import NotificationLog

__all__ = [
    "Monitor",
    "MonitorType",
    "Status",
    "CheckResult",
    "NotificationChannel",
    "ChannelType",
    "NotificationLog",
    "subscriptions",
]
