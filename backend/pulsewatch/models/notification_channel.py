"""Notification channel model and the monitor subscription table."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Table
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class ChannelType(str, enum.Enum):
    """Closed set of notifier back-ends."""
    WEBHOOK = "webhook"
    EMAIL = "email"
    DISCORD = "discord"
    TELEGRAM = "telegram"


# Junction table for many-to-many relationship between monitors and channels
subscriptions = Table(
    "subscriptions",
    Base.metadata,
    Column("monitor_id", Integer, ForeignKey("monitors.id", ondelete="CASCADE"), primary_key=True),
    Column("channel_id", Integer, ForeignKey("notification_channels.id", ondelete="CASCADE"), primary_key=True),
)


class NotificationChannel(Base):
    """A configured destination for transition notifications."""

    __tablename__ = "notification_channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # ChannelType value
    config = Column(Text, nullable=True)  # JSON blob, parsed only by the matching notifier
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationship to monitors via junction table
    monitors = relationship("Monitor", secondary=subscriptions, back_populates="channels")
