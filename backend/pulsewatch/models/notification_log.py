"""NotificationLog model - record of attempted channel deliveries."""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey

from ..database import Base
from ..utils.timeutils import utcnow


class NotificationLog(Base):
    """Outcome of sending one transition to one channel."""

    __tablename__ = "notification_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    monitor_id = Column(Integer, ForeignKey("monitors.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("notification_channels.id", ondelete="CASCADE"), nullable=False)
    event = Column(String, nullable=False)  # up, down
    success = Column(Boolean, nullable=False)
    error = Column(String, nullable=True)
    sent_at = Column(DateTime, default=utcnow)
