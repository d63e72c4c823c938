"""CheckResult model - append-only history of check outcomes."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class CheckResult(Base):
    """One completed probe, heartbeat or overdue event. Never updated."""

    __tablename__ = "check_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    monitor_id = Column(Integer, ForeignKey("monitors.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False)  # up, down
    response_time_ms = Column(Integer, nullable=True)
    message = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    monitor = relationship("Monitor", back_populates="results")
