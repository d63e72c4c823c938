"""Monitor model - targets being checked."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow
from .notification_channel import subscriptions


class MonitorType(str, enum.Enum):
    """Closed set of monitor protocols."""
    HTTP = "http"
    HTTP_KEYWORD = "http_keyword"
    HTTP_JSON = "http_json"
    TCP = "tcp"
    PING = "ping"
    DNS = "dns"
    WS = "ws"
    STEAM = "steam"
    DOCKER = "docker"
    PUSH = "push"


class Status(str, enum.Enum):
    """Cached monitor status."""
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


class Monitor(Base):
    """A monitored target plus its protocol parameters and cached status."""

    __tablename__ = "monitors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # MonitorType value
    target = Column(String, nullable=False, default="")  # URL, host:port, hostname, docker host
    interval = Column(Integer, default=60)  # seconds; push grace only
    timeout = Column(Integer, default=10)  # seconds

    # HTTP parameters
    expected_status = Column(String, nullable=True)  # "200", "2xx"
    method = Column(String, nullable=True)
    body = Column(Text, nullable=True)
    headers = Column(Text, nullable=True)  # JSON object

    # Content checks
    keyword = Column(String, nullable=True)
    json_path = Column(String, nullable=True)
    json_value = Column(String, nullable=True)

    container = Column(String, nullable=True)  # docker container name/id
    push_token = Column(String, nullable=True, unique=True, index=True)

    enabled = Column(Boolean, default=True, nullable=False)

    last_status = Column(String, default=Status.UNKNOWN.value, nullable=False)
    last_checked_at = Column(DateTime, nullable=True)
    certificate_expiry = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    results = relationship("CheckResult", back_populates="monitor", cascade="all, delete-orphan")
    channels = relationship("NotificationChannel", secondary=subscriptions, back_populates="monitors")

    @property
    def is_push(self) -> bool:
        return self.type == MonitorType.PUSH.value

    def __repr__(self) -> str:
        return f"<Monitor id={self.id} name={self.name!r} type={self.type} status={self.last_status}>"
