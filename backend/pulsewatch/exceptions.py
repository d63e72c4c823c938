"""Error taxonomy for the monitoring engine.

None of these abort the scheduler. Probe failures become "down" results,
persistence and notification failures are logged. Heartbeat ingress reports
an unknown token as not found and a status other than up/down as invalid.
"""


class PulseWatchError(Exception):
    """Base class for all engine errors."""


class ProbeFailure(PulseWatchError):
    """A network/protocol error or check mismatch inside a probe."""


class PersistenceFailure(PulseWatchError):
    """A result or monitor write (or read) failed."""


class NotificationFailure(PulseWatchError):
    """Delivery to a single notification channel failed."""


class ChannelConfigError(NotificationFailure):
    """A channel's configuration blob could not be parsed or validated."""


class InvalidHeartbeatToken(PulseWatchError):
    """No monitor is registered for the pushed heartbeat token."""

    def __init__(self, token: str):
        super().__init__("invalid push token")
        self.token = token


class InvalidHeartbeatStatus(PulseWatchError):
    """A pushed heartbeat carried a status other than up or down."""

    def __init__(self, status: str):
        super().__init__(f"invalid heartbeat status: {status!r}")
        self.status = status
