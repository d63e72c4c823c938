"""Email notifier - plain-text alerts via SMTP."""
import asyncio
import logging
import smtplib
import ssl
from email.mime.text import MIMEText
from typing import Callable

from ...exceptions import NotificationFailure
from ...models import ChannelType
from ...schemas.channels import EmailChannelConfig
from .base import DEFAULT_SEND_TIMEOUT, Notifier, NotificationMessage

logger = logging.getLogger(__name__)


class EmailNotifier(Notifier):
    """Sends one plain-text message per status change.

    smtplib is blocking, so the SMTP session runs in the default executor.
    """

    channel_type = ChannelType.EMAIL
    config_schema = EmailChannelConfig

    def __init__(self, timeout: float = DEFAULT_SEND_TIMEOUT, smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP):
        self.timeout = timeout
        self._smtp_factory = smtp_factory

    def build_subject(self, message: NotificationMessage) -> str:
        return f"[PulseWatch] Monitor {message.monitor_name} is {message.status.upper()}"

    def build_body(self, message: NotificationMessage) -> str:
        lines = [
            f"Monitor: {message.monitor_name}",
            f"Target: {message.target}",
            f"Status: {message.status.upper()}",
            f"Time: {message.timestamp}",
        ]
        if message.message:
            lines.append(f"Message: {message.message}")
        lines.append("")
        lines.append("--")
        lines.append("PulseWatch Monitoring")
        return "\n".join(lines)

    def build_mime(self, config: EmailChannelConfig, message: NotificationMessage) -> MIMEText:
        msg = MIMEText(self.build_body(message), "plain")
        msg["Subject"] = self.build_subject(message)
        msg["From"] = config.from_address or config.username
        msg["To"] = ", ".join(config.to)
        return msg

    async def deliver(self, config: EmailChannelConfig, message: NotificationMessage):
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_blocking, config, self.build_mime(config, message))

    def _send_blocking(self, config: EmailChannelConfig, msg: MIMEText):
        from_addr = config.from_address or config.username
        try:
            with self._smtp_factory(config.host, config.port, timeout=self.timeout) as server:
                if config.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if config.username and config.password:
                    server.login(config.username, config.password)
                server.sendmail(from_addr, config.to, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            raise NotificationFailure(f"SMTP authentication failed for user '{config.username}': {e}") from e
        except smtplib.SMTPRecipientsRefused as e:
            raise NotificationFailure(f"Recipients refused by server: {e}") from e
        except smtplib.SMTPSenderRefused as e:
            raise NotificationFailure(f"Sender address refused: {e}") from e
        except smtplib.SMTPException as e:
            raise NotificationFailure(f"SMTP error: {type(e).__name__}: {e}") from e
        except OSError as e:
            raise NotificationFailure(f"Could not reach {config.host}:{config.port}: {e}") from e

        logger.info(f"Email sent to {len(config.to)} recipient(s): {msg['Subject']}")
