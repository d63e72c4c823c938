"""Channel configuration blobs, one schema per notifier type."""
from typing import List, Union

from pydantic import BaseModel, Field, field_validator


class WebhookChannelConfig(BaseModel):
    """Generic JSON webhook."""
    url: str = Field(..., min_length=1)


class EmailChannelConfig(BaseModel):
    """SMTP settings and recipients."""
    host: str = Field(..., min_length=1)
    port: int = 587
    username: str = ""
    password: str = ""
    to: List[str] = Field(..., min_length=1)
    from_address: str = Field("", alias="from")
    use_tls: bool = True  # STARTTLS

    @field_validator("to", mode="before")
    @classmethod
    def split_recipients(cls, value: Union[str, List[str]]) -> List[str]:
        """Accept a comma-separated string as well as a list."""
        if isinstance(value, str):
            value = value.split(",")
        return [addr.strip() for addr in value if addr and addr.strip()]


class DiscordChannelConfig(BaseModel):
    """Discord incoming webhook."""
    webhook_url: str = Field(..., min_length=1)


class TelegramChannelConfig(BaseModel):
    """Telegram Bot API credentials and target chat."""
    bot_token: str = Field(..., min_length=1)
    chat_id: Union[int, str]
