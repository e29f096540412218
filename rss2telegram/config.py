"""Configuration management for RSS Telegram Bot."""

import os
from dataclasses import dataclass

DEFAULT_DYNAMODB_TABLE = "rss2telegram-watermarks"
DEFAULT_AWS_REGION = "us-east-1"


class ConfigurationError(ValueError):
    """Raised when a required setting is missing."""


@dataclass
class TelegramConfig:
    """Configuration for Telegram Bot API."""

    bot_token: str
    chat_id: str
    parse_mode: str = "markdown"
    disable_web_page_preview: bool = True
    timeout: int = 30


class Config:
    """Main configuration manager."""

    # Required settings, checked in this order
    REQUIRED_VARIABLES = (
        ("feed_url", "RSS_FEED_URL"),
        ("bot_token", "TELEGRAM_BOT_API_TOKEN"),
        ("chat_id", "TELEGRAM_CHAT_ID"),
    )

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.feed_url = os.getenv("RSS_FEED_URL", "")
        self.bot_token = os.getenv("TELEGRAM_BOT_API_TOKEN", "")
        self.chat_id = os.getenv("TELEGRAM_CHAT_ID", "")
        self.dynamodb_table = os.getenv("DYNAMODB_TABLE", DEFAULT_DYNAMODB_TABLE)
        self.aws_region = os.getenv(
            "CURRENT_AWS_REGION", os.getenv("AWS_DEFAULT_REGION", DEFAULT_AWS_REGION)
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> None:
        """Fail fast on the first missing required setting.

        Raises:
            ConfigurationError: naming the environment variable that is not set
        """
        for attribute, variable in self.REQUIRED_VARIABLES:
            if not getattr(self, attribute).strip():
                raise ConfigurationError(f"environment variable {variable} not set")

    def get_telegram_config(self) -> TelegramConfig:
        """Get Telegram configuration."""
        return TelegramConfig(bot_token=self.bot_token, chat_id=self.chat_id)
