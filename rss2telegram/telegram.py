"""Telegram Publisher for RSS Telegram Bot."""

import requests

from .config import TelegramConfig
from .logging_config import create_execution_logger
from .models import FeedItem

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"


class DeliveryError(RuntimeError):
    """A message could not be delivered."""


class TelegramAPIError(DeliveryError):
    """Non-200 response from the Bot API."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"status code: {status_code}, data: {body}")
        self.status_code = status_code
        self.body = body


class TelegramPublisher:
    """Handles publishing messages to Telegram."""

    def __init__(self, config: TelegramConfig, execution_id: str | None = None):
        """Initialize Telegram publisher with configuration."""
        self.config = config
        self.logger = create_execution_logger("telegram_publisher", execution_id)
        self.url = TELEGRAM_API_URL.format(token=config.bot_token, method="sendMessage")
        self.session = requests.Session()

        self.logger.info(
            "TelegramPublisher initialized",
            chat_id=config.chat_id,
            parse_mode=config.parse_mode,
        )

    def format_message(self, title: str, content: str) -> str:
        """
        Format a message for Telegram: bold title, blank line, body.

        Args:
            title: Item title, used verbatim
            content: Rendered (or raw) item content

        Returns:
            Message text
        """
        return f"*{title}*\n\n{content}"

    def deliver(self, item: FeedItem, content: str) -> None:
        """Format and send one feed item.

        Raises:
            DeliveryError: On a non-200 status or a transport failure
        """
        self.send_message(self.format_message(item.title, content))
        self.logger.info(
            "Message sent successfully",
            chat_id=self.config.chat_id,
            item_title=item.title,
        )

    def send_message(self, text: str) -> None:
        """
        Post a form-encoded sendMessage request. No retries are attempted.

        Args:
            text: Message body

        Raises:
            DeliveryError: On a non-200 status or a transport failure
        """
        data = {
            "chat_id": self.config.chat_id,
            "text": text,
            "parse_mode": self.config.parse_mode,
            "disable_web_page_preview": (
                "true" if self.config.disable_web_page_preview else "false"
            ),
        }

        self.logger.debug(
            "Sending message to Telegram API",
            chat_id=self.config.chat_id,
            message_length=len(text),
        )
        try:
            response = self.session.post(
                self.url, data=data, timeout=self.config.timeout
            )
        except requests.RequestException as e:
            # Transport errors embed the request URL, which carries the token
            message = str(e).replace(self.config.bot_token, "<token>")
            self.logger.error(
                f"Error sending message: {message}", chat_id=self.config.chat_id
            )
            raise DeliveryError(message) from e

        if response.status_code != 200:
            self.logger.error(
                f"Telegram API returned status {response.status_code}",
                chat_id=self.config.chat_id,
                status_code=response.status_code,
            )
            raise TelegramAPIError(response.status_code, response.text)
