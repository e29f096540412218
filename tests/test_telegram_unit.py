"""Unit tests for Telegram Publisher."""

from unittest.mock import Mock

import pytest
import requests

from conftest import at, make_item
from rss2telegram.config import TelegramConfig
from rss2telegram.telegram import DeliveryError, TelegramAPIError, TelegramPublisher

TOKEN = "123456:secret-token"


def response(status_code: int, text: str = '{"ok":true}') -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    return resp


class TestTelegramPublisherUnit:
    """Unit tests for TelegramPublisher."""

    def setup_method(self):
        self.config = TelegramConfig(bot_token=TOKEN, chat_id="test_chat_id")
        self.publisher = TelegramPublisher(self.config)
        self.publisher.session = Mock()
        self.publisher.session.post.return_value = response(200)

    def test_format_message(self):
        assert self.publisher.format_message("Title", "Body") == "*Title*\n\nBody"

    def test_format_message_keeps_raw_content(self):
        message = self.publisher.format_message("T", "<p>raw</p>")

        assert message == "*T*\n\n<p>raw</p>"

    def test_send_message_posts_form(self):
        self.publisher.send_message("hello")

        self.publisher.session.post.assert_called_once_with(
            f"https://api.telegram.org/bot{TOKEN}/sendMessage",
            data={
                "chat_id": "test_chat_id",
                "text": "hello",
                "parse_mode": "markdown",
                "disable_web_page_preview": "true",
            },
            timeout=30,
        )

    def test_deliver_sends_formatted_item(self):
        item = make_item("Release", at(10))

        self.publisher.deliver(item, "*new* things")

        data = self.publisher.session.post.call_args.kwargs["data"]
        assert data["text"] == "*Release*\n\n*new* things"

    def test_non_200_raises_with_status_and_body(self):
        self.publisher.session.post.return_value = response(
            400, '{"ok":false,"description":"Bad Request: can\'t parse entities"}'
        )

        with pytest.raises(TelegramAPIError) as excinfo:
            self.publisher.send_message("*broken")

        assert excinfo.value.status_code == 400
        assert "can't parse entities" in excinfo.value.body
        assert "status code: 400" in str(excinfo.value)

    def test_server_error_is_delivery_error(self):
        self.publisher.session.post.return_value = response(500, "oops")

        with pytest.raises(DeliveryError):
            self.publisher.send_message("hello")

    def test_transport_error_redacts_token(self):
        self.publisher.session.post.side_effect = requests.ConnectionError(
            f"Max retries exceeded with url: /bot{TOKEN}/sendMessage"
        )

        with pytest.raises(DeliveryError) as excinfo:
            self.publisher.send_message("hello")

        assert TOKEN not in str(excinfo.value)
        assert "<token>" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_no_retry_on_failure(self):
        self.publisher.session.post.return_value = response(429, "Too Many Requests")

        with pytest.raises(TelegramAPIError):
            self.publisher.send_message("hello")

        assert self.publisher.session.post.call_count == 1
