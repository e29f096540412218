"""Shared fixtures for RSS Telegram Bot tests."""

from datetime import UTC, datetime

import boto3
import pytest
from moto import mock_aws

from rss2telegram.models import FeedItem

TABLE_NAME = "test-watermarks"
FEED_URL = "https://example.com/feed.xml"
CHAT_ID = "-1001234567890"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def dynamodb_table(aws_credentials):
    """A mocked watermark table keyed by chat_id."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{"AttributeName": "chat_id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "chat_id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield table


@pytest.fixture
def pipeline_env(monkeypatch, aws_credentials):
    """Environment for a fully configured run."""
    monkeypatch.setenv("RSS_FEED_URL", FEED_URL)
    monkeypatch.setenv("TELEGRAM_BOT_API_TOKEN", "123456:test-token")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", CHAT_ID)
    monkeypatch.setenv("DYNAMODB_TABLE", TABLE_NAME)


def at(hour: int, minute: int = 0) -> datetime:
    """Timestamp on a fixed day, for readable scenarios."""
    return datetime(2024, 1, 1, hour, minute, tzinfo=UTC)


def make_item(title: str, published: datetime | None, content: str = "") -> FeedItem:
    return FeedItem(
        title=title,
        content=content or f"<p>{title} body</p>",
        published=published,
        link=f"https://example.com/{title}",
    )
