"""RSS Feed Processing module for RSS Telegram Bot."""

from datetime import UTC, datetime

import feedparser
import requests
from dateutil import parser as date_parser

from .logging_config import create_execution_logger
from .models import FeedItem

# RFC 822 named zones, as UTC offsets in seconds
RFC822_ZONES = {
    "UT": 0,
    "GMT": 0,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
}


class FeedParseError(Exception):
    """Raised when a downloaded document cannot be read as a feed."""


class FeedProcessor:
    """Downloads a feed and normalizes its entries into FeedItems."""

    def __init__(self, timeout: int = 30, execution_id: str | None = None):
        """Initialize FeedProcessor with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_processor", execution_id)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "rss2telegram/1.0"})

    def parse_feed(self, feed_url: str) -> list[FeedItem]:
        """Fetch and parse a single RSS/Atom feed.

        Items are returned in document order, which for most feeds is
        newest first.

        Args:
            feed_url: URL of the RSS/Atom feed

        Returns:
            List of FeedItem objects from the feed

        Raises:
            requests.RequestException: If feed download fails
            FeedParseError: If the document is malformed and has no entries
        """
        self.logger.info("Downloading feed content", feed_url=feed_url)
        try:
            response = self.session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise

        feed = feedparser.parse(response.content)

        if feed.bozo:
            bozo_exception = getattr(feed, "bozo_exception", None)
            if not feed.entries:
                self.logger.error(
                    f"Feed could not be parsed: {bozo_exception}",
                    feed_url=feed_url,
                    bozo_exception=str(bozo_exception),
                )
                raise FeedParseError(f"Failed to parse feed {feed_url}: {bozo_exception}")
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {bozo_exception}",
                feed_url=feed_url,
                bozo_exception=str(bozo_exception),
            )

        items = [self.normalize_item(entry) for entry in feed.entries]

        self.logger.info(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            undated_count=sum(1 for item in items if item.published is None),
        )
        return items

    def normalize_item(self, raw_item) -> FeedItem:
        """Normalize a raw feedparser entry into a FeedItem.

        The HTML body is kept as-is; conversion happens at delivery time.
        """
        title = getattr(raw_item, "title", None) or ""
        link = getattr(raw_item, "link", None) or ""

        content = ""
        raw_content = getattr(raw_item, "content", None)
        if raw_content:
            # Atom content and RSS content:encoded arrive as a list of dicts
            if isinstance(raw_content, list):
                content = raw_content[0].get("value", "") or ""
            else:
                content = str(raw_content)
        if not content:
            content = (
                getattr(raw_item, "summary", None)
                or getattr(raw_item, "description", None)
                or ""
            )

        guid = getattr(raw_item, "id", None) or getattr(raw_item, "guid", None)

        return FeedItem(
            title=title,
            content=content,
            published=self.parse_published(raw_item),
            link=link,
            guid=guid,
        )

    def parse_published(self, raw_item) -> datetime | None:
        """Return the entry's publish time in UTC, or None if absent or invalid.

        feedparser's normalized ``published_parsed``/``updated_parsed`` are
        used when present, since they resolve named zones such as ``EST``.
        The raw string is parsed with dateutil only when feedparser could not.
        """
        for field in ("published", "updated"):
            parsed = getattr(raw_item, f"{field}_parsed", None)
            if parsed:
                return datetime(*parsed[:6], tzinfo=UTC)

            published_str = getattr(raw_item, field, None)
            if published_str:
                return self._parse_date_string(raw_item, published_str)

        return None

    def _parse_date_string(self, raw_item, published_str: str) -> datetime | None:
        try:
            published = date_parser.parse(published_str, tzinfos=RFC822_ZONES)
        except (ValueError, TypeError, OverflowError) as e:
            self.logger.warning(
                f"Unparseable publish date {published_str!r}: {e}",
                item_title=getattr(raw_item, "title", None),
            )
            return None

        if published.tzinfo is None:
            published = published.replace(tzinfo=UTC)
        return published.astimezone(UTC)
