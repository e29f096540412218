"""Data models for RSS Telegram Bot."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class FeedItem:
    """Represents a single RSS/Atom feed item."""

    title: str
    content: str  # raw HTML
    published: datetime | None = None
    link: str = ""
    guid: str | None = None


@dataclass
class Selection:
    """Items picked for delivery, oldest first."""

    items: list[FeedItem] = field(default_factory=list)
    # None when nothing was selected; the watermark must not be written then
    new_watermark: datetime | None = None


@dataclass
class DeliveryResult:
    """Outcome of one delivery attempt."""

    item: FeedItem
    success: bool
    error: str | None = None


@dataclass
class DeliveryReport:
    """Summary of a single pipeline run."""

    feed_url: str
    chat_id: str
    items_found: int = 0
    results: list[DeliveryResult] = field(default_factory=list)
    new_watermark: datetime | None = None
    watermark_written: bool = False

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def delivered(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return self.attempted - self.delivered

    def to_dict(self) -> dict:
        """Serializable summary used for logs and handler responses."""
        return {
            "feed_url": self.feed_url,
            "chat_id": self.chat_id,
            "items_found": self.items_found,
            "items_selected": self.attempted,
            "messages_sent": self.delivered,
            "delivery_failures": self.failed,
            "new_watermark": (
                self.new_watermark.isoformat() if self.new_watermark else None
            ),
            "watermark_written": self.watermark_written,
            "errors": [
                f"{result.item.title}: {result.error}"
                for result in self.results
                if not result.success
            ],
        }
