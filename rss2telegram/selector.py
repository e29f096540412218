"""New-item selection against a stored publish-time watermark."""

from collections.abc import Sequence
from datetime import UTC, datetime

from .models import FeedItem, Selection

# Watermark of a (chat, feed) pair that has never been delivered
ZERO_WATERMARK = datetime.min.replace(tzinfo=UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def select_new_items(items: Sequence[FeedItem], watermark: datetime) -> Selection:
    """Pick the items published strictly after ``watermark``.

    Feeds list entries newest first, so the input is walked in reverse and
    the selection comes out oldest to newest. Items without a publish time
    are ignored. ``new_watermark`` is the publish time of the newest selected
    item, or None if nothing was selected.
    """
    watermark = as_utc(watermark)

    candidates = [
        item
        for item in reversed(items)
        if item.published is not None and as_utc(item.published) > watermark
    ]
    # Stable: a newest-first feed keeps its reversed order
    candidates.sort(key=lambda item: as_utc(item.published))

    selection = Selection(items=candidates)
    if candidates:
        selection.new_watermark = as_utc(candidates[-1].published)
    return selection
