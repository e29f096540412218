"""Single-run orchestration: fetch, select, deliver, advance the watermark."""

from .config import Config
from .logging_config import create_execution_logger
from .models import DeliveryReport, DeliveryResult
from .render import MarkdownRenderer
from .rss import FeedProcessor
from .selector import select_new_items
from .telegram import DeliveryError, TelegramPublisher
from .watermark import WatermarkStore


def run_pipeline(
    config: Config,
    store: WatermarkStore,
    feed_processor: FeedProcessor | None = None,
    renderer: MarkdownRenderer | None = None,
    publisher: TelegramPublisher | None = None,
    execution_id: str | None = None,
) -> DeliveryReport:
    """
    Deliver every new item of the configured feed to the configured chat.

    Items are delivered one at a time, oldest first. A failed delivery is
    logged and the loop continues; the failed item still counts towards the
    new watermark, so it will not be retried on the next run.

    Args:
        config: Invocation configuration
        store: Long-lived watermark store
        feed_processor: Optional feed fetcher (built from config if omitted)
        renderer: Optional content renderer
        publisher: Optional Telegram publisher (built from config if omitted)
        execution_id: Execution ID for logging context

    Returns:
        DeliveryReport describing every attempted item

    Raises:
        ConfigurationError: If a required setting is missing
        requests.RequestException, FeedParseError: If the feed cannot be fetched
        botocore.exceptions.ClientError: If the watermark cannot be read or written
    """
    config.validate()

    logger = create_execution_logger("pipeline", execution_id)
    feed_url = config.feed_url
    chat_id = config.chat_id

    feed_processor = feed_processor or FeedProcessor(execution_id=execution_id)
    renderer = renderer or MarkdownRenderer(execution_id=execution_id)
    publisher = publisher or TelegramPublisher(
        config.get_telegram_config(), execution_id=execution_id
    )
    if execution_id:
        store.bind_execution(execution_id)

    items = feed_processor.parse_feed(feed_url)
    report = DeliveryReport(feed_url=feed_url, chat_id=chat_id, items_found=len(items))

    watermark = store.read(chat_id, feed_url)
    selection = select_new_items(items, watermark)
    logger.info(
        f"Selected {len(selection.items)} new items",
        feed_url=feed_url,
        chat_id=chat_id,
        items_found=len(items),
        watermark=watermark.isoformat(),
    )

    if not selection.items:
        return report

    for item in selection.items:
        content = renderer.render(item.content, item_title=item.title)
        try:
            publisher.deliver(item, content)
        except DeliveryError as e:
            logger.log_item_processing(
                item.title, "delivery_failed", success=False, error=str(e)
            )
            report.results.append(DeliveryResult(item=item, success=False, error=str(e)))
            continue

        logger.log_item_processing(item.title, "sent_to_telegram")
        report.results.append(DeliveryResult(item=item, success=True))

    # Advanced over every attempted item, delivered or not
    report.new_watermark = selection.new_watermark
    if report.new_watermark is not None:
        store.write(chat_id, feed_url, report.new_watermark)
        report.watermark_written = True

    return report
