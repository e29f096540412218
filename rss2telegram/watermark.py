"""DynamoDB-backed watermark storage for RSS Telegram Bot.

One item per chat holds a ``published_at`` map from feed URL to the ISO-8601
publish time of the newest item already delivered for that feed::

    {"chat_id": "-100123", "published_at": {"https://example.com/feed": "2024-01-01T10:00:00+00:00"}}
"""

from datetime import datetime

import boto3
from botocore.exceptions import ClientError
from dateutil import parser as date_parser

from .logging_config import create_execution_logger
from .selector import ZERO_WATERMARK, as_utc

CONDITION_FAILED = "ConditionalCheckFailedException"

# DynamoDB type descriptor for a map attribute
MAP_TYPE = "M"


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == CONDITION_FAILED


class WatermarkStore:
    """Reads and upserts per-(chat, feed) watermarks in DynamoDB."""

    def __init__(
        self,
        table_name: str,
        aws_region: str = "us-east-1",
        execution_id: str | None = None,
    ):
        """Initialize the store with DynamoDB configuration.

        The boto3 resource is created here once and reused for every call, so
        a single instance should live for the whole process.

        Args:
            table_name: Name of the DynamoDB table (partition key ``chat_id``)
            aws_region: AWS region for DynamoDB client
            execution_id: Execution ID for logging context
        """
        self.table_name = table_name
        self.aws_region = aws_region
        self.logger = create_execution_logger("watermark_store", execution_id)
        self.dynamodb = boto3.resource("dynamodb", region_name=aws_region)
        self.table = self.dynamodb.Table(table_name)

        self.logger.info(
            "WatermarkStore initialized", table_name=table_name, aws_region=aws_region
        )

    def bind_execution(self, execution_id: str) -> None:
        """Attach a new execution ID to subsequent log lines."""
        self.logger = create_execution_logger("watermark_store", execution_id)

    def read(self, chat_id: str, feed_url: str) -> datetime:
        """Return the stored watermark, or ZERO_WATERMARK if there is none.

        A missing item, a missing ``published_at`` map, a missing feed key and
        a malformed value all mean "never delivered".

        Raises:
            ClientError: on any DynamoDB error
        """
        try:
            response = self.table.get_item(
                Key={"chat_id": chat_id}, ConsistentRead=True
            )
        except ClientError as e:
            self.logger.error(
                f"Error reading watermark: {e}",
                chat_id=chat_id,
                feed_url=feed_url,
                error=str(e),
            )
            raise

        item = response.get("Item")
        if item is None:
            self.logger.info(
                "No watermark record for chat", chat_id=chat_id, feed_url=feed_url
            )
            return ZERO_WATERMARK

        feeds = item.get("published_at")
        value = feeds.get(feed_url) if isinstance(feeds, dict) else None
        if value is None:
            self.logger.info(
                "No watermark for feed", chat_id=chat_id, feed_url=feed_url
            )
            return ZERO_WATERMARK

        watermark = self._parse(value)
        if watermark is None:
            self.logger.warning(
                f"Ignoring malformed watermark value {value!r}",
                chat_id=chat_id,
                feed_url=feed_url,
            )
            return ZERO_WATERMARK

        self.logger.debug(
            "Read watermark",
            chat_id=chat_id,
            feed_url=feed_url,
            watermark=watermark.isoformat(),
        )
        return watermark

    def write(self, chat_id: str, feed_url: str, timestamp: datetime) -> None:
        """Upsert the watermark for one feed without touching the others.

        Tries a nested update first and falls back to creating the
        ``published_at`` map when it is missing or is not a map. If another
        writer creates the map in between, the nested update is repeated once.

        Raises:
            ClientError: on any DynamoDB error other than the expected
                condition failures
        """
        value = as_utc(timestamp).isoformat()

        try:
            if self._update_if_exists(chat_id, feed_url, value):
                action = "updated"
            elif self._create_with_nested_value(chat_id, feed_url, value):
                action = "created"
            else:
                self.table.update_item(**self._nested_update(chat_id, feed_url, value))
                action = "updated"
        except ClientError as e:
            self.logger.error(
                f"Error writing watermark: {e}",
                chat_id=chat_id,
                feed_url=feed_url,
                error=str(e),
            )
            raise

        self.logger.info(
            f"Watermark {action}", chat_id=chat_id, feed_url=feed_url, watermark=value
        )

    def _update_if_exists(self, chat_id: str, feed_url: str, value: str) -> bool:
        try:
            self.table.update_item(
                ConditionExpression=(
                    "attribute_exists(published_at)"
                    " AND attribute_type(published_at, :map_type)"
                ),
                **self._nested_update(chat_id, feed_url, value, map_type=True),
            )
        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise
        return True

    def _create_with_nested_value(
        self, chat_id: str, feed_url: str, value: str
    ) -> bool:
        try:
            self.table.update_item(
                Key={"chat_id": chat_id},
                UpdateExpression="SET published_at = :feeds",
                ConditionExpression=(
                    "attribute_not_exists(published_at)"
                    " OR NOT attribute_type(published_at, :map_type)"
                ),
                ExpressionAttributeValues={
                    ":feeds": {feed_url: value},
                    ":map_type": MAP_TYPE,
                },
            )
        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise
        return True

    @staticmethod
    def _nested_update(
        chat_id: str, feed_url: str, value: str, map_type: bool = False
    ) -> dict:
        values = {":published_at": value}
        if map_type:
            values[":map_type"] = MAP_TYPE
        return {
            "Key": {"chat_id": chat_id},
            "UpdateExpression": "SET published_at.#feed = :published_at",
            "ExpressionAttributeNames": {"#feed": feed_url},
            "ExpressionAttributeValues": values,
        }

    @staticmethod
    def _parse(value) -> datetime | None:
        if not isinstance(value, str):
            return None
        try:
            return as_utc(date_parser.isoparse(value))
        except (ValueError, OverflowError):
            return None
