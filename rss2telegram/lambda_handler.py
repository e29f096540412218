"""Main Lambda handler for RSS Telegram Bot."""

import json
import os
from datetime import UTC, datetime
from typing import Any

import boto3

from .config import Config
from .logging_config import create_execution_logger, setup_structured_logging
from .models import DeliveryReport
from .pipeline import run_pipeline
from .watermark import WatermarkStore

METRICS_NAMESPACE = "RSS-Telegram-Bot"

setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

# Created on first invocation and reused by every later one in this process
_watermark_store: WatermarkStore | None = None


def get_watermark_store(config: Config) -> WatermarkStore:
    """Return the process-wide watermark store, creating it on first use."""
    global _watermark_store
    if _watermark_store is None:
        _watermark_store = WatermarkStore(
            table_name=config.dynamodb_table, aws_region=config.aws_region
        )
    return _watermark_store


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Run one fetch-and-deliver cycle. The event payload is ignored.

    Args:
        event: Lambda event data (unused)
        context: Lambda context object

    Returns:
        Response dictionary with status and run summary
    """
    execution_id = f"lambda_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)

    started = main_logger.log_run_start(
        lambda_request_id=getattr(context, "aws_request_id", "unknown"),
        lambda_function_name=getattr(context, "function_name", "unknown"),
    )

    config = Config()
    try:
        config.validate()
        store = get_watermark_store(config)
        report = run_pipeline(config, store, execution_id=execution_id)
    except Exception as e:
        error_msg = str(e)
        main_logger.error(
            f"Execution failed: {error_msg}",
            feed_url=config.feed_url,
            chat_id=config.chat_id,
            error=error_msg,
        )
        send_cloudwatch_metrics(None, config.aws_region, execution_id)
        main_logger.log_run_end(started, success=False, error=error_msg)

        return {
            "statusCode": 500,
            "body": json.dumps(
                {
                    "message": "RSS Telegram Bot execution failed",
                    "execution_id": execution_id,
                    "error": error_msg,
                }
            ),
        }

    summary = report.to_dict()
    main_logger.log_metrics(summary)
    send_cloudwatch_metrics(report, config.aws_region, execution_id)
    main_logger.log_run_end(started, success=True)

    return {
        "statusCode": 200,
        "body": json.dumps(
            {
                "message": "RSS Telegram Bot execution completed",
                "execution_id": execution_id,
                "report": summary,
            }
        ),
    }


def send_cloudwatch_metrics(
    report: DeliveryReport | None, aws_region: str, execution_id: str
) -> None:
    """
    Send run counters to CloudWatch. Failures are logged and swallowed.

    Args:
        report: Report of a completed run, or None if the run failed
        aws_region: AWS region for CloudWatch client
        execution_id: Execution ID for logging context
    """
    metrics_logger = create_execution_logger("cloudwatch_metrics", execution_id)

    execution_success = report is not None
    counts = {
        "ItemsFound": report.items_found if report else 0,
        "ItemsSelected": report.attempted if report else 0,
        "MessagesSent": report.delivered if report else 0,
        "DeliveryFailures": report.failed if report else 0,
        "ExecutionSuccess": 1 if execution_success else 0,
    }
    metric_data = [
        {"MetricName": name, "Value": value, "Unit": "Count"}
        for name, value in counts.items()
    ]

    try:
        cloudwatch = boto3.client("cloudwatch", region_name=aws_region)
        cloudwatch.put_metric_data(Namespace=METRICS_NAMESPACE, MetricData=metric_data)
        metrics_logger.info(
            "Successfully sent metrics to CloudWatch",
            metrics=counts,
            namespace=METRICS_NAMESPACE,
        )
    except Exception as e:
        # Metrics must never fail the run
        metrics_logger.error(f"Failed to send CloudWatch metrics: {e}", error=str(e))
