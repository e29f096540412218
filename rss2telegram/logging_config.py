"""Structured logging configuration for RSS Telegram Bot."""

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

# Record attributes copied into the JSON payload when present
CONTEXT_FIELDS = (
    "execution_id",
    "component",
    "feed_url",
    "chat_id",
    "item_title",
    "metrics",
    "action",
    "success",
    "error",
    "watermark",
    "duration_seconds",
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ExecutionLogger:
    """Logger that stamps every record with the run and component it came from."""

    def __init__(self, execution_id: str, component: str = "main"):
        self.execution_id = execution_id
        self.component = component
        self.logger = logging.getLogger(f"rss2telegram.{component}")

    def _log_with_context(self, level: int, message: str, **kwargs) -> None:
        extra = {
            "execution_id": self.execution_id,
            "component": self.component,
            **kwargs,
        }
        self.logger.log(level, message, extra=extra)

    def info(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def log_run_start(self, **kwargs) -> float:
        """Log the start of a run and return its monotonic start mark."""
        self.info("Run started", **kwargs)
        return time.monotonic()

    def log_run_end(self, started: float, success: bool, **kwargs) -> None:
        """Log the outcome of a run begun with ``log_run_start``."""
        self.info(
            "Run finished" if success else "Run failed",
            success=success,
            duration_seconds=round(time.monotonic() - started, 3),
            **kwargs,
        )

    def log_item_processing(
        self, item_title: str, action: str, success: bool = True, **kwargs
    ) -> None:
        """Log the outcome of one feed item; failures go out at ERROR."""
        level = logging.INFO if success else logging.ERROR
        self._log_with_context(
            level,
            f"Item {action}: {item_title}",
            item_title=item_title,
            action=action,
            success=success,
            **kwargs,
        )

    def log_metrics(self, metrics: dict[str, Any]) -> None:
        self.info("Run summary", metrics=metrics)


def setup_structured_logging(log_level: str = "INFO") -> None:
    """Route every record to stdout as one JSON line at ``log_level``."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    package_logger = logging.getLogger("rss2telegram")
    package_logger.setLevel(level)
    package_logger.propagate = True


def create_execution_logger(
    component: str, execution_id: str | None = None
) -> ExecutionLogger:
    """Return a logger for ``component``, inventing an ``exec_`` ID if none is given."""
    if not execution_id:
        execution_id = f"exec_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"

    return ExecutionLogger(execution_id, component)
