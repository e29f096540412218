"""Run a single fetch-and-deliver cycle from the command line."""

import sys

from .config import Config
from .logging_config import create_execution_logger, setup_structured_logging
from .pipeline import run_pipeline
from .watermark import WatermarkStore


def main() -> int:
    config = Config()
    setup_structured_logging(config.log_level)
    logger = create_execution_logger("cli")

    try:
        config.validate()
        store = WatermarkStore(config.dynamodb_table, config.aws_region)
        report = run_pipeline(config, store, execution_id=logger.execution_id)
    except Exception as e:
        logger.error(f"Execution failed: {e}", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.log_metrics(report.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
