"""
Logging setup for the todo backend.

Plain single-line records for development, JSON records when
ENVIRONMENT is production/staging. Level comes from LOG_LEVEL.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


PLAIN_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s:%(lineno)d - %(message)s"


def setup_logging(level: str = "INFO", json_format: bool = False):
    """Configure the root logger once; later calls replace its handlers."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT, "%H:%M:%S"))
    root_logger.addHandler(handler)

    # quiet chatty libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def auto_configure():
    env = os.getenv("ENVIRONMENT", "development")
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        json_format=env in ("production", "staging"),
    )
