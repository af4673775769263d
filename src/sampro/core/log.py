"""Logging setup for the ``sampro`` logger tree."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from sampro.core.config import LoggingConfig

_HANDLER_NAME = "sampro-stderr"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(cfg: LoggingConfig) -> logging.Logger:
    """Attach a single stderr handler to the ``sampro`` logger.

    Calling this more than once replaces the handler instead of stacking them.
    """
    logger = logging.getLogger("sampro")
    logger.setLevel(cfg.level)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if cfg.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
