"""
Structured Logging Configuration Module

Ledger services log through log_action, which attaches the ledger fields
(action, resource, extra) to the record. JSONFormatter renders one object
per line; the text format is meant for local runs of the demo.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union


TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEDGER_FIELDS: Tuple[str, ...] = ("action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON object, omitting unset ledger fields"""

    def __init__(self, fields: Tuple[str, ...] = LEDGER_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for field in self.fields:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _level_number(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def setup_logging(
    level: Union[str, int] = "INFO",
    format_type: str = "json",
    logger_name: str = "bank_ledger"
) -> logging.Logger:
    """
    Point the ledger logger at stderr, replacing any handlers it already has

    Args:
        level: Level name or number
        format_type: "json" for one JSON object per line, anything else for text
        logger_name: Root of the logger hierarchy to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if format_type == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_level_number(level))
    logger.propagate = False
    return logger


def get_logger(name: str = "bank_ledger") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: Union[str, int], message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None) -> None:
    """
    Log a ledger event with its action, resource and structured payload

    Fields left as None are not attached, so they never reach the output.
    """
    fields = {"action": action, "resource": resource, "extra": extra}
    logger.log(
        _level_number(level), message,
        extra={k: v for k, v in fields.items() if v is not None},
        stacklevel=2
    )
