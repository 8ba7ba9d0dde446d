"""JSON logs for the bookkeeping service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from bizledger.config import settings

LEDGER_LOGGER = "bizledger.ledger"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds UTC timestamp, level and service name to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """
    Route all logging to stdout as JSON.

    SQLAlchemy's engine logger is held at WARNING unless sql_echo is on,
    otherwise every unit of work would print its statements.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.sql_echo else logging.WARNING)


def log_ledger_event(event: str, **fields: Any) -> None:
    """Log a committed ledger change; Decimal and date values are written as strings"""
    logging.getLogger(LEDGER_LOGGER).info(
        event,
        extra={"step": event, **{name: str(value) for name, value in fields.items()}},
    )
