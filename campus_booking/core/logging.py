"""Logging setup for the API process."""

import logging
import sys

from campus_booking.core import config

# Ids the booking services attach through ``extra=``.
BOOKING_CONTEXT_FIELDS = ("user_id", "slot_id", "appointment_id")
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


class KeyValueFormatter(logging.Formatter):
    """One ``key=value`` line per record, for production log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        pairs = [
            ("time", self.formatTime(record, self.datefmt)),
            ("level", record.levelname),
            ("logger", record.name),
            ("message", record.getMessage()),
        ]
        pairs.extend(
            (field, getattr(record, field))
            for field in BOOKING_CONTEXT_FIELDS
            if hasattr(record, field)
        )
        if record.exc_info:
            pairs.append(("exception", self.formatException(record.exc_info)))
        return " ".join(f"{key}={value}" for key, value in pairs)


def setup_logging() -> None:
    handler = logging.StreamHandler(sys.stdout)
    if config.APP_ENV.lower() == "production":
        handler.setFormatter(KeyValueFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
