"""Logging setup for coop-loans.

Backend calls log through ``get_loan_logger``, which binds the loan and
procedure they act on. In JSON mode that context becomes top-level keys,
so one loan's repayments and extensions can be grepped out of the log::

    {"level": "INFO", "message": "Procedure succeeded",
     "loan_id": "...", "procedure": "extend_loan", "extension_months": 2}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from coop_loans.sinks.serialization import serialize_value

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers kept at WARNING whatever the package level.
QUIET_LOGGERS = ("psycopg", "faker")


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Route all logging to stdout.

    Parameters
    ----------
    level : str
        Log level name. Unknown names fall back to INFO.
    format_type : str
        ``"standard"`` for pipe-separated lines or ``"json"`` for one
        object per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("coop_loans").setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with bound loan context merged in.

    Context values go through the sink serializer, so amounts stay exact
    strings and dates are ISO formatted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "extra", None)
        if isinstance(context, dict):
            log_data.update({k: serialize_value(v) for k, v in context.items()})

        return json.dumps(log_data, ensure_ascii=False)


class LoanLoggerAdapter(logging.LoggerAdapter):
    """Attach loan identifiers to every record.

    The identifiers land on ``record.extra`` so that ``JsonFormatter``
    emits them as top-level keys.
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(self.extra or {})
        extra.update(kwargs.pop("extra", None) or {})
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_loan_logger(name: str, **context: Any) -> LoanLoggerAdapter:
    """Get a logger adapter bound to loan context (``loan_id=...``)."""
    return LoanLoggerAdapter(logging.getLogger(name), context)
