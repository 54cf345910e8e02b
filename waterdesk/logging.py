import logging
import sys

from waterdesk.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Client libraries that log every request at INFO, oracle URLs included.
QUIET_LOGGERS = ("httpx", "httpcore", "faker")


def configure_logging() -> None:
    """Install a single stderr handler on the root logger.

    Text by default; one JSON object per line when ``WATERDESK_LOG_JSON`` is
    set. Call ``reconfigure()`` again after Alembic's ``fileConfig`` runs.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt=JSON_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level"},
                static_fields={"service": "waterdesk"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


reconfigure = configure_logging
