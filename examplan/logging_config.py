# examplan/logging_config.py
import logging
from typing import Any, Dict

from .core.config import settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "no-request-id"
        return True


def _stream_handler(formatter: str, stream: str, level: str = "NOTSET") -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "stream": f"ext://sys.{stream}",
        "level": level,
        "filters": ["request_id_filter"],
    }


def build_logging_config(level: str, debug: bool = False) -> Dict[str, Any]:
    """dictConfig for uvicorn and the examplan loggers; errors also go to stderr."""
    app_handlers = ["console", "errors"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id_filter": {"()": RequestIdFilter}},
        "formatters": {
            "console": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s %(asctime)s [%(name)s] [%(request_id)s] %(message)s",
                "datefmt": DATE_FORMAT,
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": (
                    "%(levelprefix)s %(asctime)s [%(request_id)s] "
                    '%(client_addr)s - "%(request_line)s" %(status_code)s'
                ),
                "datefmt": DATE_FORMAT,
            },
            "traceback": {
                "format": "%(levelname)s %(asctime)s [%(name)s:%(lineno)d] %(message)s",
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "console": _stream_handler("console", "stdout"),
            "access": _stream_handler("access", "stdout"),
            "errors": _stream_handler("traceback", "stderr", level="ERROR"),
        },
        "loggers": {
            "": {"handlers": app_handlers, "level": level},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            "examplan": {
                "handlers": app_handlers,
                "level": "DEBUG" if debug else level,
                "propagate": False,
            },
        },
    }


LOGGING_CONFIG: Dict[str, Any] = build_logging_config(settings.LOG_LEVEL, settings.DEBUG)
