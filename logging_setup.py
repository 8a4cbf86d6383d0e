# logging_setup.py
from __future__ import annotations

import logging
import logging.config
from typing import Any, Optional

LOGGER_NAME = "schoology_export"


class DefaultContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "resource"):
            record.resource = "-"
        if not hasattr(record, "artifact"):
            record.artifact = "-"
        return True


def setup_logging(verbosity: int = 1) -> None:
    """
    Configure a consistent logger for the project.
    - WARNING at 0, INFO by default, DEBUG when verbosity >= 2
    - Always prints resource and artifact so logs are grep-able.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    fmt = (
        "%(asctime)s %(levelname)s "
        "resource=%(resource)s artifact=%(artifact)s "
        "%(message)s"
    )

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"std": {"format": fmt}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "std",
                "level": level,
                "filters": ["default_context"]
            }
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["console"], "level": level, "propagate": False},
            # request-level debug lines from utils/*
            "utils": {"handlers": ["console"], "level": level, "propagate": True},
        },
        "filters": {
            "default_context": {
                "()": "logging_setup.DefaultContextFilter"
            }
        },
    })


class _Adapter(logging.LoggerAdapter):
    """LoggerAdapter that ensures resource and artifact keys exist, and avoids LogRecord collisions."""

    _RESERVED = {
        "name","msg","args","levelname","levelno","pathname","filename","module","lineno","funcName",
        "created","asctime","msecs","relativeCreated","thread","threadName","processName","process",
        "exc_info","exc_text","stack_info","stacklevel","message","taskName"
    }

    def process(self, msg: str, kwargs):
        extra = dict(self.extra)
        user_extra = kwargs.get("extra") or {}
        for k, v in user_extra.items():
            key = k if k not in self._RESERVED else f"meta_{k}"
            if key not in extra:  # don't clobber adapter defaults
                extra[key] = v
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(*, artifact: str, resource: Optional[Any] = None) -> logging.LoggerAdapter:
    """
    Create a logger bound to artifact + resource.
    Usage:
        log = get_logger(artifact="documents", resource="course_101")
        log.info("exported document", extra={"document_id": 12})
    """
    base = logging.getLogger(LOGGER_NAME)
    return _Adapter(base, extra={"artifact": artifact, "resource": resource if resource is not None else "-"})
