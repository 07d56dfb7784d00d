"""Structured logging configuration."""
import datetime
import inspect
import json
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor

PACKAGE_LOGGER = "embedded_chromedriver"
STDERR_LOG_LEVEL = "INFO"
IGNORED_LOGGERS = [
    "aiohttp",
    "asyncio",
]


def add_timestamp(_, __, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to the event dict."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def add_caller_info(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Add the file and line that emitted the event."""
    frame = inspect.currentframe()
    if frame is not None:
        caller = frame.f_back
        while caller and (
            "structlog" in caller.f_code.co_filename
            or caller.f_code.co_filename.endswith("/logging/__init__.py")
        ):
            caller = caller.f_back
        if caller:
            event_dict["caller"] = (
                f"{caller.f_code.co_filename.split('/')[-1]}:{caller.f_lineno}"
            )
    return event_dict


def level_filter(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Drop events below STDERR_LOG_LEVEL and events from ignored loggers."""
    logger_name = getattr(logger, "name", "")
    if any(logger_name.startswith(ignored) for ignored in IGNORED_LOGGERS):
        raise structlog.DropEvent
    level_no = getattr(logging, name.upper(), logging.NOTSET)
    if level_no < getattr(logging, STDERR_LOG_LEVEL):
        raise structlog.DropEvent
    return event_dict


class EventLineRenderer:
    """One JSON object per event: header keys first, then sorted fields."""

    HEADER = ("timestamp", "level", "logger", "event")

    def __call__(self, _: Any, __: str, event_dict: EventDict) -> str:
        line = {key: event_dict.pop(key, None) for key in self.HEADER}
        line.update(sorted(event_dict.items()))
        return json.dumps(line, separators=(",", ":"), default=str)


def build_processors(json_output: bool) -> List[Processor]:
    processors: List[Processor] = [
        level_filter,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_timestamp,
    ]
    if json_output:
        processors += [
            add_caller_info,
            structlog.processors.format_exc_info,
            EventLineRenderer(),
        ]
    else:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    return processors


def configure_logging(level: str = "INFO", json_output: Optional[bool] = None) -> None:
    """Send the package's events to stderr.

    Terminals get structlog's console renderer, anything else (CI, log
    collectors) gets one JSON object per line. stdout stays free for a
    verbose chromedriver's own output.
    """
    global STDERR_LOG_LEVEL
    STDERR_LOG_LEVEL = level.upper()
    if json_output is None:
        json_output = not sys.stderr.isatty()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = [handler]
    package_logger.setLevel(STDERR_LOG_LEVEL)
    package_logger.propagate = False

    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
