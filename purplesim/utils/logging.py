"""structlog setup shared by the service and the CLI.

Events are rendered once by structlog and handed to stdlib handlers as plain
strings, so the same line lands on the console and in the rotating log file.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

import structlog

SERVICE_NAME = "purplesim"


def _add_service(_, __, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _file_handler(log_dir: str, log_file: str, max_bytes: int, backup_count: int) -> Optional[logging.Handler]:
    try:
        os.makedirs(log_dir, exist_ok=True)
        return RotatingFileHandler(
            os.path.join(log_dir, log_file),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"purplesim: file logging disabled ({e})", file=sys.stderr)
        return None


def setup_logging(
    debug: bool = False,
    log_dir: Optional[str] = "logs",
    log_max_bytes: int = 10_000_000,
    log_backup_count: int = 5,
    log_file: str = "purplesim.log",
    stream: Optional[TextIO] = None,
) -> None:
    """Route structlog output to ``stream`` (stdout) and a rotating file under ``log_dir``.

    Debug mode renders colourless console lines, otherwise JSON. Passing
    ``log_dir=None`` skips the file.
    """
    level = logging.DEBUG if debug else logging.INFO
    renderer = structlog.dev.ConsoleRenderer(colors=False) if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_dir:
        file_handler = _file_handler(log_dir, log_file, log_max_bytes, log_backup_count)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        if isinstance(old, logging.FileHandler):
            old.close()
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
