"""Structured logging for jsfile.

Library modules log through ``structlog.get_logger()`` with snake_case event
names (``file_loaded``, ``file_operation_failed``, ...). Nothing is configured
on import; applications call ``setup_logging`` or ``setup_logging_from_config``.
"""

import sys
import logging
from pathlib import Path
from typing import Optional, TextIO
import structlog

from jsfile.config import JSFileConfig


def _renderer(json_format: bool, stream: TextIO):
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def _add_file_handler(log_file: str, level: int):
    log_path = Path(log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.getLogger().addHandler(handler)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
):
    """Configure structlog on top of stdlib logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a file that also receives every event
        json_format: Render events as JSON instead of the console format
        stream: Console stream, stderr by default so stdout stays free for output
    """
    stream = stream or sys.stderr
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=numeric_level, stream=stream)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_format, stream),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        _add_file_handler(log_file, numeric_level)


def setup_logging_from_config(config: JSFileConfig):
    """Configure logging from the ``log_*`` settings of a JSFileConfig."""
    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        json_format=config.log_json,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
