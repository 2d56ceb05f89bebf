"""
Structured logging for apklink.

Log records go to stderr so stdout stays free for the ``link`` summary. Output is
rendered for a terminal when one is attached and as one JSON object per line
otherwise, so build servers can parse link runs; ``APKLINK_LOG_FORMAT`` forces
either style. Per-link context (output path, source kind) is bound by the engine
through ``bind_context``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Config

# Transport libraries that log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore")


def use_json_output(log_format: str, is_tty: bool) -> bool:
    """Decide whether records are rendered as JSON lines.

    Args:
        log_format: ``console``, ``json`` or ``auto``
        is_tty: Whether stderr is an interactive terminal
    """
    if log_format == "auto":
        return not is_tty
    return log_format == "json"


def build_processors(json_output: bool) -> list[structlog.types.Processor]:
    """Return the structlog processor chain for one output style."""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def setup_logging(config: Config | None = None) -> None:
    """Configure structured logging for a link run.

    Args:
        config: Optional configuration. If None, uses INFO level and auto format.
    """
    log_level = config.log_level if config else "INFO"
    log_format = config.log_format if config else "auto"
    level = getattr(logging, log_level, logging.INFO)

    # Third-party records (httpx, asyncio) still go through the standard library
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)
    if level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    json_output = use_json_output(log_format, sys.stderr.isatty())
    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach key-value pairs to every record logged until ``clear_context``."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all bound context."""
    structlog.contextvars.clear_contextvars()
