"""Core infrastructure components for apklink."""

from .config import Config, get_config
from .exceptions import (
    ApkLinkError,
    ConfigError,
    ConversionError,
    FormatError,
    NotFoundError,
    SnapshotParseError,
    SourceError,
    ToolNotFoundError,
)
from .logging import get_logger, setup_logging
from .types import Hash, LinkEvent, LinkEventKind, LinkOutcome, Observer

__all__ = [
    "Config",
    "get_config",
    "ApkLinkError",
    "ConfigError",
    "ConversionError",
    "FormatError",
    "NotFoundError",
    "SnapshotParseError",
    "SourceError",
    "ToolNotFoundError",
    "get_logger",
    "setup_logging",
    "Hash",
    "LinkEvent",
    "LinkEventKind",
    "LinkOutcome",
    "Observer",
]
