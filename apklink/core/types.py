"""
Core type definitions for apklink.

Provides type aliases, the run outcome enum and the observer event shape used to
report progress without a hidden logging side channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

# Type aliases
Hash = str  # MD5 hex digest


class LinkOutcome(str, Enum):
    """Terminal state of a link run."""

    SKIPPED = "skipped"
    REUSED = "reused"
    REGENERATED = "regenerated"


class LinkEventKind(str, Enum):
    """Kinds of notifications emitted to an observer."""

    PROGRESS = "progress"
    ACQUIRED = "acquired"
    NORMALIZED = "normalized"
    CONVERTING = "converting"
    CONVERTED = "converted"
    REGISTERED = "registered"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LinkEvent:
    """A single notification delivered to an observer."""

    kind: LinkEventKind
    message: str
    data: dict[str, Any] = field(default_factory=dict)


Observer = Callable[[LinkEvent], None]


def notify(observer: Observer | None, kind: LinkEventKind, message: str, **data: Any) -> None:
    """Deliver an event to ``observer`` if one was supplied."""
    if observer is not None:
        observer(LinkEvent(kind=kind, message=message, data=data))
