"""
Link state interface.

Defines the durable state a link run consults and updates, so the invalidation
logic does not depend on how that state is laid out on disk.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..core.types import Hash
from ..models.snapshot import ConfigSnapshot


class StateStore(ABC):
    """Abstract store for the state attached to one output artifact.

    Loads never raise: missing, unreadable or corrupt state reads as None.
    Saves propagate ``OSError``.
    """

    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path

    @abstractmethod
    async def load_digest(self) -> Hash | None:
        """Load the digest of the input the output was built from."""
        ...

    @abstractmethod
    async def save_digest(self, digest: Hash) -> None:
        """Persist the digest of the input the output was built from."""
        ...

    @abstractmethod
    async def clear_digest(self) -> None:
        """Forget the stored digest so the next run reconverts."""
        ...

    @abstractmethod
    async def load_snapshot(self) -> ConfigSnapshot | None:
        """Load the snapshot written by the last acquisition."""
        ...

    @abstractmethod
    async def save_snapshot(self, snapshot: ConfigSnapshot) -> None:
        """Persist the snapshot of the current declaration."""
        ...

    @abstractmethod
    async def load_input_location(self) -> Path | None:
        """Load the last resolved input artifact, if it still exists and is non-empty."""
        ...

    @abstractmethod
    async def save_input_location(self, input_path: Path) -> None:
        """Persist the absolute path of the resolved input artifact."""
        ...

    @abstractmethod
    async def describe(self) -> dict[str, Any]:
        """Return the raw stored state for diagnostics."""
        ...
