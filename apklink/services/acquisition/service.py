"""
Acquisition Service.

Resolves a source declaration into a concrete file on local disk. Each source
kind has exactly one acquirer, registered under the kind's name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

import httpx

from ...core.config import Config, PathsConfig, get_config
from ...core.types import Observer
from ...models.artifact import ResolvedArtifact
from ...models.source import ApkSource

# Acquirer classes by source kind
_ACQUIRER_REGISTRY: dict[str, type[Acquirer]] = {}


class Acquirer(ABC):
    """Base class for source acquirers."""

    NAME: ClassVar[str] = ""

    def __init__(
        self,
        source: Any,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the acquirer.

        Args:
            source: The source declaration this acquirer resolves
            config: Tool configuration (defaults to the cached global one)
            http_client: Shared HTTP client; a private one is opened per call if omitted
        """
        self.source = source
        self.config = config or get_config()
        self.http_client = http_client

    @abstractmethod
    def work_dir(self, paths: PathsConfig) -> Path:
        """Directory this acquirer writes into."""
        ...

    @abstractmethod
    async def resolve(self, work_dir: Path, observer: Observer | None = None) -> ResolvedArtifact:
        """Produce an existing, non-empty file for the source.

        Raises:
            SourceError: If the source cannot be resolved.
        """
        ...


class AcquirerRegistry:
    """Registry mapping source kinds to acquirer classes."""

    @classmethod
    def register(cls, acquirer_class: type[Acquirer]) -> type[Acquirer]:
        """Register an acquirer class under its ``NAME``.

        Usable as a decorator.
        """
        _ACQUIRER_REGISTRY[acquirer_class.NAME] = acquirer_class
        return acquirer_class

    @classmethod
    def get(cls, kind: str) -> type[Acquirer] | None:
        return _ACQUIRER_REGISTRY.get(kind)

    @classmethod
    def kinds(cls) -> list[str]:
        return list(_ACQUIRER_REGISTRY.keys())


def create_acquirer(
    source: ApkSource,
    config: Config | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Acquirer:
    """Instantiate the acquirer registered for ``source.kind``.

    Raises:
        KeyError: If no acquirer handles the source kind.
    """
    acquirer_class = AcquirerRegistry.get(source.kind)
    if acquirer_class is None:
        known = ", ".join(AcquirerRegistry.kinds())
        raise KeyError(f"no acquirer registered for source kind '{source.kind}' (known: {known})")
    return acquirer_class(source, config=config, http_client=http_client)
