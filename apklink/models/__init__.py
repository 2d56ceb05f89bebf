"""Data models for apklink."""

from .artifact import (
    BundleManifest,
    CatalogAsset,
    CatalogEntry,
    CatalogResponse,
    LinkResult,
    ResolvedArtifact,
)
from .link import LinkConfig
from .snapshot import ConfigSnapshot
from .source import ApkSource, CatalogSource, LocalFileSource, UrlSource

__all__ = [
    "ApkSource",
    "BundleManifest",
    "CatalogAsset",
    "CatalogEntry",
    "CatalogResponse",
    "CatalogSource",
    "ConfigSnapshot",
    "LinkConfig",
    "LinkResult",
    "LocalFileSource",
    "ResolvedArtifact",
    "UrlSource",
]
