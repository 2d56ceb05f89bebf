"""Archive normalization service."""

from .service import ArchiveNormalizer

__all__ = ["ArchiveNormalizer"]
