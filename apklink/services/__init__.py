"""Services package for apklink."""

from .acquisition import Acquirer, create_acquirer
from .conversion import Converter
from .invalidation import InvalidationEngine
from .normalization import ArchiveNormalizer

__all__ = [
    "Acquirer",
    "ArchiveNormalizer",
    "Converter",
    "InvalidationEngine",
    "create_acquirer",
]
