"""Acquisition service: resolves APK sources to local files."""

from .catalog import CatalogAcquirer
from .local import LocalFileAcquirer
from .service import Acquirer, AcquirerRegistry, create_acquirer
from .url import UrlAcquirer

__all__ = [
    "Acquirer",
    "AcquirerRegistry",
    "CatalogAcquirer",
    "LocalFileAcquirer",
    "UrlAcquirer",
    "create_acquirer",
]
