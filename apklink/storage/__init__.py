"""Durable link state for apklink."""

from .hashing import HashStore
from .interface import StateStore
from .sidecar import SidecarStateStore

__all__ = ["HashStore", "StateStore", "SidecarStateStore"]
