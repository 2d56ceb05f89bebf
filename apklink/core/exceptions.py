"""
Custom exception hierarchy for apklink.

All exceptions inherit from ApkLinkError so callers can handle every failure of a
link run in one place. Each exception type carries context for logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ApkLinkError(Exception):
    """Base exception for all apklink errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ConfigError(ApkLinkError):
    """Raised when the declared link configuration is missing or ambiguous."""

    field_name: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Invalid configuration for '{self.field_name}': {base}"
        return f"Invalid configuration: {base}"


@dataclass
class SourceError(ApkLinkError):
    """Raised when an APK source cannot be resolved to a local file."""

    source_kind: str = ""
    url: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        base = super().__str__()
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        return f"[source:{self.source_kind or 'unknown'}]{status} {base}"


@dataclass
class NotFoundError(SourceError):
    """Raised when a catalog has no entry matching the requested package or version."""

    package_name: str = ""
    version: str | None = None

    def __post_init__(self) -> None:
        self.source_kind = "catalog"


@dataclass
class FormatError(ApkLinkError):
    """Raised when a composite bundle cannot be normalized into a base APK."""

    archive_path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"Malformed bundle '{self.archive_path}': {base}"


@dataclass
class ConversionError(ApkLinkError):
    """Raised when the external converter fails to produce an output archive."""

    input_path: str = ""
    output_path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"Conversion of '{self.input_path}' failed: {base}"


@dataclass
class ToolNotFoundError(ConversionError):
    """Raised when the external conversion tool is not available."""

    tool_name: str = ""
    expected_path: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found at '{self.expected_path}'.{hint}"


@dataclass
class SnapshotParseError(ApkLinkError):
    """Raised when a stored configuration snapshot cannot be parsed.

    Callers treat this exactly like a missing snapshot.
    """

    sidecar_path: str = ""
