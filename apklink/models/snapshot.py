"""
Configuration snapshots.

A snapshot is the comparable record of everything the user declared about a link.
Two runs agree that the user's intent is unchanged exactly when their snapshots
compare equal.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from ..core.exceptions import SnapshotParseError
from .link import LinkConfig
from .source import CatalogSource, LocalFileSource, UrlSource


class ConfigSnapshot(BaseModel):
    """Frozen, field-wise comparable copy of a link declaration.

    Absent fields are ``None``; blank strings normalize to ``None`` so that an
    empty declaration never reads as a change.
    """

    apk_file_path: str | None = None
    output_file_path: str | None = None
    catalog_package: str | None = None
    catalog_version: str | None = None
    url_source: str | None = None
    url_file_name: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_absent(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def capture(cls, config: LinkConfig, output_path: Path) -> ConfigSnapshot:
        """Snapshot ``config`` as resolved to ``output_path``."""
        source = config.source
        return cls(
            apk_file_path=str(source.path.absolute()) if isinstance(source, LocalFileSource) else None,
            output_file_path=str(output_path.absolute()),
            catalog_package=source.package_name if isinstance(source, CatalogSource) else None,
            catalog_version=source.version if isinstance(source, CatalogSource) else None,
            url_source=source.url if isinstance(source, UrlSource) else None,
            url_file_name=source.file_name if isinstance(source, UrlSource) else None,
        )

    def serialize(self) -> str:
        """Render as a JSON document, omitting absent fields."""
        return self.model_dump_json(indent=2, exclude_none=True)

    @classmethod
    def deserialize(cls, text: str, sidecar_path: str = "") -> ConfigSnapshot:
        """Parse a document produced by :meth:`serialize`.

        Raises:
            SnapshotParseError: If ``text`` is not a valid snapshot document.
        """
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise SnapshotParseError(
                message="stored configuration snapshot is malformed",
                sidecar_path=sidecar_path,
                cause=e,
            )
