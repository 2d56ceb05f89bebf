"""
APK source descriptors.

A link declares exactly one place its APK comes from. Each variant is a frozen,
tagged model so the set of sources is closed and resolvable by ``kind``.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def base_file_name(value: str) -> str:
    """Return the last path component of ``value``, accepting either separator."""
    return PurePosixPath(value.replace("\\", "/")).name


class LocalFileSource(BaseModel):
    """An APK already present on disk."""

    kind: Literal["local"] = "local"
    path: Path = Field(description="Path to the APK or XAPK file")

    model_config = {"frozen": True}

    @property
    def default_output_stem(self) -> str:
        return self.path.stem


class CatalogSource(BaseModel):
    """An APK published in the remote version catalog."""

    kind: Literal["catalog"] = "catalog"
    package_name: str = Field(min_length=1, description="Application package identifier")
    version: str | None = Field(default=None, description="Exact version name to pin")

    model_config = {"frozen": True}

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, value: object) -> object:
        return _blank_to_none(value)

    @property
    def default_output_stem(self) -> str:
        return f"apkpure-{self.package_name}-{self.version or 'latest'}"


class UrlSource(BaseModel):
    """An APK downloadable from an arbitrary URL."""

    kind: Literal["url"] = "url"
    url: str = Field(min_length=1, description="Direct download URL")
    file_name: str | None = Field(default=None, description="Name for the downloaded file")

    model_config = {"frozen": True}

    @field_validator("file_name", mode="before")
    @classmethod
    def normalize_file_name(cls, value: object) -> object:
        value = _blank_to_none(value)
        if isinstance(value, str) and base_file_name(value) in ("", ".", ".."):
            raise ValueError(f"file name '{value}' does not name a file")
        return value

    @property
    def default_output_stem(self) -> str:
        return f"url-download-{self.file_name or 'apk'}"


ApkSource = Annotated[
    Union[LocalFileSource, CatalogSource, UrlSource],
    Field(discriminator="kind"),
]
