"""
Artifact and catalog data models.

These models describe the files that flow through a link run and the documents
read from the version catalog and from inside XAPK bundles.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from ..core.types import Hash, LinkOutcome


class ResolvedArtifact(BaseModel):
    """A single existing, non-empty file believed to be an APK or XAPK."""

    path: Path = Field(description="Absolute path of the resolved file")
    source_kind: str = Field(description="Kind of source that produced the file")
    version: str | None = Field(default=None, description="Resolved version label")
    title: str | None = Field(default=None, description="Human-readable app title")


class BundleManifest(BaseModel):
    """The ``manifest.json`` stored at the root of an XAPK bundle."""

    package_name: str = Field(min_length=1, description="Package identifier of the base APK")
    name: str | None = Field(default=None)
    version_name: str | None = Field(default=None)

    model_config = {"extra": "ignore"}

    @field_validator("package_name")
    @classmethod
    def reject_path_like(cls, value: str) -> str:
        if "/" in value or "\\" in value or ".." in value:
            raise ValueError(f"package name '{value}' is not a plain identifier")
        return value

    @property
    def base_apk_name(self) -> str:
        return f"{self.package_name}.apk"


class CatalogAsset(BaseModel):
    """Download asset of a catalog entry."""

    url: str = Field(min_length=1)

    model_config = {"extra": "ignore"}


class CatalogEntry(BaseModel):
    """One published version of a package."""

    version_name: str
    title: str = Field(default="")
    asset: CatalogAsset

    model_config = {"extra": "ignore"}


class CatalogResponse(BaseModel):
    """Version history returned by the catalog, most recent first."""

    version_list: list[CatalogEntry] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class LinkResult(BaseModel):
    """Outcome of one link run."""

    outcome: LinkOutcome
    output_path: Path | None = None
    input_path: Path | None = None
    digest: Hash | None = None
    config_changed: bool = False
    acquired: bool = False
    converted: bool = False
