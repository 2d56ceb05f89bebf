"""
The user's link declaration.

``LinkConfig`` is built once from user options before any resolution runs and is
never mutated afterwards. Snapshots are derived from it directly.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..core.exceptions import ConfigError
from .source import ApkSource, CatalogSource, LocalFileSource, UrlSource


class LinkConfig(BaseModel):
    """Immutable declaration of what to link and where to put it."""

    enabled: bool = Field(default=True, description="Disable to skip linking entirely")
    force: bool = Field(default=False, description="Regenerate even when state is current")
    output_path: Path | None = Field(default=None, description="Override for the output JAR")
    source: ApkSource | None = Field(default=None, description="Where the APK comes from")

    model_config = {"frozen": True}

    @classmethod
    def from_options(
        cls,
        *,
        apk_file: Path | str | None = None,
        package_name: str | None = None,
        version: str | None = None,
        url: str | None = None,
        file_name: str | None = None,
        output_path: Path | str | None = None,
        enabled: bool = True,
        force: bool = False,
    ) -> LinkConfig:
        """Build a link declaration from flat options.

        At most one source may be declared. Declaring none is allowed and makes
        the link a no-op.

        Raises:
            ConfigError: If several sources are declared or a declared source
                lacks its required field.
        """
        candidates: list[ApkSource] = []
        try:
            if apk_file is not None and str(apk_file).strip():
                candidates.append(LocalFileSource(path=Path(apk_file)))

            if package_name or version:
                if not package_name:
                    raise ConfigError(
                        message="a package name must be specified for a catalog source",
                        field_name="package_name",
                    )
                candidates.append(CatalogSource(package_name=package_name, version=version))

            if url or file_name:
                if not url:
                    raise ConfigError(
                        message="a url must be specified for a url source",
                        field_name="url",
                    )
                candidates.append(UrlSource(url=url, file_name=file_name))
        except ValidationError as e:
            raise ConfigError(message=f"invalid source declaration: {e}", cause=e)

        if len(candidates) > 1:
            kinds = ", ".join(source.kind for source in candidates)
            raise ConfigError(
                message=f"exactly one source may be declared, got: {kinds}",
                field_name="source",
            )

        return cls(
            enabled=enabled,
            force=force,
            output_path=Path(output_path) if output_path else None,
            source=candidates[0] if candidates else None,
        )

    @property
    def is_active(self) -> bool:
        """Whether a run has anything to do."""
        return self.enabled and self.source is not None

    def resolve_output_path(self, output_dir: Path) -> Path:
        """Return the absolute output JAR path.

        Args:
            output_dir: Directory used when no explicit output path is declared.

        Raises:
            ConfigError: If no source is declared and no output path is set.
        """
        if self.output_path is not None:
            return self.output_path.absolute()
        if self.source is None:
            raise ConfigError(message="cannot derive an output name without a source", field_name="source")
        return (output_dir / f"{self.source.default_output_stem}.jar").absolute()
