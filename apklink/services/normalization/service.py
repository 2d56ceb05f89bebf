"""
Archive Normalization Service.

Turns an XAPK bundle into the single base APK it carries. The bundle's
``manifest.json`` names the base APK; when the manifest is missing, unparsable,
or names a file the bundle does not contain, the first non-config APK is used.
"""

from __future__ import annotations

import shutil
import zipfile
import zlib
from pathlib import Path

from pydantic import ValidationError

from ...core.exceptions import FormatError
from ...core.logging import get_logger
from ...core.types import LinkEventKind, Observer, notify
from ...models.artifact import BundleManifest, ResolvedArtifact

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"
SCRATCH_DIR_NAME = "extracted"
CONFIG_APK_STEM = "config"
COMPOSITE_SUFFIXES = (".xapk",)


class ArchiveNormalizer:
    """Extracts the base APK from composite bundles."""

    def is_composite(self, file_path: Path) -> bool:
        """Classify a file as a composite bundle by its extension alone."""
        return file_path.name.lower().endswith(COMPOSITE_SUFFIXES)

    def _unzip(self, archive_path: Path, dest_dir: Path) -> None:
        """Unpack every entry of ``archive_path`` below ``dest_dir``.

        Raises:
            FormatError: If the file is not a zip archive, an entry cannot be
                decoded, or an entry would be written outside ``dest_dir``.
        """
        logger.info("Unzipping bundle", archive=str(archive_path), dest=str(dest_dir))
        root = dest_dir.resolve()

        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                for info in zf.infolist():
                    target = (root / info.filename).resolve()
                    if target != root and root not in target.parents:
                        raise FormatError(
                            message=f"entry '{info.filename}' escapes the extraction directory",
                            archive_path=str(archive_path),
                        )

                    if info.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue

                    target.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
        except zipfile.BadZipFile as e:
            raise FormatError(
                message="not a valid zip archive",
                archive_path=str(archive_path),
                cause=e,
            )
        except (NotImplementedError, RuntimeError, EOFError, zlib.error) as e:
            # zipfile signals undecodable entries with these
            raise FormatError(
                message=f"cannot unpack bundle entry: {e}",
                archive_path=str(archive_path),
                cause=e,
            )

        logger.info("Unzip completed", dest=str(dest_dir))

    def _read_manifest(self, extract_dir: Path) -> BundleManifest | None:
        manifest_path = extract_dir / MANIFEST_NAME
        if not manifest_path.is_file():
            logger.info("Bundle has no manifest", manifest=str(manifest_path))
            return None

        try:
            return BundleManifest.model_validate_json(manifest_path.read_bytes())
        except (ValidationError, OSError) as e:
            logger.warning("Ignoring unparsable bundle manifest", error=str(e))
            return None

    @staticmethod
    def _is_config_split(file_path: Path) -> bool:
        name = file_path.name.lower()
        return file_path.stem.lower() == CONFIG_APK_STEM or name.startswith(f"{CONFIG_APK_STEM}.")

    def _select_base(self, archive_path: Path, extract_dir: Path) -> Path:
        manifest = self._read_manifest(extract_dir)
        if manifest is not None:
            declared = (extract_dir / manifest.base_apk_name).resolve()
            if extract_dir.resolve() in declared.parents and declared.is_file():
                return declared
            logger.warning(
                "Manifest names a missing or unsafe base APK, falling back to scan",
                expected=manifest.base_apk_name,
            )

        candidates = sorted(
            p
            for p in extract_dir.iterdir()
            if p.is_file() and p.suffix.lower() == ".apk" and not self._is_config_split(p)
        )
        if not candidates:
            raise FormatError(
                message="no base APK found in bundle",
                archive_path=str(archive_path),
            )
        return candidates[0]

    def extract_base(
        self,
        composite_path: Path,
        output_dir: Path,
        observer: Observer | None = None,
    ) -> ResolvedArtifact:
        """Extract the base APK of a bundle into ``output_dir``.

        The scratch directory ``output_dir/extracted`` is cleared before use and
        left in place afterwards.

        Args:
            composite_path: The XAPK bundle.
            output_dir: Directory receiving the scratch tree and the base APK.
            observer: Optional event observer.

        Returns:
            The copied base APK.

        Raises:
            FormatError: If the bundle is malformed or holds no base APK.
        """
        logger.info("Extracting base APK from bundle", bundle=str(composite_path))

        extract_dir = output_dir / SCRATCH_DIR_NAME
        if extract_dir.exists():
            shutil.rmtree(extract_dir)
        extract_dir.mkdir(parents=True, exist_ok=True)

        self._unzip(composite_path, extract_dir)
        selected = self._select_base(composite_path, extract_dir)

        destination = output_dir / selected.name
        shutil.copyfile(selected, destination)

        logger.info("Base APK extracted", base_apk=str(destination))
        notify(
            observer,
            LinkEventKind.NORMALIZED,
            f"Extracted base APK {destination.name}",
            bundle=str(composite_path),
            base_apk=str(destination),
        )
        return ResolvedArtifact(path=destination.absolute(), source_kind="bundle")
