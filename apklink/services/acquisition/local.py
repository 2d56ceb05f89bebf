"""Local file acquirer."""

from __future__ import annotations

import os
from pathlib import Path

from ...core.config import PathsConfig
from ...core.exceptions import SourceError
from ...core.logging import get_logger
from ...core.types import LinkEventKind, Observer, notify
from ...models.artifact import ResolvedArtifact
from ...models.source import LocalFileSource
from .service import Acquirer, AcquirerRegistry

logger = get_logger(__name__)


@AcquirerRegistry.register
class LocalFileAcquirer(Acquirer):
    """Uses an APK that already exists on disk, without copying it."""

    NAME = "local"

    source: LocalFileSource

    def work_dir(self, paths: PathsConfig) -> Path:
        # Only used when the local file is a bundle that needs extracting
        return paths.local_extract_dir

    async def resolve(self, work_dir: Path, observer: Observer | None = None) -> ResolvedArtifact:
        apk_path = self.source.path.absolute()
        logger.info("Using local APK file", apk_path=str(apk_path))

        if not apk_path.exists():
            raise SourceError(message=f"APK file not found: {apk_path}", source_kind=self.NAME)
        if not apk_path.is_file():
            raise SourceError(message=f"APK path is not a file: {apk_path}", source_kind=self.NAME)
        if not os.access(apk_path, os.R_OK):
            raise SourceError(message=f"cannot read APK file: {apk_path}", source_kind=self.NAME)
        if apk_path.stat().st_size == 0:
            raise SourceError(message=f"APK file is empty: {apk_path}", source_kind=self.NAME)

        notify(observer, LinkEventKind.ACQUIRED, f"Using local file {apk_path.name}", path=str(apk_path))
        return ResolvedArtifact(path=apk_path, source_kind=self.NAME)
