"""Direct URL acquirer."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

from ...core.config import PathsConfig
from ...core.logging import get_logger
from ...core.types import LinkEventKind, Observer, notify
from ...models.artifact import ResolvedArtifact
from ...models.source import UrlSource, base_file_name
from .download import download_file, open_client
from .service import Acquirer, AcquirerRegistry

logger = get_logger(__name__)

DEFAULT_FILE_NAME = "downloaded.apk"
PACKAGE_SUFFIXES = (".apk", ".xapk")


def infer_file_name(url: str) -> str | None:
    """Take the last URL path segment if it names a package file."""
    segment = unquote(PurePosixPath(urlsplit(url).path).name)
    if segment and segment.lower().endswith(PACKAGE_SUFFIXES):
        return segment
    return None


@AcquirerRegistry.register
class UrlAcquirer(Acquirer):
    """Downloads an APK from an arbitrary URL."""

    NAME = "url"

    source: UrlSource

    def work_dir(self, paths: PathsConfig) -> Path:
        return paths.url_download_dir

    def file_name(self) -> str:
        if self.source.file_name:
            # Keep explicit names inside the work dir
            return base_file_name(self.source.file_name)
        inferred = infer_file_name(self.source.url)
        if inferred is None:
            logger.info("Could not infer a file name from URL, using default", url=self.source.url)
            return DEFAULT_FILE_NAME
        return inferred

    async def resolve(self, work_dir: Path, observer: Observer | None = None) -> ResolvedArtifact:
        url = self.source.url
        logger.info("Downloading APK from URL", url=url)
        work_dir.mkdir(parents=True, exist_ok=True)

        async with open_client(self.config.http, self.http_client) as client:
            destination = await download_file(
                client,
                url,
                work_dir / self.file_name(),
                source_kind=self.NAME,
                progress_step_bytes=self.config.http.progress_step_bytes,
                observer=observer,
            )

        notify(observer, LinkEventKind.ACQUIRED, f"Downloaded {destination.name}", path=str(destination))
        return ResolvedArtifact(path=destination.absolute(), source_kind=self.NAME)
