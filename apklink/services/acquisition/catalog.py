"""
Catalog acquirer.

Looks a package up in the remote version history catalog, picks the pinned or
most recent version, and downloads its asset.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...core.config import PathsConfig
from ...core.exceptions import NotFoundError, SourceError
from ...core.logging import get_logger
from ...core.types import LinkEventKind, Observer, notify
from ...models.artifact import CatalogEntry, CatalogResponse, ResolvedArtifact
from ...models.source import CatalogSource
from .download import download_file, open_client
from .service import Acquirer, AcquirerRegistry

logger = get_logger(__name__)


def infer_extension(download_url: str) -> str:
    """Return ``.xapk`` when the URL path names a bundle, else ``.apk``."""
    path = urlsplit(download_url).path.lower()
    return ".xapk" if path.endswith(".xapk") else ".apk"


def select_entry(
    entries: list[CatalogEntry], package_name: str, version: str | None
) -> CatalogEntry:
    """Pick the entry matching ``version`` exactly, or the first entry.

    Raises:
        NotFoundError: If there are no entries or none matches the pin.
    """
    if not entries:
        raise NotFoundError(
            message=f"no versions found for {package_name}",
            package_name=package_name,
            version=version,
        )

    if version is None:
        return entries[0]

    for entry in entries:
        if entry.version_name == version:
            return entry

    raise NotFoundError(
        message=f"version {version} not found for {package_name}",
        package_name=package_name,
        version=version,
    )


def _safe_component(value: str) -> str:
    return value.replace("/", "_").replace("\\", "_")


@AcquirerRegistry.register
class CatalogAcquirer(Acquirer):
    """Downloads a package version listed by the remote catalog."""

    NAME = "catalog"

    source: CatalogSource

    def work_dir(self, paths: PathsConfig) -> Path:
        return paths.catalog_download_dir

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _fetch_catalog(self, client: httpx.AsyncClient) -> httpx.Response:
        """Query the catalog, retrying transient transport failures only."""
        catalog = self.config.catalog
        return await client.get(
            catalog.endpoint,
            params={"package_name": self.source.package_name, "hl": catalog.language},
            headers=catalog.headers,
            follow_redirects=True,
        )

    async def lookup(self, client: httpx.AsyncClient) -> CatalogEntry:
        """Resolve the declared package and version to a catalog entry.

        Raises:
            SourceError: If the catalog cannot be queried or parsed.
            NotFoundError: If no entry matches.
        """
        package_name = self.source.package_name
        logger.info("Fetching app info", package_name=package_name)

        try:
            response = await self._fetch_catalog(client)
        except httpx.HTTPError as e:
            raise SourceError(
                message=f"failed to query catalog for {package_name}: {e}",
                source_kind=self.NAME,
                url=self.config.catalog.endpoint,
                cause=e,
            )

        if not response.is_success:
            raise SourceError(
                message=f"failed to fetch app details for {package_name}",
                source_kind=self.NAME,
                url=str(response.request.url),
                status_code=response.status_code,
            )

        try:
            catalog = CatalogResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise SourceError(
                message=f"catalog returned a malformed document for {package_name}",
                source_kind=self.NAME,
                url=str(response.request.url),
                cause=e,
            )

        return select_entry(catalog.version_list, package_name, self.source.version)

    async def resolve(self, work_dir: Path, observer: Observer | None = None) -> ResolvedArtifact:
        package_name = self.source.package_name
        work_dir.mkdir(parents=True, exist_ok=True)

        async with open_client(self.config.http, self.http_client) as client:
            entry = await self.lookup(client)
            logger.info("Found app", title=entry.title, version=entry.version_name)

            download_url = entry.asset.url
            file_name = (
                f"{_safe_component(package_name)}_{_safe_component(entry.version_name)}"
                f"{infer_extension(download_url)}"
            )
            destination = await download_file(
                client,
                download_url,
                work_dir / file_name,
                source_kind=self.NAME,
                progress_step_bytes=self.config.http.progress_step_bytes,
                observer=observer,
            )

        notify(
            observer,
            LinkEventKind.ACQUIRED,
            f"Downloaded {package_name} {entry.version_name}",
            path=str(destination),
            version=entry.version_name,
        )
        return ResolvedArtifact(
            path=destination.absolute(),
            source_kind=self.NAME,
            version=entry.version_name,
            title=entry.title or None,
        )
