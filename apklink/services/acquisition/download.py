"""
Streamed HTTP downloads.

Downloads are streamed chunk by chunk into a ``.part`` file that replaces any
previous file only once it is complete and non-empty. Progress is reported
every ``progress_step_bytes`` transferred bytes.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
import httpx

from ...core.config import HttpConfig
from ...core.exceptions import SourceError
from ...core.logging import get_logger
from ...core.types import LinkEventKind, Observer, notify

logger = get_logger(__name__)


@asynccontextmanager
async def open_client(
    http: HttpConfig, client: httpx.AsyncClient | None = None
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` unchanged, or a fresh client closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(
        timeout=http.timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": http.user_agent},
    ) as owned:
        yield owned


def _content_length(response: httpx.Response) -> int | None:
    try:
        length = int(response.headers.get("Content-Length", ""))
    except ValueError:
        return None
    return length if length > 0 else None


async def download_file(
    client: httpx.AsyncClient,
    url: str,
    destination: Path,
    *,
    source_kind: str,
    progress_step_bytes: int,
    observer: Observer | None = None,
) -> Path:
    """Stream ``url`` into ``destination``.

    Args:
        client: HTTP client to use; redirects are always followed.
        url: Resource to download.
        destination: File to create, or replace once the download succeeds.
        source_kind: Source kind reported in errors.
        progress_step_bytes: Bytes between two progress events.
        observer: Optional event observer.

    Returns:
        ``destination``

    Raises:
        SourceError: On HTTP errors, non-2xx responses, or an empty result.
    """
    logger.info("Downloading file", url=url, destination=str(destination))
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(f"{destination.name}.part")

    try:
        await _stream_to_file(client, url, partial, source_kind, progress_step_bytes, observer)
        if not partial.is_file() or partial.stat().st_size == 0:
            raise SourceError(
                message=f"download produced no data for {destination}",
                source_kind=source_kind,
                url=url,
            )
    except Exception:
        partial.unlink(missing_ok=True)
        raise

    # A previous download at ``destination`` survives every failure above
    os.replace(partial, destination)
    logger.info("Download complete", destination=str(destination), size_bytes=destination.stat().st_size)
    return destination


async def _stream_to_file(
    client: httpx.AsyncClient,
    url: str,
    target: Path,
    source_kind: str,
    progress_step_bytes: int,
    observer: Observer | None,
) -> None:
    try:
        async with client.stream("GET", url, follow_redirects=True) as response:
            if not response.is_success:
                raise SourceError(
                    message=f"failed to download, HTTP code: {response.status_code}",
                    source_kind=source_kind,
                    url=url,
                    status_code=response.status_code,
                )

            total = _content_length(response)
            if total:
                logger.info("Download size", size_mb=round(total / 1024 / 1024, 2))

            downloaded = 0
            last_reported = 0
            async with aiofiles.open(target, "wb") as f:
                async for chunk in response.aiter_bytes():
                    await f.write(chunk)
                    downloaded += len(chunk)

                    if downloaded - last_reported >= progress_step_bytes:
                        last_reported = downloaded
                        percent = int(downloaded * 100 / total) if total else None
                        notify(
                            observer,
                            LinkEventKind.PROGRESS,
                            f"Downloaded {downloaded // 1024 // 1024} MB",
                            url=url,
                            downloaded_bytes=downloaded,
                            total_bytes=total,
                            percent=percent,
                        )
    except httpx.HTTPError as e:
        raise SourceError(
            message=f"failed to download from {url}: {e}",
            source_kind=source_kind,
            url=url,
            cause=e,
        )
