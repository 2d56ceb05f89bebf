"""
Content digests for change detection.

MD5 is used purely as a change detector; it guards against stale outputs, not
against tampering.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import aiofiles

from ..core.logging import get_logger
from ..core.types import Hash

logger = get_logger(__name__)


class HashStore:
    """Compute, persist and reload file digests."""

    def __init__(self, chunk_size: int = 8192) -> None:
        """Initialize the hash store.

        Args:
            chunk_size: Bytes read per iteration while hashing
        """
        self.chunk_size = chunk_size

    def digest(self, file_path: Path) -> Hash:
        """Compute the MD5 hex digest of a file's full content.

        Args:
            file_path: Path to the file to hash.

        Returns:
            Lowercase hexadecimal digest.

        Raises:
            OSError: If the file cannot be read.
        """
        md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            while chunk := f.read(self.chunk_size):
                md5.update(chunk)
        return md5.hexdigest()

    async def persist(self, digest: Hash, sidecar_path: Path) -> None:
        """Write ``digest`` to ``sidecar_path``, replacing any previous value.

        Raises:
            OSError: If the sidecar cannot be written.
        """
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(sidecar_path, "w", encoding="utf-8") as f:
            await f.write(digest)
        logger.debug("Saved digest", digest=digest, sidecar=str(sidecar_path))

    async def load(self, sidecar_path: Path) -> Hash | None:
        """Read a stored digest, or None when missing, unreadable or empty."""
        if not sidecar_path.is_file():
            return None
        try:
            async with aiofiles.open(sidecar_path, "r", encoding="utf-8") as f:
                content = (await f.read()).strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable digest sidecar", sidecar=str(sidecar_path), error=str(e))
            return None
        return content or None
