"""
Sidecar-file state store.

Keeps link state in small files next to the output JAR:

    <name>.md5          digest of the input APK the JAR was built from
    <name>.config.json  snapshot of the declaration that produced it
    <name>.apklocation  absolute path of the last resolved input APK

The files are not lock-protected; one process owns an output path at a time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..core.exceptions import SnapshotParseError
from ..core.logging import get_logger
from ..core.types import Hash
from ..models.snapshot import ConfigSnapshot
from .hashing import HashStore
from .interface import StateStore

logger = get_logger(__name__)


class SidecarStateStore(StateStore):
    """State store backed by sidecar files beside the output artifact."""

    def __init__(self, output_path: Path, hash_store: HashStore | None = None) -> None:
        """Initialize the sidecar store.

        Args:
            output_path: The output artifact the sidecars describe
            hash_store: Digest reader/writer (a default one is created if omitted)
        """
        super().__init__(output_path)
        self.hash_store = hash_store or HashStore()

    @property
    def digest_path(self) -> Path:
        return self.output_path.with_suffix(".md5")

    @property
    def snapshot_path(self) -> Path:
        return self.output_path.with_suffix(".config.json")

    @property
    def location_path(self) -> Path:
        return self.output_path.with_suffix(".apklocation")

    async def _read_text(self, path: Path) -> str | None:
        if not path.is_file():
            return None
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable sidecar", sidecar=str(path), error=str(e))
            return None

    async def _write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)

    async def load_digest(self) -> Hash | None:
        return await self.hash_store.load(self.digest_path)

    async def save_digest(self, digest: Hash) -> None:
        await self.hash_store.persist(digest, self.digest_path)

    async def clear_digest(self) -> None:
        if self.digest_path.exists():
            await aiofiles.os.remove(self.digest_path)

    async def load_snapshot(self) -> ConfigSnapshot | None:
        text = await self._read_text(self.snapshot_path)
        if text is None:
            return None
        try:
            return ConfigSnapshot.deserialize(text, sidecar_path=str(self.snapshot_path))
        except SnapshotParseError as e:
            logger.warning("Discarding corrupt snapshot", sidecar=str(self.snapshot_path), error=str(e))
            return None

    async def save_snapshot(self, snapshot: ConfigSnapshot) -> None:
        await self._write_text(self.snapshot_path, snapshot.serialize())

    async def load_input_location(self) -> Path | None:
        text = await self._read_text(self.location_path)
        if not text or not text.strip():
            return None
        input_path = Path(text.strip())
        if not input_path.is_file() or input_path.stat().st_size == 0:
            logger.info("Recorded input artifact is missing or empty", input_path=str(input_path))
            return None
        return input_path

    async def save_input_location(self, input_path: Path) -> None:
        await self._write_text(self.location_path, str(input_path.absolute()))

    async def describe(self) -> dict[str, Any]:
        snapshot = await self.load_snapshot()
        location = await self._read_text(self.location_path)
        return {
            "output_path": str(self.output_path),
            "output_exists": self.output_path.is_file(),
            "digest": await self.load_digest(),
            "snapshot": snapshot.model_dump(exclude_none=True) if snapshot else None,
            "input_location": location.strip() if location else None,
            "input_exists": await self.load_input_location() is not None,
        }
