"""
Invalidation Service.

Decides whether a previously produced JAR is still valid and regenerates it when
it is not. The decision is made from sidecar state only, so independent runs of a
short-lived process agree with each other:

1. A disabled link, or one without a source, is skipped.
2. A missing, corrupt or different stored snapshot marks the configuration as
   changed.
3. With an unchanged configuration (and no force flag) the recorded input APK
   is reused: if the output exists and its stored digest matches the input, the
   run ends without acquiring or converting anything; otherwise the recorded
   input is reconverted without downloading it again. Local bundles skip this
   shortcut and are extracted again, since the recorded input is their base APK.
4. Otherwise the source is acquired afresh and bundles are normalized; the
   snapshot and input location are persisted right away.
5. Conversion runs when the configuration changed, the force flag is set, the
   output is missing, or the stored digest is missing or differs.

A failed conversion never touches the previous output and clears the stored
digest, so the next run reconverts from the recorded input.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import httpx

from ...core.config import Config, get_config
from ...core.exceptions import ConversionError
from ...core.logging import bind_context, clear_context, get_logger
from ...core.types import Hash, LinkEventKind, LinkOutcome, Observer, notify
from ...models.artifact import LinkResult, ResolvedArtifact
from ...models.link import LinkConfig
from ...models.snapshot import ConfigSnapshot
from ...models.source import LocalFileSource
from ...storage import HashStore, SidecarStateStore, StateStore
from ..acquisition import Acquirer, create_acquirer
from ..conversion import Converter
from ..normalization import ArchiveNormalizer

logger = get_logger(__name__)


class InvalidationEngine:
    """Drives acquire, normalize, convert and persist for one link."""

    def __init__(
        self,
        converter: Converter,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
        observer: Observer | None = None,
        state_store_factory: Callable[[Path], StateStore] = SidecarStateStore,
        normalizer: ArchiveNormalizer | None = None,
        hash_store: HashStore | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            converter: External APK to JAR converter
            config: Tool configuration (defaults to the cached global one)
            http_client: Shared HTTP client for remote sources
            observer: Receives progress and lifecycle events
            state_store_factory: Builds the state store for an output path
            normalizer: Bundle normalizer
            hash_store: Digest calculator
        """
        self.converter = converter
        self.config = config or get_config()
        self.http_client = http_client
        self.observer = observer
        self.state_store_factory = state_store_factory
        self.normalizer = normalizer or ArchiveNormalizer()
        self.hash_store = hash_store or HashStore()

    def _digest_or_none(self, file_path: Path) -> Hash | None:
        try:
            return self.hash_store.digest(file_path)
        except OSError as e:
            logger.warning("Could not hash recorded input", input_path=str(file_path), error=str(e))
            return None

    def _is_local_bundle(self, link: LinkConfig) -> bool:
        return isinstance(link.source, LocalFileSource) and self.normalizer.is_composite(link.source.path)

    def _register(self, output_path: Path) -> None:
        logger.info("Registered output", output_path=str(output_path))
        notify(self.observer, LinkEventKind.REGISTERED, f"Linked {output_path.name}", output_path=str(output_path))

    async def _acquire(self, acquirer: Acquirer) -> ResolvedArtifact:
        """Resolve the source and unpack bundles into a plain APK."""
        work_dir = acquirer.work_dir(self.config.paths)
        artifact = await acquirer.resolve(work_dir, observer=self.observer)

        if self.normalizer.is_composite(artifact.path):
            logger.info("Resolved file is a bundle, extracting base APK", bundle=str(artifact.path))
            extract_dir = work_dir / f"extracted-{artifact.path.stem}"
            base = self.normalizer.extract_base(artifact.path, extract_dir, observer=self.observer)
            artifact = artifact.model_copy(update={"path": base.path})

        logger.info("Configured APK file", apk_path=str(artifact.path))
        return artifact

    async def _convert(self, input_path: Path, output_path: Path, digest: Hash, store: StateStore) -> None:
        """Convert into a staging file and move it over the output on success."""
        staging = output_path.with_name(f"{output_path.stem}.partial{output_path.suffix}")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if staging.exists():
            staging.unlink()

        notify(self.observer, LinkEventKind.CONVERTING, f"Converting {input_path.name}", input_path=str(input_path))
        try:
            await self.converter.convert(input_path, staging)
            if not staging.is_file() or staging.stat().st_size == 0:
                raise ConversionError(
                    message="converter produced no output",
                    input_path=str(input_path),
                    output_path=str(output_path),
                )
        except ConversionError:
            await store.clear_digest()
            raise
        except Exception as e:
            await store.clear_digest()
            raise ConversionError(
                message=f"converter failed: {e}",
                input_path=str(input_path),
                output_path=str(output_path),
                cause=e,
            )

        os.replace(staging, output_path)
        await store.save_digest(digest)
        notify(self.observer, LinkEventKind.CONVERTED, f"Converted into {output_path.name}", output_path=str(output_path))

    async def run(self, link: LinkConfig) -> LinkResult:
        """Bring the link's output up to date.

        Args:
            link: The user's link declaration

        Returns:
            What the run did

        Raises:
            SourceError: If the APK cannot be acquired.
            FormatError: If a downloaded bundle is malformed.
            ConversionError: If conversion fails (input state is kept).
            OSError: If new state cannot be written.
        """
        if not link.is_active:
            reason = "Linking is disabled" if not link.enabled else "No APK source configured"
            logger.info("Skipping link", reason=reason)
            notify(self.observer, LinkEventKind.SKIPPED, reason)
            return LinkResult(outcome=LinkOutcome.SKIPPED)

        output_path = link.resolve_output_path(self.config.paths.output_dir)
        bind_context(output_path=str(output_path), source_kind=link.source.kind)
        try:
            return await self._run(link, output_path)
        finally:
            clear_context()

    async def _run(self, link: LinkConfig, output_path: Path) -> LinkResult:
        store = self.state_store_factory(output_path)
        current = ConfigSnapshot.capture(link, output_path)
        stored = await store.load_snapshot()
        config_changed = stored is None or stored != current

        artifact: ResolvedArtifact | None = None

        if config_changed:
            logger.info("Configuration has changed, will acquire APK and reprocess")
        elif link.force:
            logger.info("Forced reprocessing requested")
        elif self._is_local_bundle(link):
            # The pointer names the extracted base APK, not the bundle itself
            logger.info("Local source is a bundle, extracting again to detect changes")
        else:
            previous_input = await store.load_input_location()
            if previous_input is None:
                logger.warning("Could not find recorded APK file, will acquire again")
            else:
                digest = self._digest_or_none(previous_input)
                stored_digest = await store.load_digest()
                if output_path.is_file() and digest is not None and digest == stored_digest:
                    logger.info("Configuration unchanged and JAR is current, skipping acquisition")
                    self._register(output_path)
                    return LinkResult(
                        outcome=LinkOutcome.REUSED,
                        output_path=output_path,
                        input_path=previous_input,
                        digest=digest,
                    )
                logger.info("Output is stale, reconverting recorded APK", input_path=str(previous_input))
                artifact = ResolvedArtifact(path=previous_input, source_kind=link.source.kind)

        acquired = artifact is None
        if artifact is None:
            acquirer = create_acquirer(link.source, config=self.config, http_client=self.http_client)
            artifact = await self._acquire(acquirer)
            await store.save_snapshot(current)
            await store.save_input_location(artifact.path)

        digest = self.hash_store.digest(artifact.path)
        stored_digest = await store.load_digest()
        needs_conversion = (
            config_changed
            or link.force
            or not output_path.is_file()
            or stored_digest is None
            or stored_digest != digest
        )

        if needs_conversion:
            await self._convert(artifact.path, output_path, digest, store)
        else:
            logger.info("APK does not need reprocessing, using existing JAR")

        self._register(output_path)
        return LinkResult(
            outcome=LinkOutcome.REGENERATED if needs_conversion else LinkOutcome.REUSED,
            output_path=output_path,
            input_path=artifact.path,
            digest=digest,
            config_changed=config_changed,
            acquired=acquired,
            converted=needs_conversion,
        )
