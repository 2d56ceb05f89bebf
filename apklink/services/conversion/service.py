"""
Conversion Service.

Wraps the external dex2jar tool that turns an APK's DEX bytecode into a JAR.
The engine only relies on the ``Converter`` contract: given an input APK and an
output path, either produce a non-empty output file or raise ConversionError.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from abc import ABC, abstractmethod
from pathlib import Path

from ...core.config import Config, get_config
from ...core.exceptions import ConversionError, ToolNotFoundError
from ...core.logging import get_logger

logger = get_logger(__name__)

DEX2JAR_EXECUTABLES = ("d2j-dex2jar", "d2j-dex2jar.sh")


class Converter(ABC):
    """Converts an APK into a JAR archive."""

    @abstractmethod
    async def _run_tool(self, command: list[str], timeout: float) -> tuple[int, str]:
        """Run dex2jar without blocking the event loop.

        Returns:
            The exit code and decoded stderr.

        Raises:
            asyncio.TimeoutError: If the tool outlives ``timeout``; it is killed first.
        """
        logger.info("Running command", command=" ".join(command))
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise

        logger.info("Command completed", returncode=process.returncode)
        return process.returncode or 0, stderr.decode("utf-8", errors="replace")

    async def convert(self, input_path: Path, output_path: Path) -> None:
        if not input_path.is_file():
            raise ConversionError(
                message="cannot read APK file",
                input_path=str(input_path),
                output_path=str(output_path),
            )

        tool = self._find_tool()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        command = self.build_command(tool, input_path, output_path)
        timeout = self.config.tools.conversion_timeout_seconds

        logger.info("Converting APK to JAR using dex2jar", tool=str(tool), input=str(input_path))
        start_time = time.perf_counter()

        try:
            returncode, stderr = await self._run_tool(command, timeout)
        except asyncio.TimeoutError as e:
            raise ConversionError(
                message=f"dex2jar timed out after {timeout}s",
                input_path=str(input_path),
                output_path=str(output_path),
                cause=e,
            )
        except OSError as e:
            raise ConversionError(
                message=f"failed to launch dex2jar: {e}",
                input_path=str(input_path),
                output_path=str(output_path),
                cause=e,
            )

        if returncode != 0:
            raise ConversionError(
                message=f"dex2jar exited with code {returncode}",
                context={"stderr": stderr[-2000:]},
                input_path=str(input_path),
                output_path=str(output_path),
            )

        if not output_path.is_file() or output_path.stat().st_size == 0:
            raise ConversionError(
                message="dex2jar did not create an output archive",
                input_path=str(input_path),
                output_path=str(output_path),
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "APK conversion completed",
            output=str(output_path),
            size_bytes=output_path.stat().st_size,
            duration_ms=duration_ms,
        )
