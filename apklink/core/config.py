"""
Configuration management for apklink.

Provides type-safe tool settings with environment variable overrides. These are
the knobs of the tool itself (timeouts, endpoints, tool paths); the per-project
link declaration lives in ``apklink.models.link``.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Opaque identification headers expected by the catalog service
DEFAULT_CATALOG_HEADERS: dict[str, str] = {
    "Ual-Access-Businessid": "projecta",
    "Ual-Access-ProjectA": json.dumps({"device_info": {"os_ver": "30"}}, separators=(",", ":")),
}


class HttpConfig(BaseModel):
    """HTTP client settings shared by every download."""

    timeout_seconds: float = Field(default=60.0, gt=0, description="Per-request timeout")
    user_agent: str = Field(default="Mozilla/5.0", description="User-Agent for downloads")
    progress_step_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Bytes transferred between two progress notifications",
    )


class CatalogConfig(BaseModel):
    """Remote version catalog settings."""

    endpoint: str = Field(
        default="https://tapi.pureapk.com/v3/get_app_his_version",
        description="Version history endpoint",
    )
    language: str = Field(default="en", description="Value of the 'hl' query parameter")
    headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CATALOG_HEADERS))


class ToolsConfig(BaseModel):
    """External tools configuration."""

    dex2jar_path: Path | None = Field(default=None, description="Custom d2j-dex2jar path")
    conversion_timeout_seconds: int = Field(default=600, ge=10, description="dex2jar timeout")


class PathsConfig(BaseModel):
    """Filesystem layout derived from the build directory."""

    build_dir: Path = Field(default=Path("./build"), description="Build directory root")

    @property
    def output_dir(self) -> Path:
        return self.build_dir / "apklink"

    @property
    def catalog_download_dir(self) -> Path:
        return self.build_dir / "apkpure-downloads"

    @property
    def url_download_dir(self) -> Path:
        return self.build_dir / "url-downloads"

    @property
    def local_extract_dir(self) -> Path:
        return self.build_dir / "apklink-extracted"


class Config(BaseModel):
    """Root configuration for apklink."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto", description="Console output on a terminal, JSON lines otherwise"
    )
    http: HttpConfig = Field(default_factory=HttpConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        dex2jar = os.environ.get("APKLINK_DEX2JAR_PATH")
        return cls(
            log_level=os.environ.get("APKLINK_LOG_LEVEL", "INFO"),  # type: ignore
            log_format=os.environ.get("APKLINK_LOG_FORMAT", "auto"),  # type: ignore
            http=HttpConfig(
                timeout_seconds=float(os.environ.get("APKLINK_HTTP_TIMEOUT", "60")),
                progress_step_bytes=int(
                    os.environ.get("APKLINK_PROGRESS_STEP_BYTES", str(5 * 1024 * 1024))
                ),
            ),
            catalog=CatalogConfig(
                endpoint=os.environ.get(
                    "APKLINK_CATALOG_ENDPOINT",
                    "https://tapi.pureapk.com/v3/get_app_his_version",
                ),
            ),
            tools=ToolsConfig(
                dex2jar_path=Path(dex2jar).expanduser() if dex2jar else None,
            ),
            paths=PathsConfig(
                build_dir=Path(os.environ.get("APKLINK_BUILD_DIR", "./build")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
