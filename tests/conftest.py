"""Test configuration for apklink."""

import io
import json
import tempfile
import zipfile
from pathlib import Path

import httpx
import pytest

from apklink.core.config import Config, HttpConfig, PathsConfig
from apklink.core.exceptions import ConversionError
from apklink.services.conversion import Converter

CATALOG_HOST = "tapi.pureapk.com"
DOWNLOAD_HOST = "download.example.com"


class FakeConverter(Converter):
    """Converter that wraps the input bytes instead of running dex2jar."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[Path, Path]] = []

    async def convert(self, input_path: Path, output_path: Path) -> None:
        self.calls.append((input_path, output_path))
        if self.fail:
            raise ConversionError(
                message="simulated dex2jar failure",
                input_path=str(input_path),
                output_path=str(output_path),
            )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"JAR:" + input_path.read_bytes())


class CatalogServer:
    """MockTransport handler serving a catalog document and asset downloads."""

    def __init__(self, versions: list[dict], assets: dict[str, bytes]) -> None:
        self.versions = versions
        self.assets = assets
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == CATALOG_HOST:
            return httpx.Response(200, json={"version_list": self.versions})
        if request.url.host == DOWNLOAD_HOST and request.url.path in self.assets:
            return httpx.Response(200, content=self.assets[request.url.path])
        return httpx.Response(404)

    @property
    def catalog_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == CATALOG_HOST]

    @property
    def download_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == DOWNLOAD_HOST]


def catalog_version(version: str, path: str, title: str = "Example App") -> dict:
    """Build one catalog entry pointing at ``https://download.example.com{path}``."""
    return {
        "version_name": version,
        "title": title,
        "asset": {"url": f"https://{DOWNLOAD_HOST}{path}"},
    }


def build_zip(entries: dict[str, bytes]) -> bytes:
    """Create a zip archive in memory from name to content pairs."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_apk_bytes():
    """Create minimal APK-like bytes for testing.

    Returns:
        bytes: A zip archive holding an AndroidManifest.xml and a classes.dex.
    """
    return build_zip({
        "AndroidManifest.xml": b'<?xml version="1.0"?><manifest/>',
        "classes.dex": b"dex\n035\x00",
    })


@pytest.fixture
def sample_apk(temp_dir, sample_apk_bytes):
    """Create a sample APK file for testing."""
    apk_path = temp_dir / "sample.apk"
    apk_path.write_bytes(sample_apk_bytes)
    return apk_path


@pytest.fixture
def make_xapk(temp_dir):
    """Factory writing an XAPK bundle with an optional manifest.

    Returns:
        Callable taking ``files`` (name to bytes), an optional ``package_name``
        written to manifest.json, and the bundle ``name``.
    """

    def factory(files: dict[str, bytes], package_name: str | None = None, name: str = "bundle.xapk") -> Path:
        entries = dict(files)
        if package_name is not None:
            entries["manifest.json"] = json.dumps({
                "package_name": package_name,
                "name": "Example",
                "version_name": "1.0",
            }).encode()
        path = temp_dir / name
        path.write_bytes(build_zip(entries))
        return path

    return factory


@pytest.fixture
def config(temp_dir):
    """Tool configuration rooted in the temporary directory."""
    return Config(
        http=HttpConfig(progress_step_bytes=16),
        paths=PathsConfig(build_dir=temp_dir / "build"),
    )


@pytest.fixture
def converter():
    """A converter that always succeeds."""
    return FakeConverter()
