"""
apklink CLI.

Command-line interface for linking APKs into a build as JAR archives.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, DownloadColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.config import Config, PathsConfig, get_config
from .core.exceptions import ApkLinkError
from .core.logging import setup_logging
from .core.types import LinkEvent, LinkEventKind
from .models.link import LinkConfig
from .services.conversion import Converter, Dex2JarConverter
from .services.invalidation import InvalidationEngine
from .storage import SidecarStateStore

app = typer.Typer(
    name="apklink",
    help="Link Android packages into a build as JAR archives",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"apklink v{__version__}")
        raise typer.Exit()


def build_converter(config: Config) -> Converter:
    """Create the converter used by ``link``."""
    return Dex2JarConverter(config)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """apklink: acquire, convert and cache APK dependencies."""
    pass


@app.command()
def link(
    apk: Optional[Path] = typer.Option(None, "--apk", help="Local APK or XAPK file"),
    package_name: Optional[str] = typer.Option(None, "--package", "-p", help="Catalog package name"),
    version: Optional[str] = typer.Option(None, "--version-name", help="Exact catalog version to pin"),
    url: Optional[str] = typer.Option(None, "--url", help="Direct download URL"),
    file_name: Optional[str] = typer.Option(None, "--file-name", help="File name for URL downloads"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JAR path"),
    build_dir: Optional[Path] = typer.Option(None, "--build-dir", help="Build directory root"),
    force: bool = typer.Option(False, "--force", help="Regenerate even when up to date"),
    disable: bool = typer.Option(False, "--disable", help="Skip linking entirely"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Acquire an APK and make sure its JAR is up to date."""
    config = get_config()
    if build_dir is not None:
        config = config.model_copy(update={"paths": PathsConfig(build_dir=build_dir)})
    if verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(config)

    try:
        link_config = LinkConfig.from_options(
            apk_file=apk,
            package_name=package_name,
            version=version,
            url=url,
            file_name=file_name,
            output_path=output,
            enabled=not disable,
            force=force,
        )
    except ApkLinkError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    async def run_async() -> None:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Linking...", total=None)

            def observe(event: LinkEvent) -> None:
                if event.kind == LinkEventKind.PROGRESS:
                    progress.update(
                        task,
                        completed=event.data.get("downloaded_bytes", 0),
                        total=event.data.get("total_bytes"),
                    )
                else:
                    progress.update(task, description=event.message)

            engine = InvalidationEngine(build_converter(config), config=config, observer=observe)
            result = await engine.run(link_config)

        table = Table(title="Link Result")
        table.add_column("Property", style="cyan")
        table.add_column("Value")
        table.add_row("Outcome", result.outcome.value)
        table.add_row("Output", str(result.output_path or "-"))
        table.add_row("Input", str(result.input_path or "-"))
        table.add_row("Digest", result.digest or "-")
        table.add_row("Config Changed", str(result.config_changed))
        table.add_row("Acquired", str(result.acquired))
        table.add_row("Converted", str(result.converted))
        console.print(table)

    try:
        asyncio.run(run_async())
    except ApkLinkError as e:
        console.print(f"\n[bold red]✗ Link failed![/bold red]\n{e}")
        raise typer.Exit(1)


@app.command()
def status(
    output: Path = typer.Argument(..., help="Output JAR path whose state to show"),
) -> None:
    """Show the cached state recorded next to an output JAR."""
    store = SidecarStateStore(output.absolute())
    state = asyncio.run(store.describe())

    table = Table(title="Link State")
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("Output", state["output_path"])
    table.add_row("Output Exists", str(state["output_exists"]))
    table.add_row("Digest", state["digest"] or "-")
    table.add_row("Input Location", state["input_location"] or "-")
    table.add_row("Input Exists", str(state["input_exists"]))
    snapshot = state["snapshot"] or {}
    for key, value in snapshot.items():
        table.add_row(f"snapshot.{key}", str(value))
    if not snapshot:
        table.add_row("Snapshot", "-")

    console.print(table)


@app.command()
def config() -> None:
    """Show the effective tool configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Log Format", cfg.log_format)
    table.add_row("Build Dir", str(cfg.paths.build_dir))
    table.add_row("Output Dir", str(cfg.paths.output_dir))
    table.add_row("HTTP Timeout", f"{cfg.http.timeout_seconds:g}s")
    table.add_row("Progress Step", f"{cfg.http.progress_step_bytes} bytes")
    table.add_row("Catalog Endpoint", cfg.catalog.endpoint)
    table.add_row("dex2jar Path", str(cfg.tools.dex2jar_path or "(from PATH)"))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  APKLINK_LOG_LEVEL, APKLINK_LOG_FORMAT, APKLINK_BUILD_DIR, APKLINK_HTTP_TIMEOUT")
    console.print("  APKLINK_PROGRESS_STEP_BYTES, APKLINK_CATALOG_ENDPOINT, APKLINK_DEX2JAR_PATH")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
