"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import contextlib
import logging
import os
import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from hlsfetch import __version__
from hlsfetch.core.cancel import CancelToken
from hlsfetch.core.engine import HlsDownloader
from hlsfetch.exceptions import ConfigurationError
from hlsfetch.manifest.fetcher import ManifestFetcher
from hlsfetch.media.session import create_session
from hlsfetch.models.config import DownloadConfig
from hlsfetch.storage.config_manager import ConfigManager
from hlsfetch.utils.formatting import parse_header
from hlsfetch.utils.path import default_filename
from hlsfetch.utils.structured_logger import create_structured_logger

from .formatters import print_config, print_playlist_summary, print_summary_panel
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("hlsfetch")

app = typer.Typer(
    name="hlsfetch",
    help="A concurrent HLS stream downloader. Use 'hlsfetch <command> --help' for more info.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "hlsfetch"


CONFIG_FILE = get_config_dir() / "config.ini"

ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to the INI config file.", show_default=False
)
HeaderOption = typer.Option(
    None,
    "--header",
    "-H",
    help="Extra request header, e.g. 'Referer: https://site/'. Repeatable.",
)


def _parse_headers(raw_headers: list[str] | None) -> dict[str, str]:
    headers = {}
    for raw in raw_headers or []:
        try:
            name, value = parse_header(raw)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--header") from e
        headers[name] = value
    return headers


def _load_config(config_file: Path | None, cli_options: dict) -> DownloadConfig:
    config_manager = ConfigManager(config_file or CONFIG_FILE)
    return config_manager.load_config(
        {key: value for key, value in cli_options.items() if value is not None}
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
    config_file: Path | None = ConfigOption,
):
    """HLS Downloader CLI"""
    if version:
        console.print(f"[bold]hlsfetch[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    if verbose >= 1:
        logging.getLogger("hlsfetch").setLevel("DEBUG")

    if show_config:
        path = config_file or CONFIG_FILE
        print_config(console, path, _load_config(path, {}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    config_file: Path | None = ConfigOption,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config file without asking."
    ),
):
    """Write a config file with default settings."""
    path = config_file or CONFIG_FILE
    if (
        path.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(path).save_new_config()
    console.print(f"[bold green]✓ Configuration saved to '{path}'[/bold green]")


@app.command(name="download")
def download_command(
    url: str = typer.Argument(..., help="URL of a master or media playlist (.m3u8)."),
    output: Path | None = typer.Option(
        None,
        "-o",
        "--output",
        help="Output file. Defaults to a name derived from the URL.",
        show_default=False,
    ),
    header: list[str] | None = HeaderOption,
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Concurrent segment downloads (default 8)."
    ),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Attempts per segment before giving up (default 5)."
    ),
    max_loss: float | None = typer.Option(
        None,
        "--max-loss",
        help="Fraction of segments allowed to fail (default 0.05).",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        help="Refuse to write outside this directory.",
        show_default=False,
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        help="Write JSON-lines download events to this directory.",
        show_default=False,
    ),
    config_file: Path | None = ConfigOption,
):
    """Download an HLS stream into a single file."""
    headers = _parse_headers(header)
    try:
        config = _load_config(
            config_file,
            {
                "max_workers": workers,
                "max_attempts": attempts,
                "max_loss_ratio": max_loss,
                "output_dir": output_dir,
            },
        )
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e

    output_path = output or Path(default_filename(url))

    async def _download_async():
        cancel_token = CancelToken()
        loop = asyncio.get_running_loop()
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(
                signal.SIGINT, cancel_token.cancel, "interrupted by user"
            )

        base_logger, event_logger = create_structured_logger(
            log_dir, enable_json=log_dir is not None
        )
        with base_logger:
            downloader = HlsDownloader(config, event_logger=event_logger)
            async with ProgressManager(console) as progress:
                stats = await downloader.download_with_progress(
                    cancel_token, url, output_path, headers, progress
                )
        print_summary_panel(console, stats)

    asyncio.run(_download_async())


@app.command()
def inspect(
    url: str = typer.Argument(..., help="URL of a master or media playlist (.m3u8)."),
    header: list[str] | None = HeaderOption,
    config_file: Path | None = ConfigOption,
):
    """Resolve a playlist and show what would be downloaded."""
    headers = _parse_headers(header)
    config = _load_config(config_file, {})

    async def _inspect_async():
        async with create_session(config) as session:
            fetcher = ManifestFetcher(
                session, config.user_agent, config.max_playlist_depth
            )
            playlist = await fetcher.fetch(url, headers)
        print_playlist_summary(console, url, playlist)

    asyncio.run(_inspect_async())
