"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hlsfetch.models.config import DownloadConfig
from hlsfetch.models.playlist import Playlist
from hlsfetch.models.stats import DownloadStats
from hlsfetch.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: BaseException, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ManifestError": [
            "• Check that the stream URL is reachable and not expired.",
            "• Many hosts require a Referer/Origin header: pass it with -H.",
        ],
        "NoSuitableStreamError": [
            "• The master playlist lists no variant streams.",
            "• Try the URL of a media playlist directly.",
        ],
        "EmptyPlaylistError": [
            "• The media playlist contains no segments.",
            "• Live playlists may need to be requested again later.",
        ],
        "PathError": [
            "• Choose an output path inside the configured output directory.",
            "• Paths containing '..' are refused.",
        ],
        "WriteError": [
            "• Check free disk space and write permissions.",
        ],
        "DownloadIncompleteError": [
            "• Too many segments failed after retries.",
            "• Reduce `--workers` if the CDN is rate-limiting.",
            "• Raise `--max-loss` to accept more missing segments.",
        ],
        "ConfigurationError": [
            "• Fix the configuration file or run `hlsfetch init --force`.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate network throttling.",
            "• Try reducing the number of `--workers`.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(console: Console, config_path: Path, config: DownloadConfig):
    """Displays the effective configuration."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Workers:", str(config.max_workers))
    table.add_row("Attempts:", str(config.max_attempts))
    table.add_row("Backoff:", f"{config.backoff} ({config.retry_delay}s)")
    table.add_row("Max Loss:", f"{config.max_loss_ratio:.1%}")
    table.add_row("HTTP Version:", config.transport.http_version)
    table.add_row("Connections:", str(config.connection_limit))
    table.add_row("Request Timeout:", format_duration(config.transport.request_timeout))
    table.add_row("Output Dir:", str(config.output_dir or "[dim]unrestricted[/dim]"))

    console.print(
        Panel(
            table,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
            expand=False,
        )
    )


def print_playlist_summary(console: Console, url: str, playlist: Playlist):
    """Displays what a resolved media playlist contains."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()

    table.add_row("Segments:", f"[green]{len(playlist.segments)}[/green]")
    table.add_row("Duration:", format_duration(playlist.total_duration))
    table.add_row("Target Duration:", f"{playlist.target_duration:g}s")
    table.add_row("Media Sequence:", str(playlist.media_sequence))
    table.add_row("Type:", playlist.playlist_type or "[dim]unspecified[/dim]")
    table.add_row("Complete:", "✓" if playlist.end_list else "✗ (live)")
    if playlist.segments:
        table.add_row("First Segment:", f"[dim]{playlist.segments[0].url}[/dim]")

    console.print(
        Panel(table, title=f"[bold]{url}[/bold]", border_style="blue", expand=False)
    )


def print_summary_panel(console: Console, stats: DownloadStats):
    """Displays the final summary of a download."""
    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")

    ok_segments = stats.segments_total - stats.segments_failed
    stats_table.add_row(
        "✓ Segments:", f"[bold green]{ok_segments}/{stats.segments_total}[/bold green]"
    )
    if stats.segments_failed > 0:
        stats_table.add_row(
            "⚠ Missing:",
            f"[yellow]{stats.segments_failed} ({stats.loss_ratio:.1%})[/yellow]",
        )

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row("Total Size:", f"[cyan]{format_size(stats.bytes_written)}[/cyan]")

    duration_s = stats.elapsed
    avg_speed = stats.bytes_written / duration_s if duration_s > 0 else 0
    stats_table.add_row("Avg. Speed:", f"[magenta]{format_size(avg_speed)}/s[/magenta]")
    if stats.peak_speed_bps > 0:
        stats_table.add_row(
            "Peak Speed:", f"[magenta]{format_size(stats.peak_speed_bps)}/s[/magenta]"
        )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")
    stats_table.add_row("Output:", f"[dim]{stats.output_path}[/dim]")

    console.print()
    console.print(
        Panel(
            stats_table,
            title="🎬 [bold]Download Complete![/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
