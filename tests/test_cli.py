from rich.console import Console
from typer.testing import CliRunner

from hlsfetch import __version__
from hlsfetch.cli.app import app
from hlsfetch.cli.formatters import format_error_with_suggestions, print_summary_panel
from hlsfetch.cli.progress_manager import ProgressManager
from hlsfetch.exceptions import DownloadIncompleteError
from hlsfetch.models.stats import DownloadStats
from hlsfetch.storage.config_manager import ConfigManager

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_config(tmp_path):
    path = tmp_path / "config.ini"

    result = runner.invoke(app, ["init", "--config", str(path)])

    assert result.exit_code == 0
    assert path.is_file()
    assert ConfigManager(path).load_config().max_workers == 8


def test_init_keeps_existing_config_unless_confirmed(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = 3\n")

    result = runner.invoke(app, ["init", "--config", str(path)], input="n\n")

    assert result.exit_code == 1
    assert "max_workers = 3" in path.read_text()


def test_init_force_overwrites(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = 3\n")

    result = runner.invoke(app, ["init", "--config", str(path), "--force"])

    assert result.exit_code == 0
    assert ConfigManager(path).load_config().max_workers == 8


def test_show_config(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = 3\n")

    result = runner.invoke(app, ["--config", str(path), "--show-config"])

    assert result.exit_code == 0
    assert "Workers:" in result.output
    assert "3" in result.output


def test_download_rejects_malformed_header():
    result = runner.invoke(
        app, ["download", "https://cdn.invalid/index.m3u8", "-H", "no-colon"]
    )

    assert result.exit_code == 2


def test_download_rejects_invalid_settings(tmp_path):
    result = runner.invoke(
        app,
        [
            "download",
            "https://cdn.invalid/index.m3u8",
            "--workers",
            "0",
            "--config",
            str(tmp_path / "none.ini"),
        ],
    )

    assert result.exit_code == 1
    assert "validation failed" in result.output


def test_progress_manager_tracks_reports():
    console = Console(file=None, force_terminal=False, quiet=True)
    manager = ProgressManager(console)

    manager(0, 10)
    manager(4, 10)

    task = manager.progress.tasks[0]
    assert task.total == 10
    assert task.completed == 4
    assert (manager.segments_done, manager.segments_total) == (4, 10)


def test_error_panel_includes_suggestions():
    console = Console(record=True, width=120)
    error = DownloadIncompleteError(3, 20, None)

    console.print(format_error_with_suggestions(error))

    text = console.export_text()
    assert "DownloadIncompleteError" in text
    assert "--max-loss" in text


def test_summary_panel_shows_resolved_output_path(tmp_path):
    console = Console(record=True, width=200)
    target = tmp_path / "downloads" / "v.ts"
    stats = DownloadStats(segments_total=4, segments_done=4, output_path=target)

    print_summary_panel(console, stats)

    assert str(target) in console.export_text()
