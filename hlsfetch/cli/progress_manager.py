"""
Renders download progress with a Rich progress bar.
"""

import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

log = logging.getLogger("hlsfetch")


class ProgressManager:
    """
    A progress sink for the download engine.

    The instance itself is the `on_progress(segments_done, segments_total)`
    callback; the bar's total is learned from the first report.
    """

    def __init__(self, console: Console, description: str = "Downloading"):
        self.console = console
        self.description = description
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=40),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            MofNCompleteColumn(),
            TextColumn("segments"),
            "•",
            TimeElapsedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None
        self.segments_done = 0
        self.segments_total = 0

    def __call__(self, segments_done: int, segments_total: int) -> None:
        self.segments_done = segments_done
        self.segments_total = segments_total
        if self._task_id is None:
            self._task_id = self.progress.add_task(
                f"[cyan]{self.description}[/cyan]", total=segments_total
            )
        self.progress.update(
            self._task_id, completed=segments_done, total=segments_total
        )

    async def __aenter__(self) -> "ProgressManager":
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
        if exc_type is not None and self.segments_total:
            log.debug(
                f"Progress stopped at {self.segments_done}/{self.segments_total} "
                "segments."
            )
