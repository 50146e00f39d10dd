"""
Decides whether a download with lost segments still counts as a success.
"""

import logging

from hlsfetch.exceptions import DownloadIncompleteError
from hlsfetch.models.playlist import JobResult
from hlsfetch.models.stats import compute_loss_ratio

log = logging.getLogger(__name__)


class FailurePolicy:
    """
    Tolerates a small fraction of permanently failed segments.

    A few dropped segments in a long video are brief glitches; failing the
    whole download over them is worse. Above `max_loss_ratio` the download
    fails, wrapping the first segment error that was recorded.
    """

    def __init__(self, total: int, max_loss_ratio: float = 0.05):
        self.total = total
        self.max_loss_ratio = max_loss_ratio
        self.failed = 0
        self.first_error: Exception | None = None

    @property
    def loss_ratio(self) -> float:
        return compute_loss_ratio(self.failed, self.total)

    def record(self, result: JobResult) -> None:
        if result.ok:
            return
        self.failed += 1
        if self.first_error is None:
            self.first_error = result.error

    def evaluate(self) -> None:
        """
        Raises DownloadIncompleteError if the loss ratio exceeds the threshold.
        """
        if not self.failed:
            return

        if self.loss_ratio > self.max_loss_ratio:
            raise DownloadIncompleteError(
                self.failed, self.total, self.first_error
            ) from self.first_error

        log.warning(
            f"[yellow]{self.failed}/{self.total} segments could not be downloaded "
            f"({self.loss_ratio:.1%}), minor glitches possible.[/yellow]"
        )
