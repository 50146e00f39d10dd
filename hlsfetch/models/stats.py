"""
Dataclass for tracking the counters of a single download call.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path


def compute_loss_ratio(failed: int, total: int) -> float:
    """Fraction of segments that were permanently lost."""
    return failed / total if total else 0.0


@dataclass
class DownloadStats:
    """Segment and byte counters for one download, including real-time speed."""

    segments_total: int = 0
    segments_done: int = 0
    segments_failed: int = 0
    bytes_written: int = 0
    output_path: Path | None = None

    current_speed_bps: float = 0.0
    peak_speed_bps: float = 0.0
    _speed_samples: list[float] = field(default_factory=list, repr=False)
    _started_at: float = field(default=0.0, repr=False)
    _finished_at: float | None = field(default=None, repr=False)
    _last_progress_time: float = field(default=0.0, repr=False)
    _last_progress_bytes: int = field(default=0, repr=False)

    def __post_init__(self):
        self._started_at = time.monotonic()
        self._last_progress_time = self._started_at

    @property
    def loss_ratio(self) -> float:
        return compute_loss_ratio(self.segments_failed, self.segments_total)

    @property
    def elapsed(self) -> float:
        end = self._finished_at if self._finished_at is not None else time.monotonic()
        return end - self._started_at

    def record_result(self, ok: bool, bytes_flushed: int) -> None:
        """Counts one collected segment result and the bytes it caused to be flushed."""
        self.segments_done += 1
        if not ok:
            self.segments_failed += 1
        self.bytes_written += bytes_flushed
        self._update_speed_stats()

    def finish(self) -> None:
        self._finished_at = time.monotonic()

    def _update_speed_stats(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_progress_time

        # Update speed roughly twice per second
        if elapsed > 0.5:
            bytes_diff = self.bytes_written - self._last_progress_bytes
            if bytes_diff > 0:
                self._speed_samples.append(bytes_diff / elapsed)
                # Keep a sliding window of the last 10 speed samples
                if len(self._speed_samples) > 10:
                    self._speed_samples.pop(0)
                self.current_speed_bps = sum(self._speed_samples) / len(
                    self._speed_samples
                )
                self.peak_speed_bps = max(self.peak_speed_bps, self.current_speed_bps)

            self._last_progress_time = now
            self._last_progress_bytes = self.bytes_written
