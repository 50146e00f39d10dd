"""
Defines custom exceptions for the download engine to allow for more specific error handling.
"""

from hlsfetch.models.stats import compute_loss_ratio


class HlsFetchError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(HlsFetchError):
    """Raised for issues related to configuration loading or validation."""


class ManifestError(HlsFetchError):
    """Raised when a manifest cannot be fetched or parsed. Always fatal."""


class NoSuitableStreamError(ManifestError):
    """Raised when a master playlist lists no usable variant streams."""


class EmptyPlaylistError(ManifestError):
    """Raised when the resolved media playlist has no segments."""


class PathError(HlsFetchError):
    """Raised when the output path is invalid or escapes the output directory."""


class WriteError(HlsFetchError):
    """Raised when flushing a segment to the output file fails."""


class DownloadCancelledError(HlsFetchError):
    """Raised when the cancel token fires before the download completes."""


class SegmentError(HlsFetchError):
    """
    Raised when a single segment could not be fetched after all retries.

    Not fatal on its own; the failure policy decides whether the download
    as a whole survives it.
    """

    def __init__(self, index: int, url: str, message: str):
        super().__init__(f"segment {index}: {message}")
        self.index = index
        self.url = url


class DownloadIncompleteError(HlsFetchError):
    """Raised when more segments were lost than the failure policy tolerates."""

    def __init__(self, failed: int, total: int, first_error: Exception | None):
        ratio = compute_loss_ratio(failed, total)
        super().__init__(
            f"download incomplete: {failed}/{total} segments failed "
            f"({ratio:.0%}): {first_error}"
        )
        self.failed = failed
        self.total = total
        self.first_error = first_error
