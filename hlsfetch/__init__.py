"""
hlsfetch: a concurrent HTTP Live Streaming downloader.
"""

__version__ = "0.1.0"

from hlsfetch.core.cancel import CancelToken
from hlsfetch.core.engine import HlsDownloader, download_to_file
from hlsfetch.models.config import DownloadConfig, TransportConfig

__all__ = [
    "CancelToken",
    "DownloadConfig",
    "HlsDownloader",
    "TransportConfig",
    "__version__",
    "download_to_file",
]
