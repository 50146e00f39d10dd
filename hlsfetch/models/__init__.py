"""
Data Models Layer.

This package contains the Pydantic configuration models and the plain
dataclasses that describe playlists, segment results and download statistics.
"""

from .config import DownloadConfig, TransportConfig
from .playlist import JobResult, Playlist, Segment, Variant
from .stats import DownloadStats

__all__ = [
    "DownloadConfig",
    "DownloadStats",
    "JobResult",
    "Playlist",
    "Segment",
    "TransportConfig",
    "Variant",
]
