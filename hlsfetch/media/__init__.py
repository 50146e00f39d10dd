"""
Media Transport Layer.

This package owns the HTTP session setup and the per-segment downloader
with its retry logic.
"""

from .segment_fetcher import SegmentFetcher
from .session import build_headers, create_session

__all__ = ["SegmentFetcher", "build_headers", "create_session"]
