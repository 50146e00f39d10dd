"""
Manifest Layer.

This package fetches HLS manifests, parses media playlists and resolves
master playlists to their best variant.
"""

from .fetcher import ManifestFetcher
from .parser import is_master_playlist, parse_media_playlist, resolve_url
from .variants import select_best_variant

__all__ = [
    "ManifestFetcher",
    "is_master_playlist",
    "parse_media_playlist",
    "resolve_url",
    "select_best_variant",
]
