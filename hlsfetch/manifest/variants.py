"""
Variant selection for master (multi-variant) playlists.
"""

import logging
import re

from hlsfetch.models.playlist import Variant

from .parser import STREAM_INF, is_uri_line, resolve_url

log = logging.getLogger(__name__)

# Anchored on the attribute boundary so AVERAGE-BANDWIDTH is not picked up.
_BANDWIDTH_RE = re.compile(r"(?:^|,)\s*BANDWIDTH=(\d+)")


def parse_bandwidth(stream_inf: str) -> int:
    """Extracts BANDWIDTH from a stream-info tag, 0 if absent or malformed."""
    attributes = stream_inf.removeprefix(STREAM_INF)
    match = _BANDWIDTH_RE.search(attributes)
    return int(match.group(1)) if match else 0


def parse_variants(lines: list[str], base_url: str) -> list[Variant]:
    """Pairs each stream-info tag with the next URI line that follows it."""
    variants: list[Variant] = []
    pending_bandwidth: int | None = None

    for line in lines:
        if line.startswith(STREAM_INF):
            pending_bandwidth = parse_bandwidth(line)
        elif is_uri_line(line) and pending_bandwidth is not None:
            variants.append(
                Variant(url=resolve_url(base_url, line), bandwidth=pending_bandwidth)
            )
            pending_bandwidth = None

    return variants


def select_best_variant(lines: list[str], base_url: str) -> str | None:
    """
    Returns the URL of the highest-bandwidth variant, or None if there are none.

    Among variants with equal maximum bandwidth the first one listed wins.
    """
    variants = parse_variants(lines, base_url)
    if not variants:
        return None

    best = variants[0]
    for variant in variants[1:]:
        if variant.bandwidth > best.bandwidth:
            best = variant

    log.debug(
        f"Selected variant {best.url} ({best.bandwidth} bps) "
        f"out of {len(variants)} streams."
    )
    return best.url
