"""
Line-oriented parsing of HLS media playlists.
"""

import logging
from urllib.parse import urljoin

from hlsfetch.models.playlist import Playlist, Segment

log = logging.getLogger(__name__)

STREAM_INF = "#EXT-X-STREAM-INF:"
EXTINF = "#EXTINF:"


def split_lines(text: str) -> list[str]:
    """Splits a manifest body into stripped lines, dropping a leading BOM."""
    return [line.strip() for line in text.lstrip("\ufeff").splitlines()]


def resolve_url(base_url: str, reference: str) -> str:
    """
    Resolves a segment or variant reference against the manifest's own URL.

    Absolute references are returned unchanged; relative ones replace the
    last path component of the base URL.
    """
    return urljoin(base_url, reference)


def is_uri_line(line: str) -> bool:
    return bool(line) and not line.startswith("#")


def is_master_playlist(lines: list[str]) -> bool:
    """A manifest is a master playlist if any line announces a variant stream."""
    return any(line.startswith(STREAM_INF) for line in lines)


def _parse_extinf(value: str) -> tuple[float, str]:
    duration_str, _, title = value.partition(",")
    try:
        duration = float(duration_str.strip())
    except ValueError:
        log.debug(f"Malformed segment duration '{duration_str}', using 0.")
        duration = 0.0
    return duration, title.strip()


def parse_media_playlist(lines: list[str], base_url: str) -> Playlist:
    """
    Builds a Playlist from the lines of a media playlist.

    Every #EXTINF directive is paired with the next non-comment line, which
    becomes the segment URL. URI lines without a preceding #EXTINF are
    ignored. Segment indexes are assigned contiguously in manifest order.
    """
    playlist = Playlist()
    pending_inf: tuple[float, str] | None = None

    for line in lines:
        if not line:
            continue

        if line.startswith("#EXTM3U"):
            continue
        elif line.startswith("#EXT-X-VERSION:"):
            playlist.version = line.removeprefix("#EXT-X-VERSION:").strip()
        elif line.startswith("#EXT-X-TARGETDURATION:"):
            value = line.removeprefix("#EXT-X-TARGETDURATION:")
            try:
                playlist.target_duration = float(value)
            except ValueError:
                log.debug(f"Ignoring malformed target duration '{value}'.")
        elif line.startswith("#EXT-X-MEDIA-SEQUENCE:"):
            value = line.removeprefix("#EXT-X-MEDIA-SEQUENCE:")
            try:
                playlist.media_sequence = int(value)
            except ValueError:
                log.debug(f"Ignoring malformed media sequence '{value}'.")
        elif line.startswith("#EXT-X-PLAYLIST-TYPE:"):
            playlist.playlist_type = line.removeprefix("#EXT-X-PLAYLIST-TYPE:").strip()
        elif line.startswith("#EXT-X-ENDLIST"):
            playlist.end_list = True
        elif line.startswith(EXTINF):
            pending_inf = _parse_extinf(line.removeprefix(EXTINF))
        elif is_uri_line(line) and pending_inf is not None:
            duration, title = pending_inf
            playlist.segments.append(
                Segment(
                    url=resolve_url(base_url, line),
                    index=len(playlist.segments),
                    duration=duration,
                    title=title,
                )
            )
            pending_inf = None

    return playlist
