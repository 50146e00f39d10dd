"""
Plain data structures describing a parsed HLS playlist and per-segment results.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Segment:
    """One media segment, indexed 0..N-1 in manifest order."""

    url: str
    index: int
    duration: float = 0.0
    title: str = ""


@dataclass
class Playlist:
    """A media playlist. Master playlists are resolved before one is built."""

    version: str = ""
    target_duration: float = 0.0
    media_sequence: int = 0
    segments: list[Segment] = field(default_factory=list)
    end_list: bool = False
    playlist_type: str = ""

    @property
    def total_duration(self) -> float:
        return sum(segment.duration for segment in self.segments)


@dataclass(frozen=True)
class Variant:
    """An alternate-quality stream listed in a master playlist."""

    url: str
    bandwidth: int = 0


@dataclass(frozen=True)
class JobResult:
    """The outcome of fetching one segment: either data or an error."""

    index: int
    data: bytes | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None
