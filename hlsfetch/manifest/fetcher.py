"""
Fetches HLS manifests and resolves master playlists down to a media playlist.
"""

import asyncio
import logging
from collections.abc import Mapping

import aiohttp

from hlsfetch.core.cancel import CancelToken
from hlsfetch.exceptions import ManifestError, NoSuitableStreamError
from hlsfetch.media.session import build_headers
from hlsfetch.models.config import DEFAULT_USER_AGENT
from hlsfetch.models.playlist import Playlist

from .parser import is_master_playlist, parse_media_playlist, split_lines
from .variants import select_best_variant

log = logging.getLogger(__name__)


class ManifestFetcher:
    """
    Retrieves a manifest and returns the media playlist it ultimately refers to.

    Master playlists are resolved to their highest-bandwidth variant and
    fetched again, up to `max_depth` levels of nesting.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        user_agent: str = DEFAULT_USER_AGENT,
        max_depth: int = 3,
    ):
        self.session = session
        self.user_agent = user_agent
        self.max_depth = max_depth

    async def fetch(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Playlist:
        cancel_token = cancel_token or CancelToken()
        request_headers = build_headers(headers, self.user_agent)

        for _ in range(self.max_depth + 1):
            lines = await self._fetch_lines(url, request_headers, cancel_token)
            if not is_master_playlist(lines):
                playlist = parse_media_playlist(lines, url)
                log.debug(
                    f"Parsed media playlist {url}: {len(playlist.segments)} segments, "
                    f"target duration {playlist.target_duration}s"
                )
                return playlist

            variant_url = select_best_variant(lines, url)
            if variant_url is None:
                raise NoSuitableStreamError("no suitable stream found in master playlist")
            log.info(f"Master playlist resolved to variant [dim]{variant_url}[/dim]")
            url = variant_url

        raise ManifestError(
            f"master playlists nested deeper than {self.max_depth} levels"
        )

    async def _fetch_lines(
        self, url: str, headers: dict[str, str], cancel_token: CancelToken
    ) -> list[str]:
        try:
            text = await cancel_token.run(self._get_text(url, headers))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ManifestError(f"failed to fetch playlist {url}: {e!r}") from e
        return split_lines(text)

    async def _get_text(self, url: str, headers: dict[str, str]) -> str:
        async with self.session.get(url, headers=headers) as response:
            if response.status != 200:
                raise ManifestError(
                    f"failed to fetch playlist {url}: "
                    f"HTTP {response.status}: {response.reason}"
                )
            return await response.text(errors="replace")
