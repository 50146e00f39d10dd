"""
Downloads individual HLS segments with bounded retries and pluggable backoff.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

import aiohttp

from hlsfetch.core.cancel import CancelToken
from hlsfetch.exceptions import SegmentError
from hlsfetch.models.config import DEFAULT_USER_AGENT
from hlsfetch.models.playlist import Segment
from hlsfetch.utils.backoff import BackoffStrategy, LinearBackoff

from .session import build_headers

log = logging.getLogger(__name__)

RETRYABLE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class SegmentFetcher:
    """Fetches one segment's bytes, retrying network and HTTP failures."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_attempts: int = 5,
        backoff: BackoffStrategy | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.max_attempts = max_attempts
        self.backoff = backoff or LinearBackoff()
        self.user_agent = user_agent
        self._sleep = sleep

    async def fetch(
        self,
        segment: Segment,
        headers: Mapping[str, str] | None,
        cancel_token: CancelToken,
    ) -> bytes:
        """
        Returns the body of `segment`, or raises SegmentError once all attempts fail.

        Raises DownloadCancelledError as soon as the token fires, including
        while waiting out a backoff delay.
        """
        request_headers = build_headers(headers, self.user_agent)
        last_exception: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            cancel_token.raise_if_cancelled()
            try:
                return await cancel_token.run(self._get(segment.url, request_headers))
            except RETRYABLE_ERRORS as e:
                last_exception = e
                log.debug(
                    f"Segment {segment.index} attempt {attempt}/{self.max_attempts} "
                    f"failed: {e!r}"
                )
                if attempt < self.max_attempts:
                    await cancel_token.run(self._sleep(self.backoff(attempt)))

        raise SegmentError(
            segment.index,
            segment.url,
            f"failed after {self.max_attempts} attempts: {last_exception!r}",
        ) from last_exception

    async def _get(self, url: str, headers: dict[str, str]) -> bytes:
        async with self.session.get(url, headers=headers) as response:
            if response.status != 200:
                raise aiohttp.ClientResponseError(
                    response.request_info,
                    response.history,
                    status=response.status,
                    message=response.reason or "",
                    headers=response.headers,
                )
            return await response.read()
