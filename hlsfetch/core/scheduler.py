"""
Fans segment downloads out to a fixed pool of asyncio worker tasks.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from hlsfetch.exceptions import DownloadCancelledError, SegmentError
from hlsfetch.media.segment_fetcher import SegmentFetcher
from hlsfetch.models.playlist import JobResult, Segment

from .cancel import CancelToken

log = logging.getLogger(__name__)


class SegmentScheduler:
    """
    Runs one job per segment across `max_workers` concurrent workers.

    The result queue is sized to the total number of segments, so a worker
    can always deliver its result without waiting for the consumer.

    Usage:
        async with SegmentScheduler(fetcher, 8) as scheduler:
            scheduler.start(segments, headers, cancel_token)
            for _ in segments:
                result = await scheduler.next_result()
    """

    def __init__(self, fetcher: SegmentFetcher, max_workers: int = 8):
        self.fetcher = fetcher
        self.max_workers = max_workers
        self._jobs: asyncio.Queue[Segment] = asyncio.Queue()
        self._results: asyncio.Queue[JobResult] | None = None
        self._workers: list[asyncio.Task] = []
        self._cancel_token: CancelToken | None = None

    async def __aenter__(self) -> "SegmentScheduler":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    def start(
        self,
        segments: Sequence[Segment],
        headers: Mapping[str, str] | None,
        cancel_token: CancelToken,
    ) -> None:
        if self._workers:
            raise RuntimeError("SegmentScheduler has already been started")

        self._cancel_token = cancel_token
        self._results = asyncio.Queue(maxsize=len(segments))
        for segment in segments:
            self._jobs.put_nowait(segment)

        worker_count = min(self.max_workers, len(segments))
        self._workers = [
            asyncio.create_task(
                self._worker(headers, cancel_token), name=f"segment-worker-{i}"
            )
            for i in range(worker_count)
        ]
        log.debug(f"Started {worker_count} workers for {len(segments)} segments")

    async def next_result(self) -> JobResult:
        """
        Waits for the next completed segment, in completion order.

        Raises:
            DownloadCancelledError: If the cancel token fires while waiting.
        """
        if self._results is None or self._cancel_token is None:
            raise RuntimeError("SegmentScheduler has not been started")
        self._cancel_token.raise_if_cancelled()
        return await self._cancel_token.run(self._results.get())

    async def shutdown(self) -> None:
        """Cancels any still-running workers and waits for them to exit."""
        for task in self._workers:
            if not task.done():
                task.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)

    async def _worker(
        self, headers: Mapping[str, str] | None, cancel_token: CancelToken
    ) -> None:
        while not cancel_token.cancelled:
            try:
                segment = self._jobs.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                data = await self.fetcher.fetch(segment, headers, cancel_token)
                result = JobResult(index=segment.index, data=data)
            except DownloadCancelledError:
                return
            except SegmentError as e:
                log.debug(f"Segment {segment.index} permanently failed: {e}")
                result = JobResult(index=segment.index, error=e)
            except Exception as e:
                log.exception(f"Unexpected error fetching segment {segment.index}")
                error = SegmentError(segment.index, segment.url, repr(e))
                error.__cause__ = e
                result = JobResult(index=segment.index, error=error)

            self._results.put_nowait(result)
