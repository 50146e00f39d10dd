"""
The HLS download engine: resolves a manifest, fetches every segment
concurrently and assembles them into one ordered output file.
"""

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path

from hlsfetch.exceptions import EmptyPlaylistError, HlsFetchError
from hlsfetch.manifest.fetcher import ManifestFetcher
from hlsfetch.media.segment_fetcher import SegmentFetcher
from hlsfetch.media.session import SessionFactory, create_session
from hlsfetch.models.config import DownloadConfig
from hlsfetch.models.stats import DownloadStats
from hlsfetch.utils.backoff import BackoffStrategy, backoff_from_name
from hlsfetch.utils.path import resolve_output_path
from hlsfetch.utils.structured_logger import DownloadLogger

from .assembler import OrderedAssembler
from .cancel import CancelToken
from .failure_policy import FailurePolicy
from .scheduler import SegmentScheduler

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class HlsDownloader:
    """
    Downloads an HLS stream to a single file.

    Each call is independent: the playlist, the assembly buffer and the
    output file exist only for the duration of that call. A partial file is
    left on disk when a call fails or is cancelled.
    """

    def __init__(
        self,
        config: DownloadConfig | None = None,
        session_factory: SessionFactory | None = None,
        backoff: BackoffStrategy | None = None,
        event_logger: DownloadLogger | None = None,
    ):
        self.config = config or DownloadConfig()
        self.session_factory = session_factory or create_session
        self.backoff = backoff or backoff_from_name(
            self.config.backoff, self.config.retry_delay
        )
        self.event_logger = event_logger

    async def download(
        self,
        cancel_token: CancelToken | None,
        url: str,
        output_path: str | os.PathLike,
        headers: Mapping[str, str] | None = None,
    ) -> DownloadStats:
        """Downloads `url` to `output_path` without progress reporting."""
        return await self.download_with_progress(
            cancel_token, url, output_path, headers, None
        )

    async def download_with_progress(
        self,
        cancel_token: CancelToken | None,
        url: str,
        output_path: str | os.PathLike,
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadStats:
        """
        Downloads `url` to `output_path`, reporting (segments_done, segments_total).

        The callback receives (0, total) once the playlist is known, then one
        call per collected segment result.

        Returns:
            Counters for the completed download.

        Raises:
            PathError: The output path is invalid; raised before any request.
            ManifestError: The manifest could not be fetched or resolved.
            WriteError: The output file could not be written.
            DownloadIncompleteError: Too many segments were lost.
            DownloadCancelledError: The cancel token fired.
        """
        cancel_token = cancel_token or CancelToken()
        target = resolve_output_path(output_path, self.config.output_dir)

        if self.event_logger:
            self.event_logger.download_started(
                url, str(target), self.config.max_workers
            )

        try:
            stats = await self._run(cancel_token, url, target, headers, on_progress)
        except HlsFetchError as e:
            if self.event_logger:
                self.event_logger.download_failed(url, str(e), type(e).__name__)
            raise

        if self.event_logger:
            self.event_logger.download_completed(
                url,
                stats.segments_total,
                stats.segments_failed,
                stats.bytes_written,
                stats.elapsed,
            )
        return stats

    async def _run(
        self,
        cancel_token: CancelToken,
        url: str,
        target: Path,
        headers: Mapping[str, str] | None,
        on_progress: ProgressCallback | None,
    ) -> DownloadStats:
        config = self.config
        async with self.session_factory(config) as session:
            manifest_fetcher = ManifestFetcher(
                session, config.user_agent, config.max_playlist_depth
            )
            playlist = await manifest_fetcher.fetch(url, headers, cancel_token)
            if not playlist.segments:
                raise EmptyPlaylistError("playlist has no segments to download")

            total = len(playlist.segments)
            if self.event_logger:
                self.event_logger.playlist_resolved(
                    url, total, playlist.total_duration, playlist.end_list
                )
            log.info(
                f"Downloading {total} segments to [cyan]{target}[/cyan] "
                f"with {min(config.max_workers, total)} workers"
            )

            stats = DownloadStats(segments_total=total, output_path=target)
            policy = FailurePolicy(total, config.max_loss_ratio)
            fetcher = SegmentFetcher(
                session, config.max_attempts, self.backoff, config.user_agent
            )

            async with OrderedAssembler(target) as assembler, SegmentScheduler(
                fetcher, config.max_workers
            ) as scheduler:
                if on_progress:
                    on_progress(0, total)
                scheduler.start(playlist.segments, headers, cancel_token)

                for _ in range(total):
                    result = await scheduler.next_result()
                    policy.record(result)
                    if not result.ok and self.event_logger:
                        self.event_logger.segment_failed(result.index, str(result.error))

                    written = await assembler.add(result)
                    stats.record_result(result.ok, written)
                    if on_progress:
                        on_progress(stats.segments_done, total)

        stats.finish()
        policy.evaluate()
        return stats


async def download_to_file(
    url: str,
    output_path: str | os.PathLike,
    headers: Mapping[str, str] | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancelToken | None = None,
    config: DownloadConfig | None = None,
) -> DownloadStats:
    """Convenience wrapper: builds a downloader and runs one download."""
    downloader = HlsDownloader(config)
    return await downloader.download_with_progress(
        cancel_token, url, output_path, headers, on_progress
    )
