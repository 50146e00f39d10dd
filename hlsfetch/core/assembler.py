"""
Writes concurrently fetched segments to the output file in manifest order.
"""

import logging
from pathlib import Path

import aiofiles

from hlsfetch.exceptions import WriteError
from hlsfetch.models.playlist import JobResult
from hlsfetch.utils.path import create_dir, owner_only_opener

log = logging.getLogger(__name__)


class OrderedAssembler:
    """
    Buffers out-of-order segment results and flushes contiguous runs to disk.

    The assembler is the only writer of the output file. Results are kept
    only until every predecessor has been flushed, so memory is bounded by
    how far the fastest worker runs ahead, not by playlist length. A failed
    segment is buffered as None and skipped at flush time, letting the
    cursor move past it.

    Usage:
        async with OrderedAssembler(path) as assembler:
            await assembler.add(result)
    """

    def __init__(self, path: Path):
        self.path = path
        self.next_index = 0
        self.bytes_written = 0
        self._pending: dict[int, bytes | None] = {}
        self._file = None

    @property
    def buffered(self) -> int:
        """Number of results waiting for a predecessor."""
        return len(self._pending)

    async def open(self) -> None:
        try:
            create_dir(self.path.parent)
            self._file = await aiofiles.open(self.path, "wb", opener=owner_only_opener)
        except OSError as e:
            raise WriteError(f"failed to create output file '{self.path}': {e}") from e
        log.debug(f"Opened output file {self.path}")

    async def close(self) -> None:
        if self._file is not None:
            await self._file.close()
            self._file = None

    async def __aenter__(self) -> "OrderedAssembler":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def add(self, result: JobResult) -> int:
        """
        Accepts one result and flushes every segment that is now contiguous.

        Returns:
            The number of bytes written by this call.

        Raises:
            ValueError: If the index was already received or flushed.
            WriteError: If writing to the output file fails.
        """
        if self._file is None:
            raise RuntimeError("OrderedAssembler is not open")
        index = result.index
        if index < self.next_index or index in self._pending:
            raise ValueError(f"duplicate result for segment {index}")

        self._pending[index] = result.data if result.ok else None

        written = 0
        while self.next_index in self._pending:
            data = self._pending.pop(self.next_index)
            if data is not None:
                try:
                    await self._file.write(data)
                except OSError as e:
                    raise WriteError(
                        f"failed to write segment {self.next_index}: {e}"
                    ) from e
                written += len(data)
            self.next_index += 1

        self.bytes_written += written
        return written
