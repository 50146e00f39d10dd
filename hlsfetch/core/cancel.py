"""
Cooperative cancellation shared by every fetch in a download call.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from hlsfetch.exceptions import DownloadCancelledError

T = TypeVar("T")


class CancelToken:
    """
    A one-shot cancellation flag that awaiting code can race against.

    The token is created by the caller and handed to the engine; calling
    cancel() makes every pending or future `run()` raise
    DownloadCancelledError.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason = "download cancelled"

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str | None = None) -> None:
        if reason:
            self.reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DownloadCancelledError(self.reason)

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Awaits `awaitable` unless the token fires first.

        If cancellation wins, the operation is cancelled and
        DownloadCancelledError is raised.
        """
        task = asyncio.ensure_future(awaitable)
        if self._event.is_set():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise DownloadCancelledError(self.reason)

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise DownloadCancelledError(self.reason)
