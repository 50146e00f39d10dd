import asyncio

import pytest

from hlsfetch.core.cancel import CancelToken
from hlsfetch.exceptions import DownloadCancelledError, HlsFetchError


def test_run_returns_result_when_not_cancelled(run):
    async def scenario():
        return await CancelToken().run(asyncio.sleep(0, result="done"))

    assert run(scenario()) == "done"


def test_run_propagates_operation_errors(run):
    async def boom():
        raise ValueError("bad")

    with pytest.raises(ValueError, match="bad"):
        run(CancelToken().run(boom()))


def test_cancel_interrupts_pending_operation(run):
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def scenario():
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel, "stop")
        await token.run(slow())

    with pytest.raises(DownloadCancelledError, match="stop"):
        run(asyncio.wait_for(scenario(), timeout=5))
    assert cancelled == [True]


def test_already_cancelled_token_never_awaits(run):
    started = []

    async def op():
        started.append(True)

    async def scenario():
        token = CancelToken()
        token.cancel()
        assert token.cancelled
        await token.run(op())

    with pytest.raises(DownloadCancelledError):
        run(scenario())
    assert started == []


def test_raise_if_cancelled():
    token = CancelToken()
    token.raise_if_cancelled()

    token.cancel()

    with pytest.raises(DownloadCancelledError) as exc_info:
        token.raise_if_cancelled()
    assert isinstance(exc_info.value, HlsFetchError)
    assert str(exc_info.value) == "download cancelled"


def test_caller_cancellation_waits_for_operation_teardown(run):
    events = []

    async def slow():
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            await asyncio.sleep(0)
            events.append("closed")
            raise

    async def scenario():
        outer = asyncio.create_task(CancelToken().run(slow()))
        await asyncio.sleep(0.01)
        outer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await outer
        return list(events)

    assert run(scenario()) == ["closed"]
