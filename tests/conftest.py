import asyncio
from collections import Counter

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


class FakeCdn:
    """An in-process HLS origin serving one media playlist and its segments."""

    def __init__(self, segments, fail=(), flaky=None, delays=None, blocking=()):
        self.segments = list(segments)
        self.fail = set(fail)
        self.flaky = dict(flaky or {})
        self.delays = dict(delays or {})
        self.blocking = set(blocking)
        self.release = asyncio.Event()
        self.requests = Counter()
        self.headers_seen = []
        self.masters = {}
        self.playlists = {"/stream/index.m3u8": self.media_playlist()}

    def media_playlist(self, prefix="seg"):
        lines = [
            "#EXTM3U",
            "#EXT-X-VERSION:3",
            "#EXT-X-TARGETDURATION:4",
            "#EXT-X-MEDIA-SEQUENCE:0",
            "#EXT-X-PLAYLIST-TYPE:VOD",
        ]
        for i in range(len(self.segments)):
            lines += ["#EXTINF:4.000,", f"{prefix}{i}.ts"]
        lines.append("#EXT-X-ENDLIST")
        return "\n".join(lines) + "\n"

    @property
    def expected(self):
        return b"".join(
            data for i, data in enumerate(self.segments) if i not in self.fail
        )

    def make_app(self):
        app = web.Application()
        app.router.add_get(r"/stream/seg{index:\d+}.ts", self.handle_segment)
        app.router.add_get("/{path:.*}", self.handle_playlist)
        return app

    async def handle_playlist(self, request):
        self.requests[request.path] += 1
        self.headers_seen.append(request.headers.copy())
        body = self.playlists.get(request.path)
        if body is None:
            return web.Response(status=404, text="not found")
        return web.Response(text=body, content_type="application/vnd.apple.mpegurl")

    async def handle_segment(self, request):
        index = int(request.match_info["index"])
        self.requests[index] += 1
        self.headers_seen.append(request.headers.copy())

        if index in self.blocking:
            await self.release.wait()
        if index in self.delays:
            await asyncio.sleep(self.delays[index])
        if index in self.fail:
            return web.Response(status=500, text="boom")
        if self.flaky.get(index, 0) > 0:
            self.flaky[index] -= 1
            return web.Response(status=503, text="try again")
        return web.Response(body=self.segments[index], content_type="video/mp2t")


async def serve(cdn, fn):
    """Starts `cdn` on a local port, awaits fn(server) and shuts down."""
    server = TestServer(cdn.make_app())
    await server.start_server()
    try:
        return await fn(server)
    finally:
        cdn.release.set()
        await server.close()


def url_for(server, path):
    return str(server.make_url(path))


def no_backoff(attempt):
    return 0


def make_segments(count, size=64):
    return [bytes([i % 256]) * (size + i) for i in range(count)]


@pytest.fixture
def run():
    """Runs a coroutine to completion on a fresh event loop."""
    return asyncio.run
