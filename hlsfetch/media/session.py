"""
Builds the aiohttp session used for manifest and segment requests.
"""

import logging
from collections.abc import Callable, Mapping

import aiohttp

from hlsfetch.models.config import DEFAULT_USER_AGENT, DownloadConfig

log = logging.getLogger(__name__)

SessionFactory = Callable[[DownloadConfig], aiohttp.ClientSession]

_HTTP_VERSIONS = {
    "1.0": aiohttp.HttpVersion10,
    "1.1": aiohttp.HttpVersion11,
}


def create_session(config: DownloadConfig) -> aiohttp.ClientSession:
    """
    Creates a ClientSession tuned for concurrent segment downloads.

    aiohttp never multiplexes requests over a single connection, so each
    in-flight request gets its own connection, bounded by the pool limits.
    """
    transport = config.transport
    connector = aiohttp.TCPConnector(
        limit=config.connection_limit,
        limit_per_host=config.max_workers,
        ttl_dns_cache=600,  # 10 minutes
        keepalive_timeout=transport.keepalive_timeout,
        force_close=False,
    )
    timeout = aiohttp.ClientTimeout(
        total=transport.request_timeout, sock_connect=transport.connect_timeout
    )
    log.debug(
        f"Created HLS session (HTTP/{transport.http_version}, "
        f"limit={config.connection_limit}, limit_per_host={config.max_workers})"
    )
    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        version=_HTTP_VERSIONS[transport.http_version],
    )


def build_headers(
    headers: Mapping[str, str] | None, user_agent: str = DEFAULT_USER_AGENT
) -> dict[str, str]:
    """
    Copies caller headers and adds a browser-like User-Agent when none is set.

    Origin CDNs check Referer/Origin for hotlink protection and often reject
    non-browser agents, so the caller's headers go out on every request.
    """
    result = dict(headers or {})
    if not any(key.lower() == "user-agent" and value for key, value in result.items()):
        result = {k: v for k, v in result.items() if k.lower() != "user-agent"}
        result["User-Agent"] = user_agent
    return result
