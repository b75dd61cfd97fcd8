"""
A blocking HTTP transport built on aiohttp.

The transport owns a private event loop and drives every request to completion
before returning, so callers see plain synchronous calls and only one request
is ever in flight.
"""

import asyncio
import logging
from typing import Any, Coroutine, TypeVar

import aiohttp

from batchstream.exceptions import HTTPStatusError, TransportError
from batchstream.models.config import TransportConfig

log = logging.getLogger(__name__)

T = TypeVar("T")


class HttpBodyReader:
    """A file-like reader over the body of an open HTTP response."""

    def __init__(self, transport: "HttpTransport", response: aiohttp.ClientResponse):
        self._transport = transport
        self._response = response
        self._closed = False

    @property
    def content_length(self) -> int | None:
        """The advertised body size, None if the server did not send one."""
        return self._response.content_length

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise ValueError("I/O operation on closed reader.")
        return self._transport._run(self._response.content.read(size))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._response.close()

    def __enter__(self) -> "HttpBodyReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class HttpTransport:
    """
    Probes and opens HTTP sources. Implements the SourceOpener protocol so it can
    feed a MultiSourceStream directly.

    The event loop and session are created by the first request and released by
    `close()`; use the transport as a context manager once it has been used.
    """

    def __init__(self, config: TransportConfig | None = None):
        self.config = config or TransportConfig()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._session: aiohttp.ClientSession | None = None
        self._closed = False

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Runs a coroutine on the private loop, translating transport failures."""
        if self._closed:
            coro.close()
            raise TransportError("Transport has been closed.")
        if self._loop is None:
            # Created on first use so an unused transport holds no resources
            self._loop = asyncio.new_event_loop()
        try:
            return self._loop.run_until_complete(coro)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.config.total_timeout,
                sock_connect=self.config.connect_timeout,
                sock_read=self.config.read_timeout,
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    "User-Agent": self.config.user_agent,
                    # Compressed bodies would not match the advertised lengths
                    "Accept-Encoding": "identity",
                },
            )
            log.debug("Created HTTP session.")
        return self._session

    async def _head(self, url: str) -> int:
        session = await self._get_session()
        async with session.head(
            url, allow_redirects=True, max_redirects=self.config.max_redirects
        ) as response:
            if response.status != 200:
                raise HTTPStatusError(response.status)
            try:
                return int(response.headers.get("Content-Length", 0))
            except ValueError:
                return 0

    async def _get(self, url: str) -> aiohttp.ClientResponse:
        session = await self._get_session()
        response = await session.get(
            url, allow_redirects=True, max_redirects=self.config.max_redirects
        )
        if response.status != 200:
            response.close()
            raise HTTPStatusError(response.status)
        return response

    def probe_length(self, url: str) -> int:
        """
        Performs a HEAD request and returns the Content-Length of the URL.

        Raises:
            HTTPStatusError: If the server answers with anything other than 200.
            TransportError: If the request itself fails.
        """
        length = self._run(self._head(str(url)))
        log.debug(f"Probed {url}: {length} bytes")
        return length

    def open(self, url: str) -> HttpBodyReader:
        """
        Performs a GET request and returns a reader over the response body.

        Raises:
            HTTPStatusError: If the server answers with anything other than 200.
            TransportError: If the request itself fails.
        """
        response = self._run(self._get(str(url)))
        log.debug(f"Opened {url} (Content-Length: {response.content_length})")
        return HttpBodyReader(self, response)

    def close(self) -> None:
        """Closes the HTTP session and the private event loop."""
        if self._closed:
            return
        self._closed = True
        if self._loop is None:
            return
        if self._session and not self._session.closed:
            self._loop.run_until_complete(self._session.close())
            log.debug("HTTP session closed.")
        self._session = None
        self._loop.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
