"""
Shared pytest fixtures for batchstream tests.

This module provides:
- A threaded HTTP server serving fixed content per path (404 otherwise)
- An HttpTransport bound to a private event loop
- In-memory readers and openers for the core stream tests
"""

import io
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Generator
from urllib.parse import urlsplit

import pytest

from batchstream.http.transport import HttpTransport


class _ContentHandler(BaseHTTPRequestHandler):
    def _respond(self, send_body: bool) -> None:
        path = urlsplit(self.path).path
        self.server.requests.append((self.command, path))

        if path in self.server.redirects:
            self.send_response(302)
            self.send_header("Location", self.server.redirects[path])
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        content = self.server.paths.get(path)
        if content is None:
            self.send_error(404)
            return

        self.send_response(200)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        if send_body:
            self.wfile.write(content)

    def do_HEAD(self) -> None:  # noqa: N802
        self._respond(send_body=False)

    def do_GET(self) -> None:  # noqa: N802
        self._respond(send_body=True)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        pass


class ContentServer:
    """Test-facing handle on the running server."""

    def __init__(self, server: ThreadingHTTPServer):
        self._server = server
        host, port = server.server_address[:2]
        self.base_url = f"http://{host}:{port}"

    def serve(self, path: str, content: str | bytes) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._server.paths[path] = content
        return self.url(path)

    def redirect(self, path: str, target: str) -> str:
        self._server.redirects[path] = target
        return self.url(path)

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @property
    def requests(self) -> list[tuple[str, str]]:
        return list(self._server.requests)


@pytest.fixture
def http_server() -> Generator[ContentServer, None, None]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _ContentHandler)
    server.paths = {}
    server.redirects = {}
    server.requests = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield ContentServer(server)
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


@pytest.fixture
def transport() -> Generator[HttpTransport, None, None]:
    with HttpTransport() as t:
        yield t


class MemoryReader(io.BytesIO):
    """A BytesIO that remembers whether it was closed and can fail on close."""

    def __init__(self, content: bytes, close_error: Exception | None = None):
        super().__init__(content)
        self.close_calls = 0
        self.close_error = close_error

    def close(self) -> None:
        self.close_calls += 1
        super().close()
        # Only the first explicit close fails, garbage collection closes again
        if self.close_error is not None and self.close_calls == 1:
            raise self.close_error


class MemoryOpener:
    """A SourceOpener over a dict of name -> content, recording every call."""

    def __init__(self, contents: dict[str, bytes | Exception]):
        self.contents = contents
        self.probed: list[str] = []
        self.opened: list[str] = []
        self.readers: dict[str, MemoryReader] = {}
        self.probe_errors: dict[str, Exception] = {}

    def probe_length(self, source: str) -> int:
        self.probed.append(source)
        if source in self.probe_errors:
            raise self.probe_errors[source]
        content = self.contents[source]
        if isinstance(content, Exception):
            return 0
        return len(content)

    def open(self, source: str) -> MemoryReader:
        self.opened.append(source)
        content = self.contents[source]
        if isinstance(content, Exception):
            raise content
        reader = MemoryReader(content)
        self.readers[source] = reader
        return reader


@pytest.fixture
def memory_opener_factory():
    return MemoryOpener
