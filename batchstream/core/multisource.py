"""
Presents an ordered list of remote sources as one continuous byte stream.

Sources are opened lazily, one at a time, only once the previous source has been
read to the end. Progress across all sources is reported to a single shared
Progress object.
"""

import logging
from typing import Any, Optional, Protocol, Sequence

from batchstream.exceptions import AlreadyClosedError

from .progress import Progress, Readable, TrackedStream

log = logging.getLogger(__name__)

READ_ALL_CHUNK_SIZE = 131072  # 128 KB


class SourceOpener(Protocol):
    """The transport a MultiSourceStream pulls its sources from."""

    def probe_length(self, source: Any) -> int:
        """Returns the expected size of the source without reading it."""

    def open(self, source: Any) -> Readable:
        """Opens the source for reading."""


class MultiSourceStream:
    """
    A readable stream over several sources, read in list order.

    The stream is either idle (no source open) or streaming from exactly one
    source. End of data is only reported once the last source is exhausted.
    """

    def __init__(
        self, progress: Progress, sources: Sequence[Any], opener: SourceOpener
    ):
        self.progress = progress
        self._sources = list(sources)
        self._opener = opener
        self._next_index = 0
        self._current: Optional[TrackedStream] = None

    @property
    def remaining(self) -> int:
        """Number of sources that have not been opened yet."""
        return len(self._sources) - self._next_index

    @property
    def streaming(self) -> bool:
        return self._current is not None

    def _open_next(self) -> bool:
        if self._next_index >= len(self._sources):
            return False
        source = self._sources[self._next_index]
        # A source that fails to open is consumed all the same
        self._next_index += 1
        reader = self._opener.open(source)
        self._current = TrackedStream(self.progress, reader)
        log.debug(f"Opened source {self._next_index}/{len(self._sources)}: {source}")
        return True

    def _close_current(self) -> None:
        current, self._current = self._current, None
        current.close()

    def read(self, size: int = -1) -> bytes:
        """
        Reads up to `size` bytes, moving on to the next source whenever the
        current one runs dry. Returns b"" only when every source is exhausted.
        """
        if size < 0:
            return b"".join(iter(lambda: self.read(READ_ALL_CHUNK_SIZE), b""))
        if size == 0:
            return b""

        while True:
            if self._current is None and not self._open_next():
                return b""
            data = self._current.read(size)
            if data:
                return data
            log.debug(f"Source exhausted, {self.remaining} remaining")
            self._close_current()

    def close(self) -> None:
        """
        Closes the currently open source.

        Raises:
            AlreadyClosedError: If no source is open.
        """
        if self._current is None:
            raise AlreadyClosedError()
        self._close_current()

    def __enter__(self) -> "MultiSourceStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._current is not None:
            self.close()
        return False


def open_sources(
    progress: Progress, sources: Sequence[Any], opener: SourceOpener
) -> tuple[MultiSourceStream, Optional[Exception]]:
    """
    Creates a MultiSourceStream after probing every source for its size.

    The probed sizes are summed and passed to `progress.set` before returning.
    Probing stops at the first failure; the sum up to that point is still set
    and the failure is returned alongside the stream, which remains usable for
    whatever sources can be opened.

    Returns:
        A tuple of (stream, error) where error is None if every probe succeeded.
    """
    stream = MultiSourceStream(progress, sources, opener)
    total = 0
    error: Optional[Exception] = None
    for source in stream._sources:
        try:
            total += opener.probe_length(source)
        except Exception as e:
            log.debug(f"Probing {source} failed: {e}")
            error = e
            break
    progress.set(total)
    return stream, error
