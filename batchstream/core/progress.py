"""
Progress tracking for byte streams.
"""

from dataclasses import dataclass
from typing import Optional, Protocol


class Readable(Protocol):
    """Anything with a file-like `read`. A `close` method is optional."""

    def read(self, size: int = -1) -> bytes: ...


class Progress(Protocol):
    """
    Receives progress updates. Implementations may drive a progress bar or simply
    record the values.
    """

    def set(self, total: int) -> None:
        """Sets (or replaces) the expected total."""

    def add(self, delta: int) -> None:
        """Adds an amount to the current value."""

    def update(self, current: int) -> None:
        """Replaces the current value."""

    def finish(self) -> None:
        """Marks the tracked work as done."""


@dataclass
class ProgressValues:
    """A Progress implementation that simply stores the current and total values."""

    total: Optional[int] = None
    current: int = 0
    finished: bool = False

    def set(self, total: int) -> None:
        self.total = total

    def add(self, delta: int) -> None:
        self.current += delta

    def update(self, current: int) -> None:
        self.current = current

    def finish(self) -> None:
        # Work can end early on failure, so the current value is left alone
        self.finished = True


class TrackedStream:
    """Wraps a readable stream and reports every byte read to a Progress."""

    def __init__(self, progress: Progress, reader: Readable):
        self.progress = progress
        self._reader = reader
        self._finished = False

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        if data:
            self.progress.add(len(data))
        elif size != 0 and not self._finished:
            self._finished = True
            self.progress.finish()
        return data

    def close(self) -> None:
        """Closes the wrapped stream if it can be closed."""
        close = getattr(self._reader, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "TrackedStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SharedProgress:
    """
    Forwards updates from several streams to one Progress owned by the caller.

    Per-stream `finish` calls are dropped so the owner decides when the whole
    transfer is done. With `fixed_total`, calls to `set` are dropped as well.
    """

    def __init__(self, progress: Progress, fixed_total: bool = False):
        self._progress = progress
        self._fixed_total = fixed_total

    def set(self, total: int) -> None:
        if not self._fixed_total:
            self._progress.set(total)

    def add(self, delta: int) -> None:
        self._progress.add(delta)

    def update(self, current: int) -> None:
        self._progress.update(current)

    def finish(self) -> None:
        pass
