"""
Batch processing of independent jobs.

Every job is attempted, in order, regardless of earlier failures. Failures are
collected and handed back to the caller as a value so that the caller can
decide what to do about them.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Protocol

from batchstream.exceptions import BatchStreamError

log = logging.getLogger(__name__)


class Job(Protocol):
    """One item in a list of (usually similar) things processed as a batch."""

    def execute(self) -> None:
        """Performs the work. Raising an exception marks the job as failed."""


@dataclass(frozen=True)
class JobFunc:
    """Wraps a standalone function as a Job."""

    func: Callable[[], None]

    def execute(self) -> None:
        self.func()


class JobError(BatchStreamError):
    """
    A failed job: its position in the list given to `process` and the exception
    its `execute` raised.
    """

    def __init__(self, index: int, cause: BaseException):
        super().__init__(cause)
        self._index = index
        self._cause = cause
        self.__cause__ = cause

    @property
    def index(self) -> int:
        return self._index

    @property
    def cause(self) -> BaseException:
        return self._cause

    def __str__(self) -> str:
        return str(self._cause)

    def __repr__(self) -> str:
        return f"JobError(index={self._index}, cause={self._cause!r})"


class BatchError(BatchStreamError):
    """Returned by `process` when one or more of the jobs failed."""

    def __init__(self, errors: Iterable[JobError]):
        self.errors: tuple[JobError, ...] = tuple(errors)
        super().__init__(self._summary())

    def _summary(self) -> str:
        noun = "errors" if len(self.errors) > 1 else "error"
        return f"{len(self.errors)} {noun} occurred during batch processing"

    def __str__(self) -> str:
        return self._summary()

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[JobError]:
        return iter(self.errors)

    def format_errors(self, quoted: bool = False) -> str:
        """Lists every failed job's cause, one per line."""
        lines = [repr(str(err)) if quoted else str(err) for err in self.errors]
        return "".join(f"{line}\n" for line in lines)


def process(jobs: Iterable[Job]) -> Optional[BatchError]:
    """
    Batch processes a list of jobs.

    Each job is executed exactly once, in order. Any job that raises is recorded
    as a `JobError`; processing carries on with the next job.

    Returns:
        None if every job succeeded, otherwise a `BatchError` listing the failed
        jobs in the order they failed.
    """
    errors: List[JobError] = []
    for index, job in enumerate(jobs):
        try:
            job.execute()
        except Exception as e:
            log.debug(f"Job {index} failed: {e}")
            errors.append(JobError(index, e))

    if not errors:
        return None
    return BatchError(errors)
