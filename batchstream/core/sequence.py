"""
Ordered execution of named steps that stops at the first failure.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from batchstream.exceptions import BatchStreamError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """A step in a sequence: a descriptive name and the function to call."""

    name: str
    action: Callable[[], None]


class SequenceError(BatchStreamError):
    """Indicates that a given step failed in a sequence."""

    def __init__(self, index: int, step: Step, cause: BaseException):
        self.index = index  # 0 based
        self.step = step
        self.cause = cause
        self.__cause__ = cause
        super().__init__(f"{step.name} failed: {cause}")


def sequence(steps: Iterable[Step]) -> Optional[SequenceError]:
    """
    Executes a sequence of steps and stops at the first step that fails.

    Steps after the failing one are never called.

    Returns:
        None if every step succeeded, otherwise a `SequenceError` for the step
        that failed.
    """
    for index, step in enumerate(steps):
        try:
            step.action()
        except Exception as e:
            log.debug(f"Step {index} ({step.name}) failed: {e}")
            return SequenceError(index, step, e)
    return None
