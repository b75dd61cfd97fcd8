"""
Core orchestration primitives.

This package contains the transport-agnostic logic: batch processing of
independent jobs, fail-fast sequencing of named steps, progress tracking for
byte streams, and the lazy multi-source stream.
"""

from .multisource import MultiSourceStream, SourceOpener, open_sources
from .process import BatchError, Job, JobError, JobFunc, process
from .progress import (
    Progress,
    ProgressValues,
    Readable,
    SharedProgress,
    TrackedStream,
)
from .sequence import SequenceError, Step, sequence

__all__ = [
    "BatchError",
    "Job",
    "JobError",
    "JobFunc",
    "MultiSourceStream",
    "Progress",
    "ProgressValues",
    "Readable",
    "SequenceError",
    "SharedProgress",
    "SourceOpener",
    "Step",
    "TrackedStream",
    "open_sources",
    "process",
    "sequence",
]
