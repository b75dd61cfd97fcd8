"""
batchstream: batch and sequence execution primitives plus progress-tracked
multi-source byte streams.
"""

__version__ = "1.0.0"

from batchstream.core import (  # noqa: E402
    BatchError,
    JobError,
    JobFunc,
    MultiSourceStream,
    ProgressValues,
    SequenceError,
    Step,
    TrackedStream,
    open_sources,
    process,
    sequence,
)

__all__ = [
    "__version__",
    "BatchError",
    "JobError",
    "JobFunc",
    "MultiSourceStream",
    "ProgressValues",
    "SequenceError",
    "Step",
    "TrackedStream",
    "open_sources",
    "process",
    "sequence",
]
