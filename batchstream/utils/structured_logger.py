"""
Structured logging for transfer sessions.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from batchstream.core.process import BatchError
from batchstream.core.sequence import SequenceError


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("batchstream", log_dir=Path("logs"))
        logger.info("transfer_completed", sources=3, size_bytes=4096)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"batchstream_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Added to every JSON entry
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except OSError as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._log(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._log(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class TransferLogger:
    """Specialized logger for batch and sequence outcomes."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def job_failed(self, index: int, source: str, error: str):
        self.logger.error("job_failed", index=index, source=source, error=error)

    def batch_completed(self, total_jobs: int, failure: BatchError | None):
        """Logs the outcome of a batch."""
        failed = len(failure) if failure else 0
        self.logger.info(
            "batch_completed",
            total_jobs=total_jobs,
            succeeded=total_jobs - failed,
            failed=failed,
        )

    def step_failed(self, failure: SequenceError):
        self.logger.error(
            "step_failed",
            index=failure.index,
            step=failure.step.name,
            error=str(failure.cause),
        )

    def transfer_completed(
        self, sources: int, size_bytes: int, duration_s: float
    ):
        """Log a finished transfer."""
        self.logger.info(
            "transfer_completed",
            sources=sources,
            size_bytes=size_bytes,
            size_mb=round(size_bytes / (1024 * 1024), 2),
            duration_s=round(duration_s, 2),
        )


def create_structured_logger(
    log_dir: Path | None = None,
) -> tuple[StructuredLogger, TransferLogger]:
    """
    Create the structured loggers. JSON output is enabled when a log directory
    is given.

    Returns:
        Tuple of (base_logger, transfer_logger)
    """
    base = StructuredLogger("batchstream", log_dir=log_dir, enable_json=True)
    return base, TransferLogger(base)
