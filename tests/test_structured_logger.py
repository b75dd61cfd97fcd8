"""Tests for structured transfer logging."""

import json

from batchstream.core.process import BatchError, JobError
from batchstream.core.sequence import SequenceError, Step
from batchstream.utils.structured_logger import (
    StructuredLogger,
    create_structured_logger,
)


def read_events(logger: StructuredLogger) -> list[dict]:
    return [json.loads(line) for line in logger.json_log_path.read_text().splitlines()]


class TestStructuredLogger:
    def test_json_disabled_without_directory(self):
        logger = StructuredLogger("batchstream.test", log_dir=None)

        assert logger.enable_json is False
        assert logger.json_log_path is None
        logger.info("ignored", value=1)
        logger.close()

    def test_writes_json_lines_with_session_context(self, tmp_path):
        with StructuredLogger("batchstream.test", log_dir=tmp_path) as logger:
            logger.set_session_context(command="concat")
            logger.warning("slow_source", source="http://example.com/a")

        (event,) = read_events(logger)
        assert event["level"] == "WARNING"
        assert event["event"] == "slow_source"
        assert event["command"] == "concat"
        assert event["source"] == "http://example.com/a"
        assert "session_id" in event

    def test_console_message_format(self, tmp_path, caplog):
        logger = StructuredLogger("batchstream.test", log_dir=None)

        with caplog.at_level("INFO", logger="batchstream.test"):
            logger.info("done", sources=3)

        assert "[done] sources=3" in caplog.text


class TestTransferLogger:
    def test_batch_events(self, tmp_path):
        base, transfer = create_structured_logger(tmp_path)
        failure = BatchError([JobError(1, ValueError("X"))])

        transfer.job_failed(1, "http://example.com/b", "X")
        transfer.batch_completed(3, failure)
        base.close()

        events = read_events(base)
        assert [e["event"] for e in events] == ["job_failed", "batch_completed"]
        assert events[1]["succeeded"] == 2
        assert events[1]["failed"] == 1

    def test_batch_without_failures(self, tmp_path):
        base, transfer = create_structured_logger(tmp_path)

        transfer.batch_completed(2, None)
        base.close()

        (event,) = read_events(base)
        assert event["failed"] == 0

    def test_step_failed(self, tmp_path):
        base, transfer = create_structured_logger(tmp_path)
        failure = SequenceError(1, Step("write", lambda: None), OSError("disk full"))

        transfer.step_failed(failure)
        base.close()

        (event,) = read_events(base)
        assert event["level"] == "ERROR"
        assert event["step"] == "write"
        assert event["error"] == "disk full"
