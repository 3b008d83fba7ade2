"""
Tests for infra/logger.py

Key behaviors to verify:
1. Lazy initialization - no files created until first log
2. Single append-only file per stage (no timestamps in filename)
3. JSON formatting with run id, stage and page fields
4. Multiple log levels work
5. Close doesn't create files if nothing was logged
"""

import json
import logging

from infra.logger import ScribeLogger, create_logger


def read_records(path):
    return [json.loads(line) for line in path.read_text().strip().split("\n")]


class TestScribeLoggerLazyInit:
    """Test that logger initializes lazily."""

    def test_no_file_created_on_init(self, tmp_path):
        log_dir = tmp_path / "logs"

        logger = ScribeLogger(run_id="report", stage="transcribe", log_dir=log_dir)

        assert not log_dir.exists(), "Log directory should not be created on init"
        assert logger.log_file is None

    def test_file_created_on_first_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = ScribeLogger(run_id="report", stage="transcribe", log_dir=log_dir)

        logger.info("First message")

        assert log_dir.exists()
        assert logger.log_file == log_dir / "transcribe.jsonl"
        assert logger.log_file.exists()

    def test_close_without_logging_creates_nothing(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = ScribeLogger(run_id="report", stage="transcribe", log_dir=log_dir)

        logger.close()

        assert not log_dir.exists(), "Close should not create directories"

    def test_no_log_dir_is_silent(self, tmp_path):
        logger = ScribeLogger(run_id="report", stage="transcribe")

        logger.info("goes nowhere")
        logger.close()

        assert logger.log_file is None
        assert list(tmp_path.iterdir()) == []


class TestScribeLoggerSingleFile:
    """Test single append-only file behavior."""

    def test_multiple_loggers_append_to_same_file(self, tmp_path):
        log_dir = tmp_path / "logs"

        first = ScribeLogger(run_id="report", stage="transcribe", log_dir=log_dir)
        first.info("Run 1")
        first.close()

        second = ScribeLogger(run_id="report", stage="transcribe", log_dir=log_dir)
        second.info("Run 2")
        second.close()

        assert list(log_dir.iterdir()) == [log_dir / "transcribe.jsonl"]
        messages = [r["message"] for r in read_records(log_dir / "transcribe.jsonl")]
        assert messages == ["Run 1", "Run 2"]

    def test_custom_filename(self, tmp_path):
        logger = ScribeLogger(run_id="report", stage="transcribe", log_dir=tmp_path, filename="custom.jsonl")
        logger.info("hello")
        logger.close()

        assert (tmp_path / "custom.jsonl").exists()

    def test_stages_write_to_separate_files(self, tmp_path):
        with create_logger("report", "transcribe", log_dir=tmp_path) as logger:
            logger.info("transcribing")
        with create_logger("report", "extract", log_dir=tmp_path) as logger:
            logger.info("extracting")

        record = read_records(tmp_path / "extract.jsonl")[0]
        assert record["run_id"] == "report"
        assert record["stage"] == "extract"
        assert len(read_records(tmp_path / "transcribe.jsonl")) == 1


class TestScribeLoggerLifetime:

    def test_not_registered_with_logging_manager(self, tmp_path):
        before = set(logging.Logger.manager.loggerDict)

        for i in range(3):
            with create_logger(f"doc-{i}", "transcribe", log_dir=tmp_path) as logger:
                logger.info("hello")

        assert set(logging.Logger.manager.loggerDict) == before

    def test_close_releases_file_handler(self, tmp_path):
        logger = create_logger("report", "transcribe", log_dir=tmp_path)
        logger.info("hello")

        logger.close()

        assert logger.logger.handlers == []


class TestScribeLoggerFormat:

    def test_json_fields(self, tmp_path):
        with create_logger("report", "transcribe", log_dir=tmp_path) as logger:
            logger.info("Page transcribed", page=3, index=2, tokens=150, duration_seconds=1.5)

        record = read_records(tmp_path / "transcribe.jsonl")[0]

        assert record["level"] == "INFO"
        assert record["message"] == "Page transcribed"
        assert record["run_id"] == "report"
        assert record["stage"] == "transcribe"
        assert record["page"] == 3
        assert record["index"] == 2
        assert record["tokens"] == 150
        assert record["duration_seconds"] == 1.5
        assert "timestamp" in record

    def test_page_error(self, tmp_path):
        with create_logger("report", "transcribe", log_dir=tmp_path) as logger:
            logger.page_error("Failed to process page_0002.png", page=2, error="AdapterError: boom")

        record = read_records(tmp_path / "transcribe.jsonl")[0]
        assert record["level"] == "ERROR"
        assert record["page"] == 2
        assert record["error"] == "AdapterError: boom"

    def test_level_filtering(self, tmp_path):
        with create_logger("report", "transcribe", log_dir=tmp_path, level="INFO") as logger:
            logger.debug("hidden")
            logger.info("shown")
            logger.warning("also shown")

        levels = [r["level"] for r in read_records(tmp_path / "transcribe.jsonl")]
        assert levels == ["INFO", "WARNING"]

    def test_debug_level(self, tmp_path):
        with create_logger("report", "transcribe", log_dir=tmp_path, level="DEBUG") as logger:
            logger.debug("visible")

        assert read_records(tmp_path / "transcribe.jsonl")[0]["level"] == "DEBUG"
