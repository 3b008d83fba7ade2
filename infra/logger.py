"""
Structured per-run logging.

Each run gets a ScribeLogger keyed by run id (the sanitized file name) and a
stage ("convert", "transcribe", "extract"). Records are written as JSON lines
to {log_dir}/{stage}.jsonl, so a log directory can be tailed or parsed later.

USAGE:
  with create_logger('my_report', 'transcribe', log_dir=Path('logs')) as logger:
      logger.info('Processing...', page=3)
      logger.page_error('Completion failed', page=3, error='timeout')

Handlers are created lazily on first use; a logger with no log_dir and no
console output is a no-op sink.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit for real-time log visibility."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    FIELDS = ('run_id', 'stage', 'page', 'index', 'tokens', 'duration_seconds', 'error')

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in self.FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data)


class ScribeLogger:
    """Logger that writes to a single append-only JSONL file per stage.

    File handlers are created lazily on first log message to avoid
    creating empty log files when nothing is logged.
    """
    def __init__(
        self,
        run_id: str,
        stage: str,
        log_dir: Optional[Path] = None,
        console_output: bool = False,
        level: str = "INFO",
        filename: str = None
    ):
        self.run_id = run_id
        self.stage = stage
        self.log_dir = Path(log_dir) if log_dir else None
        self.console_output = console_output
        self.level = level
        self.filename = filename or f"{stage}.jsonl"

        self._logger = None
        self._initialized = False
        self.log_file = None

    def _ensure_initialized(self):
        if self._initialized:
            return

        # Built directly rather than via getLogger so the logging manager keeps
        # no reference and the logger is freed with this ScribeLogger
        self._logger = logging.Logger(f"pagescribe.{self.run_id}.{self.stage}")
        self._logger.setLevel(getattr(logging, self.level.upper()))
        self._logger.propagate = False

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._logger.addHandler(console_handler)

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            json_file = self.log_dir / self.filename
            json_handler = FlushingFileHandler(json_file, mode='a')
            json_handler.setFormatter(JSONFormatter())
            self._logger.addHandler(json_handler)
            self.log_file = json_file

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

        self._initialized = True

    @property
    def logger(self) -> logging.Logger:
        self._ensure_initialized()
        return self._logger

    def _log(self, level: str, message: str, **kwargs):
        reserved_params = {}
        for param in ['exc_info', 'stack_info', 'stacklevel']:
            if param in kwargs:
                reserved_params[param] = kwargs.pop(param)

        extra = {
            'run_id': self.run_id,
            'stage': self.stage,
            **kwargs
        }

        self.logger.log(
            getattr(logging, level.upper()),
            message,
            extra=extra,
            **reserved_params
        )

    def debug(self, message: str, **kwargs):
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log('ERROR', message, **kwargs)

    def page_error(self, message: str, page: int, error: str, **kwargs):
        self._log('ERROR', message, page=page, error=error, **kwargs)

    def close(self):
        if self._initialized and self._logger:
            for handler in self._logger.handlers[:]:
                handler.close()
                self._logger.removeHandler(handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(run_id: str, stage: str, **kwargs) -> ScribeLogger:
    return ScribeLogger(run_id, stage, **kwargs)
