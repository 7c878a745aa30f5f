"""
Logging setup for the edition pipeline.

Records about a source carry ``source`` and ``stage`` fields. The console
shows them through Rich; the optional run log in the work directory keeps
them as JSONL fields or as a ``[source/stage]`` tag in plain text.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

from .config import LoggingConfig
from .core.errors import EditionError

LOGGER_NAME = "daily_edition"


def setup_logging(cfg: LoggingConfig, work_dir: Path | None) -> logging.Logger:
    """Configure the package logger; child loggers of the stages share it."""
    level = _level_from_string(cfg.level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.propagate = False

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console_handler.setLevel(level)
        console_handler.setFormatter(SourceFormatter("%(source_tag)s%(message)s"))
        logger.addHandler(console_handler)

    if cfg.file and work_dir is not None:
        work_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(work_dir / cfg.filename, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(_build_file_formatter(cfg.format))
        logger.addHandler(file_handler)

    return logger


def log_event(logger: logging.Logger | None, message: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.info(message, extra=fields)


def log_source_error(logger: logging.Logger, exc: EditionError, event: str = "source_failed") -> None:
    """Log a per-source failure with its source and stage as fields."""
    logger.error(
        "Failed during %s: %s",
        exc.stage,
        exc.message,
        extra={"event": event, "source": exc.source, "stage": exc.stage},
    )


class SourceFormatter(logging.Formatter):
    """Formatter that exposes ``source_tag``: ``[source/stage] `` or nothing."""

    def format(self, record: logging.LogRecord) -> str:
        source = getattr(record, "source", None)
        stage = getattr(record, "stage", None)
        if source and stage:
            record.source_tag = f"[{source}/{stage}] "
        elif source:
            record.source_tag = f"[{source}] "
        else:
            record.source_tag = ""
        return super().format(record)


class JsonlFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extract_extras(record))
        # Danish titles stay readable in the log.
        return json.dumps(payload, ensure_ascii=False, default=str)


_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "source_tag",
}


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED}


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return SourceFormatter("%(asctime)s %(levelname)s %(source_tag)s%(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
