"""
Request-scoped logging helpers for the extraction pipeline.

Every line emitted during one extraction carries ``request_id`` and ``agent``;
stage boundaries add ``stage`` plus a per-stage duration. With ``LOG_JSON`` on,
those lines are also written as one JSON object per line so a single request
can be reassembled with ``grep <request_id>``.
"""

from __future__ import annotations

import json
import os
import time
import uuid
from typing import Any

from loguru import logger

REQUEST_FIELDS = ("request_id", "agent", "stage")
JSONL_PATH = "logs/extractions_{time:YYYY-MM-DD}.jsonl"


def env_log_level(default: str = "INFO") -> str:
    return os.getenv("LOG_LEVEL", default).upper()


def request_event(record: dict) -> dict[str, Any]:
    """Flatten a loguru record into the JSONL event shape (request fields first)."""
    extra = dict(record["extra"])
    event: dict[str, Any] = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
    }
    for field in REQUEST_FIELDS:
        if field in extra:
            event[field] = extra.pop(field)
    event["message"] = record["message"]
    extra.pop("_event", None)
    if extra:
        event["summary"] = extra
    if record["exception"] is not None:
        event["error"] = repr(record["exception"].value)
    return event


def _jsonl_format(record: dict) -> str:
    record["extra"]["_event"] = json.dumps(request_event(record), default=str)
    return "{extra[_event]}\n"


def _is_request_line(record: dict) -> bool:
    return "request_id" in record["extra"]


def add_optional_sinks() -> None:
    """Attach sinks controlled by env vars.

    - ``LOG_DEBUG_FILE``: extra plain-text DEBUG sink.
    - ``LOG_JSON`` ("1"/"true"): request-scoped lines only, as JSONL under ``logs/``.
    """
    debug_file = os.getenv("LOG_DEBUG_FILE")
    if debug_file:
        logger.add(debug_file, level="DEBUG", backtrace=True, diagnose=True)

    if os.getenv("LOG_JSON", "0").lower() in {"1", "true", "yes", "on"}:
        os.makedirs("logs", exist_ok=True)
        logger.add(JSONL_PATH, level="DEBUG", format=_jsonl_format, filter=_is_request_line, rotation="00:00")


def new_request_id() -> str:
    """Short id tying together every log line of one extraction."""
    return uuid.uuid4().hex[:8].upper()


def bind_context(**kwargs: Any):
    """Logger with the non-null request fields bound."""
    return logger.bind(**{k: v for k, v in kwargs.items() if v is not None})


def stage_started(log, stage: str) -> None:
    log.bind(stage=stage).debug("stage_start")


def stage_finished(log, stage: str, **summary: Any) -> None:
    log.bind(stage=stage, **{k: v for k, v in summary.items() if v is not None}).debug("stage_end")


class StageClock:
    """Wall time per pipeline stage; ``lap()`` returns ms since the previous lap."""

    def __init__(self) -> None:
        self._start = self._last = time.perf_counter()

    def lap(self) -> int:
        now = time.perf_counter()
        elapsed, self._last = now - self._last, now
        return round(elapsed * 1000)

    @property
    def total_ms(self) -> int:
        return round((time.perf_counter() - self._start) * 1000)
