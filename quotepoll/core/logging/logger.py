"""Structured logging utilities with run id propagation."""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from quotepoll.core.logging.config import LogConfig

_RUN_ID_VAR: ContextVar[str | None] = ContextVar("quotepoll_run_id", default=None)
_CONTEXT_VAR: ContextVar[dict[str, Any]] = ContextVar("quotepoll_log_context", default={})

_TOP_LEVEL_KEYS = ("run_id", "batch", "symbol")


def _ensure_run_id() -> str:
    run_id = _RUN_ID_VAR.get()
    if run_id is None:
        run_id = uuid4().hex
        _RUN_ID_VAR.set(run_id)
    return run_id


def _patch_record(record: dict[str, Any]) -> None:
    extra = record.setdefault("extra", {})
    for key, value in _CONTEXT_VAR.get({}).items():
        if extra.get(key) is None:
            extra[key] = value
    if not extra.get("run_id"):
        extra["run_id"] = _ensure_run_id()

    extra.setdefault("batch", None)
    extra.setdefault("symbol", None)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _format_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record.get("extra", {})
    context = {k: v for k, v in extra.items() if k not in _TOP_LEVEL_KEYS}
    level_value = record.get("level")
    level_name = getattr(level_value, "name", None) or str(level_value or "INFO")
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat() if "time" in record else datetime.now().isoformat(),
        "level": level_name,
        "message": record.get("message"),
        "run_id": extra.get("run_id"),
        "batch": extra.get("batch"),
        "symbol": extra.get("symbol"),
    }
    if context:
        payload["context"] = context
    exception = record.get("exception")
    if exception:
        payload["exception"] = str(exception)
    return payload


class _StreamJsonSink:
    """Sink writing structured JSON payloads to a text stream."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        payload = _format_payload(message.record)
        # stderr by default, looked up per record so redirected streams are honoured
        stream = self._stream or sys.stderr
        stream.write(json.dumps(payload, default=_json_default, ensure_ascii=False))
        stream.write("\n")
        stream.flush()


class _FileJsonSink:
    """Sink persisting JSON lines to a file path."""

    def __init__(self, path: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._path = path

    def __call__(self, message: Any) -> None:  # pragma: no cover - simple file IO
        payload = _format_payload(message.record)
        with open(self._path, "a", encoding="utf-8") as file:
            file.write(json.dumps(payload, default=_json_default, ensure_ascii=False))
            file.write("\n")


def _configure_from_config(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        handlers.append({"sink": _StreamJsonSink(config.console_stream), "level": config.level.upper()})
    if config.file_output and config.file_path:
        handlers.append({"sink": _FileJsonSink(config.file_path), "level": config.level.upper()})

    configure_kwargs: dict[str, Any] = {"handlers": handlers, "patcher": _patch_record}
    if config.extra:
        configure_kwargs["extra"] = config.extra
    logger.configure(**configure_kwargs)


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Configure structured logging with the provided level and options."""

    config = LogConfig(level=level, **kwargs)
    _configure_from_config(config)


class StructuredLogger:
    """Wrapper exposing a configured loguru logger with run-aware context helpers."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        _configure_from_config(self.config)
        self.logger = logger

    def configure(self, **kwargs: Any) -> None:
        """Update logger configuration at runtime."""

        self.config = self.config.model_copy(update=kwargs)
        _configure_from_config(self.config)

    @contextmanager
    def context(self, *, run_id: str | None = None, **extra: Any) -> Iterator[str]:
        """Context manager ensuring a run id is available for nested log events."""

        with log_context(run_id=run_id, **extra) as active_run:
            yield active_run


def bind(**kwargs: Any) -> Any:
    """Bind structured context to the global logger instance."""

    return logger.bind(**kwargs)


@contextmanager
def log_context(*, run_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Propagate a run id and additional metadata to every nested log record."""

    previous_context = _CONTEXT_VAR.get({})
    active_run = run_id or previous_context.get("run_id") or uuid4().hex
    context_token = _CONTEXT_VAR.set({**previous_context, **extra, "run_id": active_run})

    try:
        yield active_run
    finally:
        _CONTEXT_VAR.reset(context_token)


def current_run_id() -> str:
    """Return the currently active run id, generating one if required."""

    return _CONTEXT_VAR.get({}).get("run_id") or _ensure_run_id()


configure_logging()


__all__ = [
    "StructuredLogger",
    "bind",
    "configure_logging",
    "current_run_id",
    "log_context",
    "logger",
]
