"""Logging utilities for session monitoring and debugging."""

from quotepoll.core.logging.config import LogConfig
from quotepoll.core.logging.logger import (
    StructuredLogger,
    bind,
    configure_logging,
    current_run_id,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "bind",
    "configure_logging",
    "current_run_id",
    "log_context",
    "logger",
]
