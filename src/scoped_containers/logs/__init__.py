"""Logs module - container log consumers."""

from __future__ import annotations

from scoped_containers.logs.consumer import (
    DEFAULT_LOG_LEVELS,
    LogConsumer,
    LogFrame,
    LoggingConsumer,
    LogSource,
    with_default_log_consumer,
)

__all__ = [
    "DEFAULT_LOG_LEVELS",
    "LogConsumer",
    "LogFrame",
    "LogSource",
    "LoggingConsumer",
    "with_default_log_consumer",
]
