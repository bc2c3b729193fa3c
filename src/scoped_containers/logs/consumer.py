"""Container log consumers.

A log consumer receives the stdout/stderr frames a container produces while
it runs. ``LoggingConsumer`` forwards them to the standard ``logging``
module, and ``with_default_log_consumer`` attaches one with the standard
severity mapping (stdout as INFO, stderr as ERROR).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Self, TypeVar

from scoped_containers.core.request import SupportsLogConsumer

# Logger receiving container output by default
CONTAINER_LOGGER = "scoped_containers.container"


class LogSource(str, Enum):
    """Output stream a log frame came from."""

    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class LogFrame:
    """A chunk of container output."""

    source: LogSource
    data: bytes

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


class LogConsumer(Protocol):
    """Receives log frames from a running container."""

    def accept(self, frame: LogFrame) -> None: ...


# Fixed severity mapping for the default consumer
DEFAULT_LOG_LEVELS: dict[LogSource, int] = {
    LogSource.STDOUT: logging.INFO,
    LogSource.STDERR: logging.ERROR,
}


class LoggingConsumer:
    """Forward container output to a ``logging.Logger``, one record per line."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logging.getLogger(CONTAINER_LOGGER)
        self._levels = dict(DEFAULT_LOG_LEVELS)
        self._prefix: str | None = None

    @property
    def stdout_level(self) -> int:
        return self._levels[LogSource.STDOUT]

    @property
    def stderr_level(self) -> int:
        return self._levels[LogSource.STDERR]

    def with_stdout_level(self, level: int) -> Self:
        self._levels[LogSource.STDOUT] = level
        return self

    def with_stderr_level(self, level: int) -> Self:
        self._levels[LogSource.STDERR] = level
        return self

    def with_prefix(self, prefix: str) -> Self:
        self._prefix = prefix
        return self

    def accept(self, frame: LogFrame) -> None:
        level = self._levels[frame.source]
        for line in frame.text.splitlines():
            if not line.strip():
                continue
            if self._prefix:
                self._logger.log(level, f"[{self._prefix}] {line}")
            else:
                self._logger.log(level, line)


R = TypeVar("R", bound=SupportsLogConsumer)


def with_default_log_consumer(request: R) -> R:
    """Attach a LoggingConsumer with the default severities to a request.

    Example:
        ```python
        request = with_default_log_consumer(ContainerRequest("redis", "7.2.4"))
        ```
    """
    return request.with_log_consumer(
        LoggingConsumer()
        .with_stdout_level(DEFAULT_LOG_LEVELS[LogSource.STDOUT])
        .with_stderr_level(DEFAULT_LOG_LEVELS[LogSource.STDERR])
    )
