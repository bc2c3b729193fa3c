"""Scoped test containers - stale container reaping and default log consumers."""

from __future__ import annotations

from scoped_containers.core.config import load_config
from scoped_containers.core.errors import (
    EngineOperation,
    EngineOperationError,
    ScopedContainersError,
)
from scoped_containers.core.request import ContainerRequest
from scoped_containers.core.schemas import ReaperConfig, ScopeLabels
from scoped_containers.labels import scope_labels, with_scope_labels
from scoped_containers.logs.consumer import LoggingConsumer, with_default_log_consumer
from scoped_containers.reaper import ReapResult, prepare_request, reap, reap_and_label

__version__ = "0.1.0"

__all__ = [
    "ContainerRequest",
    "EngineOperation",
    "EngineOperationError",
    "LoggingConsumer",
    "load_config",
    "prepare_request",
    "reap",
    "reap_and_label",
    "ReaperConfig",
    "ReapResult",
    "ScopedContainersError",
    "ScopeLabels",
    "scope_labels",
    "with_default_log_consumer",
    "with_scope_labels",
    "__version__",
]
