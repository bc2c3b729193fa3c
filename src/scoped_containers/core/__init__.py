"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from scoped_containers.core.config import load_config
from scoped_containers.core.errors import (
    EngineOperation,
    EngineOperationError,
    ScopedContainersError,
)
from scoped_containers.core.request import ContainerRequest, SupportsLabels, SupportsLogConsumer
from scoped_containers.core.schemas import ReaperConfig, ScopeLabels

__all__ = [
    "ContainerRequest",
    "EngineOperation",
    "EngineOperationError",
    "load_config",
    "ReaperConfig",
    "ScopedContainersError",
    "ScopeLabels",
    "SupportsLabels",
    "SupportsLogConsumer",
]
