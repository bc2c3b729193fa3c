"""Engine module - async access to the container engine."""

from __future__ import annotations

from scoped_containers.engine.client import (
    ContainerSummary,
    DockerEngineClient,
    EngineClient,
    PruneReport,
    docker_client_instance,
    reset_docker_client,
)

__all__ = [
    "ContainerSummary",
    "DockerEngineClient",
    "EngineClient",
    "PruneReport",
    "docker_client_instance",
    "reset_docker_client",
]
