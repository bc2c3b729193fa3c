"""Runners module - Docker container startup."""

from __future__ import annotations

from scoped_containers.runners.container_runner import ContainerRunner, RunningContainer

__all__ = ["ContainerRunner", "RunningContainer"]
