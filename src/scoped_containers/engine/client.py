"""Async container engine client.

Wraps the synchronous Docker SDK so the reaper can await engine calls
without blocking the event loop. Each blocking call runs in a worker thread
via ``asyncio.to_thread``; any failure is re-raised as
``EngineOperationError`` tagged with the primitive that failed.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

import docker

from scoped_containers.core.constants import DEFAULT_DOCKER_TIMEOUT, RUNNING_STATE
from scoped_containers.core.errors import EngineOperation, EngineOperationError

logger = logging.getLogger(__name__)


@dataclass
class ContainerSummary:
    """One row of an engine container listing."""

    id: str
    state: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    names: list[str] = field(default_factory=list)
    image: str | None = None
    status: str | None = None

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING_STATE

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ContainerSummary:
        """Build a summary from a Docker ``/containers/json`` entry."""
        return cls(
            id=data["Id"],
            state=data.get("State"),
            labels=data.get("Labels") or {},
            names=[name.lstrip("/") for name in data.get("Names") or []],
            image=data.get("Image"),
            status=data.get("Status"),
        )


@dataclass
class PruneReport:
    """Result of a container prune call."""

    containers_deleted: list[str] = field(default_factory=list)
    space_reclaimed: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> PruneReport:
        """Build a report from a Docker ``/containers/prune`` response."""
        data = data or {}
        return cls(
            containers_deleted=list(data.get("ContainersDeleted") or []),
            space_reclaimed=int(data.get("SpaceReclaimed") or 0),
        )


class EngineClient(Protocol):
    """Minimal engine surface needed to discover, stop and prune containers."""

    async def list_containers(
        self, filters: dict[str, list[str]], all: bool = False
    ) -> list[ContainerSummary]: ...

    async def stop_container(self, container_id: str) -> None: ...

    async def prune_containers(self, filters: dict[str, list[str]]) -> PruneReport: ...


class DockerEngineClient:
    """EngineClient backed by the Docker SDK low-level API.

    Example:
        ```python
        client = DockerEngineClient(docker.from_env())
        running = await client.list_containers({"label": ["app=redis"]})
        ```
    """

    def __init__(self, client: docker.DockerClient) -> None:
        self._client = client

    @property
    def docker(self) -> docker.DockerClient:
        return self._client

    async def list_containers(
        self, filters: dict[str, list[str]], all: bool = False
    ) -> list[ContainerSummary]:
        """List containers matching ``filters``.

        Args:
            filters: Docker API filters (e.g. ``{"label": ["k=v"]}``)
            all: Include non-running containers

        Returns:
            One ContainerSummary per matching container
        """
        try:
            rows = await asyncio.to_thread(self._client.api.containers, all=all, filters=filters)
        except Exception as e:
            raise EngineOperationError(EngineOperation.LIST, e) from e
        return [ContainerSummary.from_api(row) for row in rows]

    async def stop_container(self, container_id: str) -> None:
        """Stop a container by id using the engine's default stop timeout."""
        try:
            await asyncio.to_thread(self._client.api.stop, container_id)
        except Exception as e:
            raise EngineOperationError(EngineOperation.STOP, e) from e
        logger.debug(f"Stopped container {container_id[:12]}")

    async def prune_containers(self, filters: dict[str, list[str]]) -> PruneReport:
        """Remove all stopped containers matching ``filters``."""
        try:
            result = await asyncio.to_thread(self._client.api.prune_containers, filters=filters)
        except Exception as e:
            raise EngineOperationError(EngineOperation.PRUNE, e) from e
        return PruneReport.from_api(result)

    def close(self) -> None:
        self._client.close()


_shared_client: DockerEngineClient | None = None
_shared_client_lock = threading.Lock()


def _get_or_create_client(timeout: int) -> DockerEngineClient:
    global _shared_client

    with _shared_client_lock:
        if _shared_client is None:
            client = docker.from_env(timeout=timeout)
            try:
                client.ping()
            except Exception:
                client.close()
                raise
            _shared_client = DockerEngineClient(client)
            logger.debug("Connected to Docker engine")
        return _shared_client


async def docker_client_instance(timeout: int = DEFAULT_DOCKER_TIMEOUT) -> DockerEngineClient:
    """Return the process-wide engine client, connecting on first use.

    Args:
        timeout: Docker API timeout in seconds, applied when the client is created

    Raises:
        EngineOperationError: If the engine cannot be reached
    """
    try:
        return await asyncio.to_thread(_get_or_create_client, timeout)
    except Exception as e:
        raise EngineOperationError(EngineOperation.CONNECT, e) from e


def reset_docker_client() -> None:
    """Close and forget the process-wide engine client."""
    global _shared_client

    with _shared_client_lock:
        if _shared_client is not None:
            try:
                _shared_client.close()
            except Exception as e:
                logger.debug(f"Error closing Docker client: {e}")
            _shared_client = None
