"""Stale container reaper.

Before a container is started, containers left behind by earlier runs of the
same scope/role (crashed test sessions, interrupted CI jobs, ...) are found
through their labels and removed:

- list matching containers (only when ``force`` is set)
- stop the running ones concurrently
- prune every stopped match with a single engine call
- stamp the labels onto the new request so a later run can find it

The engine is read and then written without any locking. Two processes
reaping the same scope/role at the same time may both try to stop or prune
the same container; the loser sees the engine's error as an
``EngineOperationError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from scoped_containers.core.constants import DEFAULT_DOCKER_TIMEOUT
from scoped_containers.core.errors import EngineOperation, EngineOperationError
from scoped_containers.core.request import SupportsLabels
from scoped_containers.core.schemas import ReaperConfig
from scoped_containers.engine.client import EngineClient, docker_client_instance
from scoped_containers.labels import scope_labels, with_scope_labels
from scoped_containers.logs.consumer import with_default_log_consumer

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=SupportsLabels)
T = TypeVar("T")


@dataclass
class ReapResult:
    """What a reap removed from the engine."""

    stopped: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    space_reclaimed: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.stopped and not self.pruned


async def _engine_call(operation: EngineOperation, call: Awaitable[T]) -> T:
    try:
        return await call
    except EngineOperationError:
        raise
    except Exception as e:
        raise EngineOperationError(operation, e) from e


async def reap(
    scope: str,
    role: str,
    force: bool = False,
    *,
    client: EngineClient | None = None,
    timeout: int = DEFAULT_DOCKER_TIMEOUT,
) -> ReapResult:
    """Remove stale containers carrying the scope/role label triple.

    Args:
        scope: Scope the containers belong to
        role: Container role within the scope
        force: Stop running matches first; otherwise running containers are kept
        client: Engine client to use (defaults to the shared Docker client)
        timeout: Docker API timeout used when the shared client is created

    Returns:
        ReapResult listing stopped and pruned container ids

    Raises:
        EngineOperationError: If connecting, listing, stopping or pruning fails
    """
    labels = scope_labels(scope, role)
    if client is None:
        client = await docker_client_instance(timeout=timeout)

    filters = labels.as_filters()
    result = ReapResult()

    if force:
        matches = await _engine_call(
            EngineOperation.LIST, client.list_containers(filters, all=False)
        )
        running = [c.id for c in matches if c.is_running]

        # Fail fast: the first failed stop aborts, stops already issued stay done
        await asyncio.gather(
            *(_engine_call(EngineOperation.STOP, client.stop_container(cid)) for cid in running)
        )
        result.stopped = running

        if running:
            logger.warning(
                f"Stopped {len(running)} running container(s) for {scope}/{role}: "
                f"{[cid[:12] for cid in running]}"
            )

    report = await _engine_call(EngineOperation.PRUNE, client.prune_containers(filters))
    result.pruned = report.containers_deleted
    result.space_reclaimed = report.space_reclaimed

    if report.containers_deleted:
        logger.warning(
            f"Pruned {len(report.containers_deleted)} existing container(s) for {scope}/{role}: "
            f"{[cid[:12] for cid in report.containers_deleted]} "
            f"(reclaimed {report.space_reclaimed} bytes)"
        )
    else:
        logger.debug(f"No stale containers to prune for {scope}/{role}")

    return result


async def reap_and_label(
    request: R,
    scope: str,
    role: str,
    prune: bool = True,
    force: bool = False,
    *,
    client: EngineClient | None = None,
    timeout: int = DEFAULT_DOCKER_TIMEOUT,
) -> R:
    """Clean up stale containers of a scope/role, then label the new request.

    With ``prune=False`` the engine is never contacted and the request is only
    labelled, so this succeeds even when no engine is reachable.

    Example:
        ```python
        request = await reap_and_label(
            ContainerRequest("redis", "7.2.4"), "my-project", "redis", prune=True, force=True
        )
        ```

    Args:
        request: Request to label
        scope: Scope identifier
        role: Container role within the scope
        prune: Remove stale matching containers before labelling
        force: Stop running stale containers before pruning
        client: Engine client to use (defaults to the shared Docker client)
        timeout: Docker API timeout used when the shared client is created

    Returns:
        The same request carrying the label triple

    Raises:
        EngineOperationError: If any engine call fails; the request is not labelled
    """
    if prune:
        await reap(scope, role, force, client=client, timeout=timeout)

    return with_scope_labels(request, scope, role)


async def prepare_request(
    request: R,
    role: str,
    config: ReaperConfig | None = None,
    *,
    scope: str | None = None,
    client: EngineClient | None = None,
) -> R:
    """Reap, label and attach the default log consumer according to a config.

    Args:
        request: Request to prepare
        role: Container role within the scope
        config: Reaper configuration (defaults to ``SCOPED_CONTAINERS_*`` env vars)
        scope: Scope override (defaults to ``config.scope``)
        client: Engine client to use (defaults to the shared Docker client)

    Raises:
        ValueError: If no scope is given and the config has none
        EngineOperationError: If any engine call fails
    """
    if config is None:
        config = ReaperConfig.from_env()

    scope = scope or config.scope
    if not scope:
        raise ValueError("No scope given and none configured (set SCOPED_CONTAINERS_SCOPE)")

    request = await reap_and_label(
        request,
        scope,
        role,
        prune=config.prune,
        force=config.force,
        client=client,
        timeout=config.docker_timeout_seconds,
    )

    if config.default_log_consumer:
        request = with_default_log_consumer(request)
    return request
