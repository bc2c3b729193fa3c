"""Docker container runner for prepared requests.

Starts a ContainerRequest with the Docker SDK and feeds its output to the
request's log consumers. Labels set by the reaper travel with the container,
so a later process can find and prune it.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import docker
from docker.errors import ImageNotFound, NotFound

from scoped_containers.core.request import ContainerRequest
from scoped_containers.logs.consumer import LogFrame, LogSource

if TYPE_CHECKING:
    from docker.models.containers import Container

logger = logging.getLogger(__name__)


@dataclass
class RunningContainer:
    """A started container and the threads following its logs."""

    container: Container
    request: ContainerRequest
    log_threads: list[threading.Thread] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.container.id

    def host_port(self, port: int) -> int | None:
        """Return the host port bound to a container TCP port, if published."""
        self.container.reload()
        bindings = self.container.ports.get(f"{port}/tcp") or []
        for binding in bindings:
            if binding.get("HostPort"):
                return int(binding["HostPort"])
        return None


class ContainerRunner:
    """Starts container requests and streams their logs to consumers.

    Example:
        ```python
        runner = ContainerRunner()
        running = runner.start(request)
        ...
        runner.stop(running)
        ```
    """

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        self._client = client or docker.from_env()

    def pull_image(self, image: str) -> None:
        """Pull an image unless it is already present."""
        try:
            self._client.images.get(image)
            logger.debug(f"Image {image} already present")
        except ImageNotFound:
            logger.info(f"Pulling image {image}...")
            self._client.images.pull(image)

    def _create_kwargs(self, request: ContainerRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "command": request.command,
            "environment": request.env,
            "labels": request.labels,
            "detach": True,
        }
        if request.exposed_ports:
            # None publishes on a random host port
            kwargs["ports"] = {f"{port}/tcp": None for port in request.exposed_ports}
        if request.name:
            kwargs["name"] = request.name
        kwargs.update(request.create_kwargs)
        return kwargs

    def start(self, request: ContainerRequest) -> RunningContainer:
        """Create and start a container from a request.

        Raises:
            docker.errors.DockerException: If the image cannot be pulled or the
                container cannot be created or started
        """
        self.pull_image(request.image_ref)

        container = self._client.containers.create(
            request.image_ref, **self._create_kwargs(request)
        )
        logger.info(f"Starting container {container.short_id} ({request.image_ref})")
        try:
            container.start()
        except Exception:
            with contextlib.suppress(Exception):
                container.remove(force=True)
            raise

        running = RunningContainer(container=container, request=request)
        if request.log_consumers:
            for source in LogSource:
                thread = threading.Thread(
                    target=self._follow_logs,
                    args=(container, source, request),
                    name=f"logs-{container.short_id}-{source.value}",
                    daemon=True,
                )
                thread.start()
                running.log_threads.append(thread)
        return running

    def _follow_logs(
        self, container: Container, source: LogSource, request: ContainerRequest
    ) -> None:
        try:
            stream = container.logs(
                stdout=source is LogSource.STDOUT,
                stderr=source is LogSource.STDERR,
                stream=True,
                follow=True,
            )
            for chunk in stream:
                frame = LogFrame(source=source, data=chunk)
                for consumer in request.log_consumers:
                    try:
                        consumer.accept(frame)
                    except Exception as e:
                        logger.warning(f"Log consumer failed: {e}")
        except NotFound:
            pass
        except Exception as e:
            logger.debug(f"Stopped following {source.value} of {container.short_id}: {e}")

    def stop(self, running: RunningContainer, remove: bool = True) -> None:
        """Stop a running container and optionally remove it."""
        try:
            running.container.stop()
            if remove:
                running.container.remove(force=True)
                logger.debug(f"Removed container {running.container.short_id}")
        except NotFound:
            pass

        for thread in running.log_threads:
            thread.join(timeout=5)

    def cleanup(self) -> None:
        """Clean up any resources."""
        with contextlib.suppress(Exception):
            self._client.close()
