"""Container request builder.

A request describes a container that has not been started yet. Reaping and
log attachment only need the two capabilities captured by
``SupportsLabels`` and ``SupportsLogConsumer``, so any builder exposing
``with_labels``/``with_log_consumer`` can be passed to them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from scoped_containers.logs.consumer import LogConsumer


@runtime_checkable
class SupportsLabels(Protocol):
    """A request builder that can carry container labels."""

    def with_labels(self, labels: Mapping[str, str]) -> Self: ...


@runtime_checkable
class SupportsLogConsumer(Protocol):
    """A request builder that can carry log consumers."""

    def with_log_consumer(self, consumer: LogConsumer) -> Self: ...


@dataclass
class ContainerRequest:
    """A not-yet-started container.

    Example:
        ```python
        request = (
            ContainerRequest("redis", "7.2.4")
            .with_exposed_ports(6379)
            .with_env("REDIS_ARGS", "--save ''")
        )
        request = await reap_and_label(request, "my-project", "redis", force=True)
        request = with_default_log_consumer(request)
        ```
    """

    image: str
    tag: str = "latest"
    command: list[str] | None = None
    env: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    exposed_ports: list[int] = field(default_factory=list)
    name: str | None = None
    log_consumers: list[LogConsumer] = field(default_factory=list)
    create_kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def image_ref(self) -> str:
        """Full image reference (``image:tag``)."""
        return f"{self.image}:{self.tag}"

    def with_labels(self, labels: Mapping[str, str]) -> Self:
        # Later values overwrite earlier ones for the same key
        self.labels.update(labels)
        return self

    def with_label(self, key: str, value: str) -> Self:
        self.labels[key] = value
        return self

    def with_log_consumer(self, consumer: LogConsumer) -> Self:
        self.log_consumers.append(consumer)
        return self

    def with_env(self, key: str, value: str) -> Self:
        self.env[key] = value
        return self

    def with_command(self, command: list[str]) -> Self:
        self.command = list(command)
        return self

    def with_exposed_ports(self, *ports: int) -> Self:
        self.exposed_ports.extend(ports)
        return self

    def with_name(self, name: str) -> Self:
        self.name = name
        return self

    def with_kwargs(self, **kwargs: Any) -> Self:
        """Pass extra keyword arguments through to ``containers.create``."""
        self.create_kwargs.update(kwargs)
        return self
