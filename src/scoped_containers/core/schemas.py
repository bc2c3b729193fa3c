"""Pydantic schemas for scoped-containers.

Defines the label triple that ties a container to its scope and role, and
the reaper configuration loaded from files or the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

from scoped_containers.core.constants import (
    CONTAINER_LABEL_KEY,
    DEFAULT_DOCKER_TIMEOUT,
    ENV_PREFIX,
    PRUNE_LABEL_KEY,
    PRUNE_LABEL_VALUE,
    SCOPE_LABEL_KEY,
)


class ScopeLabels(BaseModel):
    """The three labels marking a container as a prune-eligible scope member.

    A container belongs to a scope/role group only when it carries all three
    labels with exactly these values.

    Attributes:
        scope: Logical grouping identifier (project, test run, ...)
        role: Kind of container within the scope (e.g. 'redis')
    """

    scope: str = Field(..., min_length=1, description="Scope identifier")
    role: str = Field(..., min_length=1, description="Container role within the scope")

    model_config = {"frozen": True}

    @property
    def scope_key(self) -> str:
        return SCOPE_LABEL_KEY.format(scope=self.scope)

    @property
    def container_key(self) -> str:
        return CONTAINER_LABEL_KEY.format(scope=self.scope)

    @property
    def prune_key(self) -> str:
        return PRUNE_LABEL_KEY.format(scope=self.scope)

    def as_dict(self) -> dict[str, str]:
        """Return the labels as a key/value mapping for a container request."""
        return {
            self.prune_key: PRUNE_LABEL_VALUE,
            self.scope_key: self.scope,
            self.container_key: self.role,
        }

    def as_filters(self) -> dict[str, list[str]]:
        """Return an engine query filter matching all three labels.

        The engine ANDs multiple ``label`` entries, so only containers carrying
        the complete triple match.
        """
        return {"label": [f"{key}={value}" for key, value in self.as_dict().items()]}

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        """Check whether a container's labels carry the complete triple."""
        if not labels:
            return False
        return all(labels.get(key) == value for key, value in self.as_dict().items())


class ReaperConfig(BaseModel):
    """Configuration for stale container cleanup.

    Attributes:
        scope: Default scope for requests prepared with this config
        prune: Remove stale containers of the same scope/role before starting
        force: Stop still-running stale containers before pruning
        docker_timeout_seconds: Docker API timeout for the shared client
        default_log_consumer: Attach the default log consumer when preparing
    """

    scope: str | None = Field(default=None, min_length=1, description="Default scope")
    prune: bool = Field(default=True, description="Prune stale containers")
    force: bool = Field(default=False, description="Stop running stale containers first")
    docker_timeout_seconds: int = Field(
        default=DEFAULT_DOCKER_TIMEOUT, ge=1, description="Docker API timeout"
    )
    default_log_consumer: bool = Field(default=True, description="Attach default log consumer")

    model_config = {"extra": "forbid"}

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: ReaperConfig | None = None,
    ) -> ReaperConfig:
        """Overlay ``SCOPED_CONTAINERS_*`` environment variables onto a config.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            base: Config to start from (defaults to built-in defaults)

        Returns:
            Validated ReaperConfig
        """
        if environ is None:
            environ = os.environ

        data = base.model_dump() if base is not None else {}
        env_fields = {
            "SCOPE": "scope",
            "PRUNE": "prune",
            "FORCE": "force",
            "DOCKER_TIMEOUT": "docker_timeout_seconds",
            "DEFAULT_LOG_CONSUMER": "default_log_consumer",
        }
        for suffix, field_name in env_fields.items():
            value = environ.get(f"{ENV_PREFIX}{suffix}")
            if value is not None and value.strip() != "":
                data[field_name] = value.strip()

        return cls.model_validate(data)
