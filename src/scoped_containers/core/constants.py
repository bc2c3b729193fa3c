"""Shared constants for scoped-containers.

The label key formats are part of the contract with the engine's metadata
store: other processes rediscover stale containers through them, so they
must stay byte-for-byte stable.
"""

from __future__ import annotations

# Label key templates, formatted with the scope name
SCOPE_LABEL_KEY = "{scope}.testcontainers.scope"
CONTAINER_LABEL_KEY = "{scope}.testcontainers.container"
PRUNE_LABEL_KEY = "{scope}.testcontainers.prune"

# Value of the prune sentinel label
PRUNE_LABEL_VALUE = "true"

# Engine-reported state of a running container
RUNNING_STATE = "running"

# Default Docker API timeout (seconds) for the shared engine client
DEFAULT_DOCKER_TIMEOUT = 60

# Environment variable prefix for configuration overrides
ENV_PREFIX = "SCOPED_CONTAINERS_"
