"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation, with
``SCOPED_CONTAINERS_*`` environment variables taking precedence.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from scoped_containers.core.schemas import ReaperConfig


def load_config(path: Path | str, *, use_env: bool = False) -> ReaperConfig:
    """Load and validate a reaper configuration file.

    Args:
        path: Path to YAML or JSON configuration file
        use_env: Overlay ``SCOPED_CONTAINERS_*`` environment variables

    Returns:
        Validated ReaperConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    config = ReaperConfig.model_validate(data or {})
    if use_env:
        config = ReaperConfig.from_env(base=config)
    return config
