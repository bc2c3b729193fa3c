"""Utils module - Shared utilities."""

from __future__ import annotations

from scoped_containers.utils.logging import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
