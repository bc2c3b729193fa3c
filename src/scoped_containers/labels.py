"""Scope labelling for container requests."""

from __future__ import annotations

from typing import TypeVar

from scoped_containers.core.request import SupportsLabels
from scoped_containers.core.schemas import ScopeLabels

R = TypeVar("R", bound=SupportsLabels)


def scope_labels(scope: str, role: str) -> ScopeLabels:
    """Build the label triple for a scope/role pair."""
    return ScopeLabels(scope=scope, role=role)


def with_scope_labels(request: R, scope: str, role: str) -> R:
    """Stamp the scope, container and prune labels onto a request.

    Re-applying the same labels is harmless: existing keys are overwritten.
    """
    return request.with_labels(scope_labels(scope, role).as_dict())
