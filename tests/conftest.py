"""Shared fixtures: an in-memory container engine."""

from __future__ import annotations

import asyncio

import pytest

from scoped_containers.core.schemas import ScopeLabels
from scoped_containers.engine.client import ContainerSummary, PruneReport


class FakeEngine:
    """In-memory EngineClient modelling label filters, stop and prune.

    Prune only removes containers that are not running, like the Docker engine.
    """

    def __init__(self) -> None:
        self.containers: dict[str, ContainerSummary] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_stop: dict[str, Exception] = {}
        self.fail_list: Exception | None = None
        self.fail_prune: Exception | None = None
        self.stop_delay = 0.0
        self._in_flight = 0
        self.max_in_flight = 0

    def add(
        self,
        container_id: str,
        state: str = "running",
        labels: dict[str, str] | None = None,
    ) -> ContainerSummary:
        summary = ContainerSummary(id=container_id, state=state, labels=dict(labels or {}))
        self.containers[container_id] = summary
        return summary

    def add_scoped(self, container_id: str, scope: str, role: str, state: str = "running"):
        return self.add(container_id, state, ScopeLabels(scope=scope, role=role).as_dict())

    def calls_of(self, name: str) -> list[object]:
        return [arg for call, arg in self.calls if call == name]

    @staticmethod
    def _matches(container: ContainerSummary, filters: dict[str, list[str]]) -> bool:
        for entry in filters.get("label", []):
            key, _, value = entry.partition("=")
            if container.labels.get(key) != value:
                return False
        return True

    async def list_containers(
        self, filters: dict[str, list[str]], all: bool = False
    ) -> list[ContainerSummary]:
        self.calls.append(("list", (filters, all)))
        if self.fail_list is not None:
            raise self.fail_list
        return [
            c
            for c in self.containers.values()
            if self._matches(c, filters) and (all or c.is_running)
        ]

    async def stop_container(self, container_id: str) -> None:
        self.calls.append(("stop", container_id))
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(self.stop_delay)
            if container_id in self.fail_stop:
                raise self.fail_stop[container_id]
            if container_id not in self.containers:
                raise LookupError(f"No such container: {container_id}")
            self.containers[container_id].state = "exited"
        finally:
            self._in_flight -= 1

    async def prune_containers(self, filters: dict[str, list[str]]) -> PruneReport:
        self.calls.append(("prune", filters))
        if self.fail_prune is not None:
            raise self.fail_prune
        deleted = [
            cid
            for cid, c in self.containers.items()
            if self._matches(c, filters) and not c.is_running
        ]
        for cid in deleted:
            del self.containers[cid]
        return PruneReport(containers_deleted=deleted, space_reclaimed=1024 * len(deleted))


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()
