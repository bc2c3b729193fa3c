"""Tests for scope labels."""

import pytest
from pydantic import ValidationError

from scoped_containers.core.request import ContainerRequest
from scoped_containers.core.schemas import ScopeLabels
from scoped_containers.labels import scope_labels, with_scope_labels


class TestScopeLabels:
    """Tests for the ScopeLabels schema."""

    def test_label_keys(self):
        """Label keys keep the cross-process naming format."""
        labels = scope_labels("proj-A", "redis")
        assert labels.scope_key == "proj-A.testcontainers.scope"
        assert labels.container_key == "proj-A.testcontainers.container"
        assert labels.prune_key == "proj-A.testcontainers.prune"

    def test_as_dict(self):
        assert scope_labels("proj-A", "redis").as_dict() == {
            "proj-A.testcontainers.prune": "true",
            "proj-A.testcontainers.scope": "proj-A",
            "proj-A.testcontainers.container": "redis",
        }

    def test_as_filters(self):
        """All three labels are ANDed in one label filter."""
        filters = scope_labels("proj-A", "redis").as_filters()
        assert filters == {
            "label": [
                "proj-A.testcontainers.prune=true",
                "proj-A.testcontainers.scope=proj-A",
                "proj-A.testcontainers.container=redis",
            ]
        }

    def test_filters_built_fresh(self):
        labels = scope_labels("proj-A", "redis")
        first = labels.as_filters()
        first["label"].append("tampered=1")
        assert len(labels.as_filters()["label"]) == 3

    def test_matches_requires_full_triple(self):
        labels = scope_labels("proj-A", "redis")
        full = labels.as_dict()
        assert labels.matches(full)
        assert labels.matches({**full, "extra": "x"})

        for key in full:
            partial = {k: v for k, v in full.items() if k != key}
            assert not labels.matches(partial)

        assert not labels.matches({**full, labels.container_key: "postgres"})
        assert not labels.matches(None)

    def test_empty_scope_rejected(self):
        with pytest.raises(ValidationError):
            ScopeLabels(scope="", role="redis")

    def test_frozen(self):
        labels = scope_labels("proj-A", "redis")
        with pytest.raises(ValidationError):
            labels.scope = "proj-B"


class TestWithScopeLabels:
    """Tests for labelling container requests."""

    def test_adds_triple(self):
        request = ContainerRequest("redis", "7.2.4").with_label("keep", "me")
        result = with_scope_labels(request, "proj-A", "redis")

        assert result is request
        assert result.labels["keep"] == "me"
        assert result.labels["proj-A.testcontainers.scope"] == "proj-A"
        assert result.labels["proj-A.testcontainers.container"] == "redis"
        assert result.labels["proj-A.testcontainers.prune"] == "true"

    def test_idempotent(self):
        request = ContainerRequest("redis")
        with_scope_labels(request, "proj-A", "redis")
        once = dict(request.labels)
        with_scope_labels(request, "proj-A", "redis")
        assert request.labels == once

    def test_overwrites_stale_values(self):
        request = ContainerRequest("redis").with_label("proj-A.testcontainers.prune", "false")
        with_scope_labels(request, "proj-A", "redis")
        assert request.labels["proj-A.testcontainers.prune"] == "true"

    def test_any_labels_builder(self):
        """Any object exposing with_labels can be labelled."""

        class Builder:
            def __init__(self):
                self.seen = {}

            def with_labels(self, labels):
                self.seen.update(labels)
                return self

        builder = with_scope_labels(Builder(), "s", "r")
        assert builder.seen == scope_labels("s", "r").as_dict()
