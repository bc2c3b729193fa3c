"""Tests for ContainerRunner."""

from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, ImageNotFound

from scoped_containers.core.request import ContainerRequest
from scoped_containers.logs.consumer import LogFrame, LogSource
from scoped_containers.runners.container_runner import ContainerRunner


class RecordingConsumer:
    def __init__(self):
        self.frames: list[LogFrame] = []

    def accept(self, frame: LogFrame) -> None:
        self.frames.append(frame)


def create_mock_client() -> MagicMock:
    """Create a mock Docker client whose container emits one line per stream."""
    client = MagicMock()
    container = client.containers.create.return_value
    container.short_id = "abc123"

    def logs(stdout=True, stderr=True, stream=False, follow=False):
        return iter([b"out\n"] if stdout else [b"err\n"])

    container.logs.side_effect = logs
    return client


class TestContainerRunner:
    """Tests for ContainerRunner class."""

    def test_create_kwargs(self):
        client = create_mock_client()
        runner = ContainerRunner(client)
        request = (
            ContainerRequest("redis", "7.2.4")
            .with_labels({"proj-A.testcontainers.scope": "proj-A"})
            .with_env("A", "1")
            .with_exposed_ports(6379)
            .with_name("redis-test")
            .with_kwargs(mem_limit="256m")
        )

        runner.start(request)

        client.containers.create.assert_called_once_with(
            "redis:7.2.4",
            command=None,
            environment={"A": "1"},
            labels={"proj-A.testcontainers.scope": "proj-A"},
            detach=True,
            ports={"6379/tcp": None},
            name="redis-test",
            mem_limit="256m",
        )
        client.containers.create.return_value.start.assert_called_once()

    def test_pulls_missing_image(self):
        client = create_mock_client()
        client.images.get.side_effect = ImageNotFound("missing")

        ContainerRunner(client).start(ContainerRequest("redis", "7.2.4"))

        client.images.pull.assert_called_once_with("redis:7.2.4")

    def test_streams_logs_to_consumers(self):
        client = create_mock_client()
        consumer = RecordingConsumer()
        runner = ContainerRunner(client)

        running = runner.start(ContainerRequest("redis").with_log_consumer(consumer))
        for thread in running.log_threads:
            thread.join(timeout=5)

        assert sorted((f.source, f.data) for f in consumer.frames) == [
            (LogSource.STDERR, b"err\n"),
            (LogSource.STDOUT, b"out\n"),
        ]

    def test_no_log_threads_without_consumers(self):
        running = ContainerRunner(create_mock_client()).start(ContainerRequest("redis"))
        assert running.log_threads == []

    def test_failed_start_removes_container(self):
        client = create_mock_client()
        container = client.containers.create.return_value
        container.start.side_effect = APIError("port already allocated")

        with pytest.raises(APIError):
            ContainerRunner(client).start(ContainerRequest("redis"))

        container.remove.assert_called_once_with(force=True)

    def test_stop_removes(self):
        client = create_mock_client()
        runner = ContainerRunner(client)
        running = runner.start(ContainerRequest("redis"))

        runner.stop(running)

        running.container.stop.assert_called_once()
        running.container.remove.assert_called_once_with(force=True)

    def test_host_port(self):
        client = create_mock_client()
        running = ContainerRunner(client).start(ContainerRequest("redis").with_exposed_ports(6379))
        running.container.ports = {"6379/tcp": [{"HostIp": "0.0.0.0", "HostPort": "49153"}]}

        assert running.host_port(6379) == 49153
        assert running.host_port(1234) is None
