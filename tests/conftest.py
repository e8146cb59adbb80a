"""Shared test fixtures for all test modules."""

import threading
from collections.abc import Callable, Iterator

import httpx
import pytest
from prometheus_client import CollectorRegistry, Gauge, generate_latest

from madpy.adapters.storage.sample_queue import SampleQueue
from madpy.core.selector import Selector, parse_selector

# Canonical binary series used by the end-to-end regression test; change
# points are expected at indices 61 and 94.
FIXTURE_VALUES = [
    1, 1, 1, 0, 0, 0, 1, 1, 0, 0, 0, 0, 0, 0, 0, 1, 0, 0, 1, 0,
    1, 0, 1, 0, 1, 0, 1, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1, 1, 0, 1,
    0, 0, 1, 0, 0, 1, 0, 0, 1, 0, 0, 0, 1, 0, 1, 1, 0, 0, 0, 0,
    0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1,
    0, 1, 1, 1, 1, 1, 0, 0, 1, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 1,
]  # fmt: skip
FIXTURE_CHANGE_POINTS = [61, 94]

ENDPOINT = "http://exporter.test/metrics"
TARGET = 'mock_metric{job="mock"}'


def render_payload(
    value: float,
    name: str = "mock_metric",
    labels: dict[str, str] | None = None,
) -> str:
    """Render an exposition payload holding one gauge sample."""
    registry = CollectorRegistry()
    labels = labels if labels is not None else {"job": "mock"}
    gauge = Gauge(name, "Mock metric", labelnames=list(labels), registry=registry)
    (gauge.labels(**labels) if labels else gauge).set(value)
    return generate_latest(registry).decode()


@pytest.fixture
def fixture_values() -> list[int]:
    """The canonical 100-sample binary series."""
    return list(FIXTURE_VALUES)


@pytest.fixture
def target() -> Selector:
    """Selector for the mock gauge rendered by render_payload."""
    return parse_selector(TARGET)


@pytest.fixture
def payload_factory() -> Callable[..., str]:
    """Factory fixture rendering exposition payloads with prometheus_client."""
    return render_payload


@pytest.fixture
def sample_queue() -> Iterator[SampleQueue]:
    """A queue closed again after the test, waking any stuck thread."""
    queue = SampleQueue()
    yield queue
    queue.close()


@pytest.fixture
def stop_event() -> Iterator[threading.Event]:
    """Shared stop event, set on teardown."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def mock_client():
    """Factory fixture for an httpx.Client backed by a MockTransport.

    Usage:
        def test_something(mock_client):
            client = mock_client(lambda request: httpx.Response(200, text="..."))
    """
    clients: list[httpx.Client] = []

    def _get_client(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _get_client
    for client in clients:
        client.close()
