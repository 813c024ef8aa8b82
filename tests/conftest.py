from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps every event for assertions."""

    def __init__(self):
        self.events: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.events.append((name, args))

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for event, args in self.events if event == name]

    def log_incoming(self, method, path, headers, body_size):
        self._record("incoming", method, path, body_size)

    def log_target(self, url):
        self._record("target", url)

    def log_invalid_target(self, entry, reason):
        self._record("invalid_target", entry, reason)

    def log_forward(self, route, method, path, *, target, body_size):
        self._record("forward", route, method, path, target, body_size)

    def log_response(self, route, path, status):
        self._record("response", route, path, status)

    def log_unmatched(self, method, path):
        self._record("unmatched", method, path)

    def log_error(self, route, status, message):
        self._record("error", route, status, message)


class Backend:
    """Mock backend recording forwarded requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, content=b"ok")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def hosts(self) -> list[str]:
        return [r.headers["host"] for r in self.requests]


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def config():
    config = Config()
    config.targets.urls = ["http://backend-a:8001", "http://backend-b:8002"]
    return config


@pytest.fixture
def make_client(logger, backend):
    """Build a started TestClient for a given config."""
    clients = []

    def _make(config: Config) -> TestClient:
        app = create_app(config, logger, transport=httpx.MockTransport(backend))
        test_client = TestClient(app)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        test_client.__exit__(None, None, None)


@pytest.fixture
def client(config, make_client):
    return make_client(config)
