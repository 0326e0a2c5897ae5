"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

HTTP Stubbing:
    Tests never talk to a real control plane. StubTransport wraps an
    httpx.MockTransport, routes requests by (method, path) and records
    every request it sees, so tests can assert both on what was sent and
    on how many calls were made.

        def test_get_topic(stub, client):
            stub.add("GET", "/api/topics/orders", json={"topicName": "orders"})
            assert client.get_topic("orders").topic_name == "orders"
            assert stub.count == 1
"""

import logging
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from click.testing import Result
from typer.testing import CliRunner

from lenscli.api.client import LensesClient
from lenscli.cli.context import CliContext
from lenscli.cli.main import app
from lenscli.core.config import get_app_config, get_settings

LENSES_ENV_VARS = ("LENSES_TOKEN", "LENSES_USER", "LENSES_PASSWORD", "LENSES_HOST", "LENSES_CLI_HOME")


class StubTransport:
    """Call-counting httpx transport with (method, path) routing."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def add(self, method: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        """Answer METHOD path with a fresh Response(status_code, **kwargs) on every call."""
        self.routes[(method, path)] = lambda request: httpx.Response(status_code, **kwargs)

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, path)] = handler

    @property
    def count(self) -> int:
        return len(self.calls)

    def paths(self) -> list[str]:
        return [f"{request.method} {request.url.path}" for request in self.calls]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"no route for {request.method} {request.url.path}"})
        return handler(request)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop LENSES_* variables, clear config caches and logging handlers around each test."""
    for name in LENSES_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COLUMNS", "200")
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture
def stub() -> StubTransport:
    return StubTransport()


@pytest.fixture
def client(stub: StubTransport) -> Generator[LensesClient, None, None]:
    """LensesClient wired to the stub transport."""
    lenses = LensesClient(base_url="http://test", token="t0k3n", transport=stub.transport)
    yield lenses
    lenses.close()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, client: LensesClient) -> Callable[..., Result]:
    """
    Run the CLI with the stub-backed client injected.

    Usage:
        result = invoke("-o", "json", "topic", "--name=orders")
    """

    def _invoke(*args: str) -> Result:
        return runner.invoke(app, list(args), obj=CliContext(client=client))

    return _invoke
