"""
Integration Test Fixtures.

Integration tests run the real entry point (cli.py) in a subprocess
against a local HTTP server standing in for the control plane.
"""

import json
import os
import subprocess
import sys
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent


class ControlPlane:
    """Canned JSON responses keyed by (method, path), plus a request log."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self.server: ThreadingHTTPServer | None = None

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    @property
    def url(self) -> str:
        assert self.server is not None
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    def handler_class(self) -> type[BaseHTTPRequestHandler]:
        plane = self

        class Handler(BaseHTTPRequestHandler):
            def _respond(self) -> None:
                path = self.path.split("?", 1)[0]
                plane.requests.append((self.command, path, dict(self.headers)))
                length = int(self.headers.get("Content-Length") or 0)
                if length:
                    self.rfile.read(length)

                status, body = plane.routes.get(
                    (self.command, path),
                    (404, {"message": f"no route for {self.command} {path}"}),
                )
                payload = b"" if body is None else json.dumps(body).encode()
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            do_GET = do_POST = do_PUT = do_DELETE = _respond

            def log_message(self, format: str, *args: Any) -> None:
                pass

        return Handler


def _environment() -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("LENSES_")}
    env["LENSES_CLI_HOME"] = str(PROJECT_ROOT)
    env["COLUMNS"] = "200"
    return env


@pytest.fixture
def control_plane() -> Generator[ControlPlane, None, None]:
    """
    Local control plane on a free port, shut down after the test.

    Usage:
        def test_topics(control_plane, run_cli):
            control_plane.add("GET", "/api/topic-names", ["orders"])
            result = run_cli("topics", "--names")
    """
    plane = ControlPlane()
    plane.server = ThreadingHTTPServer(("127.0.0.1", 0), plane.handler_class())
    thread = threading.Thread(target=plane.server.serve_forever, daemon=True)
    thread.start()
    yield plane
    plane.server.shutdown()
    plane.server.server_close()


@pytest.fixture
def run_cli(tmp_path: Path, control_plane: ControlPlane):
    """Run `python cli.py --host=<control plane> ARGS` and return the CompletedProcess."""

    def _run(*args: str, token: str | None = "t0k3n") -> subprocess.CompletedProcess:
        command = [sys.executable, "cli.py", f"--host={control_plane.url}"]
        if token is not None:
            command.append(f"--token={token}")
        return subprocess.run(
            [*command, *args],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=30,
            env=_environment(),
        )

    return _run
