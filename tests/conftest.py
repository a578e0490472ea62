"""Pytest configuration and fixtures."""

import io
import json
import struct
import zipfile
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sse_starlette import sse as sse_module

from app.api.deps import get_github
from app.config import settings
from app.core.registry import RunRegistry, get_run_registry
from app.main import app
from app.services.github import GitHubActionsClient

API_BASE = "https://api.github.test"
REPO_PATH = "/repos/acme/infra"


def build_log_zip(files: dict[str, str]) -> bytes:
    """Build a log archive the way GitHub packages one."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def with_compression_method(data: bytes, method: int) -> bytes:
    """Rewrite the compression method of every entry in an archive."""
    buffer = bytearray(data)
    # Local file headers, then central directory headers
    for signature, offset in ((b"PK\x03\x04", 8), (b"PK\x01\x02", 10)):
        start = buffer.find(signature)
        while start != -1:
            buffer[start + offset:start + offset + 2] = struct.pack("<H", method)
            start = buffer.find(signature, start + 4)
    return bytes(buffer)


def run_payload(
    run_id: int = 1001,
    status: str = "queued",
    conclusion: str | None = None,
    with_logs: bool = True,
) -> dict[str, Any]:
    """A workflow run object as returned by the GitHub API."""
    return {
        "id": run_id,
        "status": status,
        "conclusion": conclusion,
        "logs_url": f"{API_BASE}{REPO_PATH}/actions/runs/{run_id}/logs" if with_logs else None,
    }


class FakeGitHubAPI:
    """Scripted stand-in for the GitHub REST API.

    Run and log responses are consumed in order; the last one repeats.
    """

    def __init__(self):
        self.dispatch_status = 204
        self.runs_status = 200
        self.workflow_runs: list[dict[str, Any]] = [run_payload()]
        self.run_responses: list[tuple[int, dict[str, Any]]] = [(200, run_payload())]
        self.log_responses: list[tuple[int, bytes]] = [(404, b"")]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/dispatches"):
            return httpx.Response(self.dispatch_status)

        if "/actions/workflows/" in path and path.endswith("/runs"):
            return httpx.Response(
                self.runs_status,
                json={
                    "total_count": len(self.workflow_runs),
                    "workflow_runs": self.workflow_runs,
                },
            )

        if path.endswith("/logs"):
            status_code, content = self._next(self.log_responses)
            return httpx.Response(status_code, content=content)

        if "/actions/runs/" in path:
            status_code, body = self._next(self.run_responses)
            return httpx.Response(status_code, json=body)

        return httpx.Response(404, json={"message": "Not Found"})

    @staticmethod
    def _next(queue: list) -> Any:
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def calls(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def dispatched_body(self) -> dict[str, Any]:
        return json.loads(self.calls("/dispatches")[0].content)


def parse_sse(body: str) -> list[tuple[str, dict[str, Any]]]:
    """Split an event-stream body into (event, data) pairs, skipping pings."""
    events = []
    for block in body.replace("\r\n", "\n").split("\n\n"):
        name, data = None, []
        for line in block.split("\n"):
            if line.startswith("event:"):
                name = line[len("event:"):].strip()
            elif line.startswith("data:"):
                data.append(line[len("data:"):].strip())
        if name and data:
            events.append((name, json.loads("\n".join(data))))
    return events


@pytest.fixture
def github_api() -> FakeGitHubAPI:
    """A fresh fake GitHub API."""
    return FakeGitHubAPI()


@pytest.fixture
async def github(github_api: FakeGitHubAPI) -> GitHubActionsClient:
    """A real client wired to the fake API."""
    client = GitHubActionsClient(
        token="test-token",
        owner="acme",
        repo="infra",
        workflow="deploy.yml",
        api_base=API_BASE,
        transport=httpx.MockTransport(github_api.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def registry() -> RunRegistry:
    """Create a fresh run registry for tests."""
    return RunRegistry()


@pytest.fixture
def log_zip():
    return build_log_zip


@pytest.fixture
def unsupported_zip():
    """Builds an archive whose entries use an unknown compression method."""

    def build(files: dict[str, str]) -> bytes:
        return with_compression_method(build_log_zip(files), 99)

    return build


@pytest.fixture
def sse_events():
    return parse_sse


@pytest.fixture
async def client(github: GitHubActionsClient, monkeypatch) -> AsyncClient:
    """Create an async test client backed by the fake GitHub API."""
    monkeypatch.setattr(settings, "github_token", "test-token")
    monkeypatch.setattr(settings, "poll_interval_seconds", 0)
    monkeypatch.setattr(settings, "max_poll_attempts", 10)

    # The exit event binds to the loop of the first test that streams
    app_status = getattr(sse_module, "AppStatus", None)
    if app_status is not None and hasattr(app_status, "should_exit_event"):
        app_status.should_exit_event = None

    shared_registry = get_run_registry()
    shared_registry.clear()
    app.dependency_overrides[get_github] = lambda: github

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Cleanup after test
    app.dependency_overrides.clear()
    shared_registry.clear()


@pytest.fixture
def run_json():
    return run_payload
