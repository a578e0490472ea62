"""GitHub Actions REST client.

Covers the four calls the relay needs: dispatching the deploy workflow,
listing its recent runs, reading one run and downloading a run's log archive.
"""

from typing import Any

import httpx

from app.config import Settings, settings
from app.core.exceptions import (
    ClientError,
    DispatchError,
    LogFetchError,
    NotFoundError,
    TransientServerError,
)
from app.models.deployment import RunLifecycle, RunStatus
from app.utils.logging import get_logger

logger = get_logger(__name__)


class GitHubActionsClient:
    """Async client bound to one repository and workflow file."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        workflow: str,
        api_base: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "deploy-relay/0.1",
            },
            follow_redirects=True,
            transport=transport,
        )
        self.api_base = api_base.rstrip("/")
        self.owner = owner
        self.repo = repo
        self.workflow = workflow

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "GitHubActionsClient":
        config = config or settings
        return cls(
            token=config.github_token,
            owner=config.github_owner,
            repo=config.github_repo,
            workflow=config.github_workflow,
            api_base=config.github_api_base,
            timeout=config.github_timeout,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def repo_url(self) -> str:
        return f"{self.api_base}/repos/{self.owner}/{self.repo}"

    async def dispatch_workflow(self, inputs: dict[str, str], ref: str) -> None:
        """Trigger the workflow. GitHub returns no body and no run id."""
        url = f"{self.repo_url}/actions/workflows/{self.workflow}/dispatches"
        r = await self.client.post(url, json={"ref": ref, "inputs": inputs})
        if r.is_success:
            return
        logger.error(
            "github.dispatch_failed",
            workflow=self.workflow,
            status_code=r.status_code,
            body=r.text[:500],
        )
        raise DispatchError(r.status_code)

    async def list_workflow_runs(self, per_page: int = 1) -> list[RunStatus]:
        """Recent dispatch-triggered runs of the workflow, newest first."""
        url = f"{self.repo_url}/actions/workflows/{self.workflow}/runs"
        r = await self.client.get(
            url, params={"per_page": per_page, "event": "workflow_dispatch"}
        )
        if r.status_code >= 500:
            raise TransientServerError(
                f"GitHub API Error: {r.status_code}", r.status_code
            )
        if not r.is_success:
            raise ClientError(r.status_code)
        return [_to_status(d) for d in r.json().get("workflow_runs", [])]

    async def get_run(self, run_id: str) -> RunStatus:
        """Fetch one run, classifying failures for the poll loop."""
        url = f"{self.repo_url}/actions/runs/{run_id}"
        try:
            r = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise TransientServerError(f"GitHub request timed out: {e}") from e

        if r.status_code == 404:
            raise NotFoundError(run_id)
        if r.status_code >= 500:
            raise TransientServerError(
                f"GitHub API Error: {r.status_code}", r.status_code
            )
        if not r.is_success:
            raise ClientError(r.status_code)
        return _to_status(r.json())

    async def download_logs(self, logs_url: str) -> bytes | None:
        """Download a run's log archive. None while GitHub has no logs yet."""
        try:
            r = await self.client.get(logs_url)
        except httpx.HTTPError as e:
            raise LogFetchError(f"Log download failed: {e}") from e

        if r.status_code == 404:
            return None
        if not r.is_success:
            raise LogFetchError(
                f"Log download failed with status {r.status_code}",
                {"status_code": r.status_code},
            )
        return r.content


def _to_status(d: dict[str, Any]) -> RunStatus:
    return RunStatus(
        run_id=str(d["id"]),
        status=RunLifecycle.from_github(d["status"]).value,
        conclusion=d.get("conclusion"),
        logs_url=d.get("logs_url") or None,
    )
