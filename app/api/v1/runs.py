"""Run lookup endpoints."""

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from app.api.deps import GitHubDep, RegistryDep
from app.core.exceptions import GitHubAPIError, NotFoundError
from app.models.deployment import CamelModel, RequestedResources

router = APIRouter()


class RunResponse(CamelModel):
    """Current state of a workflow run."""

    run_id: str = Field(alias="runId")
    status: str
    conclusion: str | None = None
    logs_url: str | None = Field(default=None, alias="logsUrl")
    user_id: str | None = Field(default=None, alias="userId")
    requested: RequestedResources | None = None


@router.get(
    "/{run_id}",
    response_model=RunResponse,
    summary="Get run status",
)
async def get_run(run_id: str, github: GitHubDep, registry: RegistryDep) -> RunResponse:
    """Poll GitHub once for the run's status."""
    try:
        run = await github.get_run(run_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except GitHubAPIError as e:
        raise HTTPException(
            status_code=e.status_code or status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        )

    handle = registry.get(run_id)
    return RunResponse(
        run_id=run.run_id,
        status=run.status,
        conclusion=run.conclusion,
        logs_url=run.logs_url,
        user_id=handle.user_id if handle else None,
        requested=handle.requested if handle else None,
    )
