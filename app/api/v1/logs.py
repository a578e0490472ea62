"""Run log streaming endpoint (SSE)."""

from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import PlainTextResponse
from sse_starlette.sse import EventSourceResponse

from app.api.deps import GitHubDep, RegistryDep
from app.config import settings
from app.core.events import to_sse
from app.core.streaming import StreamingSession

router = APIRouter()


@router.get(
    "/logs",
    summary="Stream run status and logs (SSE)",
    response_model=None,
)
async def stream_logs(
    github: GitHubDep,
    registry: RegistryDep,
    run_id: Annotated[str | None, Query(alias="runId")] = None,
) -> EventSourceResponse | PlainTextResponse:
    """Follow a workflow run and push status, log, outputs, done and error events."""
    if not run_id:
        return PlainTextResponse(
            "runId is required", status_code=status.HTTP_400_BAD_REQUEST
        )
    if not settings.github_token:
        return PlainTextResponse(
            "GitHub token not configured",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    session = StreamingSession(run_id, github, handle=registry.get(run_id))

    async def event_generator():
        try:
            async for event in session.events():
                yield to_sse(event)
        finally:
            # Runs on completion and when the client disconnects
            session.cancel()

    return EventSourceResponse(
        event_generator(),
        headers={"Cache-Control": "no-cache, no-transform"},
    )
