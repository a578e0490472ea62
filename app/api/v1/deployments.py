"""Deployment dispatch endpoint."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import DispatcherDep
from app.core.exceptions import DispatchError, ValidationError
from app.models.deployment import DeploymentRequest, DispatchResponse
from app.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def _read_request(request: Request) -> DeploymentRequest:
    """Parse the body by hand so a missing userId is the only 400.

    A body that is not JSON, or that cannot be read as a deployment request,
    falls through to the 500 branch of the handler.
    """
    payload = await request.json()
    if isinstance(payload, dict) and not payload.get("userId"):
        raise ValidationError("userId is required")
    return DeploymentRequest.model_validate(payload)


@router.post(
    "/deploy",
    response_model=DispatchResponse,
    summary="Trigger a deployment",
    description=(
        "Dispatch the infrastructure workflow and return the id of the run it started. "
        "Body: {userId, createS3, createRDS, createEKS, s3BucketName, databases}."
    ),
)
async def deploy(request: Request, dispatcher: DispatcherDep):
    """Dispatch a deployment workflow run."""
    try:
        data = await _read_request(request)
        handle = await dispatcher.dispatch(data)
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": e.message},
        )
    except DispatchError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error("deploy.failed", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": getattr(e, "message", None) or str(e) or "Unknown error"},
        )

    return DispatchResponse(run_id=handle.run_id)
