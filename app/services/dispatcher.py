"""Job dispatcher.

Triggers the deploy workflow and works out which run it started. The
dispatch API does not return a run id, so the newest dispatch-triggered run
of the workflow is taken. Two dispatches landing at the same moment can be
confused with each other; the user has to retry in that case.
"""

from app.config import settings
from app.core.exceptions import RunNotFoundError, ValidationError
from app.core.registry import RunRegistry
from app.models.deployment import DeploymentRequest, RunHandle
from app.services.github import GitHubActionsClient
from app.utils.logging import get_logger


class JobDispatcher:
    """Dispatches deployments and records the resulting runs."""

    def __init__(
        self,
        github: GitHubActionsClient,
        registry: RunRegistry,
        ref: str | None = None,
    ):
        self.github = github
        self.registry = registry
        self.ref = ref or settings.github_ref
        self.logger = get_logger("dispatcher")

    async def dispatch(self, request: DeploymentRequest) -> RunHandle:
        """Trigger the workflow and return a handle for the new run.

        Raises:
            ValidationError: userId is missing; nothing is sent to GitHub.
            DispatchError: GitHub refused the dispatch.
            RunNotFoundError: no run was listed after dispatching.
        """
        if not request.user_id:
            raise ValidationError("userId is required")

        self.logger.info(
            "dispatcher.dispatching",
            user_id=request.user_id,
            create_s3=request.create_s3,
            create_rds=request.create_rds,
            create_eks=request.create_eks,
        )
        await self.github.dispatch_workflow(request.workflow_inputs(), ref=self.ref)

        run_id = await self.discover_run_id()
        handle = RunHandle(
            run_id=run_id,
            user_id=request.user_id,
            requested=request.requested(),
        )
        self.registry.register(handle)

        self.logger.info("dispatcher.dispatched", run_id=run_id, user_id=request.user_id)
        return handle

    async def discover_run_id(self) -> str:
        runs = await self.github.list_workflow_runs(per_page=1)
        if not runs:
            raise RunNotFoundError(self.github.workflow)
        return runs[0].run_id
