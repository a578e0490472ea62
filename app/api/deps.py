"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends

from app.core.registry import RunRegistry, get_run_registry
from app.services.dispatcher import JobDispatcher
from app.services.github import GitHubActionsClient

# Shared client, closed on application shutdown
_github_client: GitHubActionsClient | None = None


async def get_github() -> GitHubActionsClient:
    """Get the GitHub Actions client."""
    global _github_client
    if _github_client is None:
        _github_client = GitHubActionsClient.from_settings()
    return _github_client


async def close_github() -> None:
    global _github_client
    if _github_client is not None:
        await _github_client.aclose()
        _github_client = None


async def get_registry() -> RunRegistry:
    """Get the run registry."""
    return get_run_registry()


async def get_dispatcher(
    github: Annotated[GitHubActionsClient, Depends(get_github)],
    registry: Annotated[RunRegistry, Depends(get_registry)],
) -> JobDispatcher:
    """Get a dispatcher bound to the shared client and registry."""
    return JobDispatcher(github, registry)


# Type aliases for cleaner signatures
GitHubDep = Annotated[GitHubActionsClient, Depends(get_github)]
RegistryDep = Annotated[RunRegistry, Depends(get_registry)]
DispatcherDep = Annotated[JobDispatcher, Depends(get_dispatcher)]
