"""Services for talking to GitHub Actions."""

from app.services.dispatcher import JobDispatcher
from app.services.github import GitHubActionsClient
from app.services.logs import LogArchiveFetcher, flatten_log_archive

__all__ = [
    "GitHubActionsClient",
    "JobDispatcher",
    "LogArchiveFetcher",
    "flatten_log_archive",
]
