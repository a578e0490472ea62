"""Custom exceptions for Deploy Relay."""

from typing import Any


class RelayError(Exception):
    """Base exception for Deploy Relay."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(RelayError):
    """Caller input is malformed."""

    pass


class RunNotFoundError(RelayError):
    """No workflow run could be discovered after a dispatch."""

    def __init__(self, workflow: str):
        super().__init__(
            f"No workflow run found for {workflow} after dispatch",
            {"workflow": workflow},
        )


class LogFetchError(RelayError):
    """The log archive could not be downloaded or unpacked."""

    pass


class PollingTimeoutError(RelayError):
    """The session ran out of poll attempts."""

    def __init__(self, attempts: int):
        super().__init__("Polling timeout reached", {"attempts": attempts})


class GitHubAPIError(RelayError):
    """GitHub answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class DispatchError(GitHubAPIError):
    """GitHub rejected the workflow dispatch."""

    def __init__(self, status_code: int):
        super().__init__("Deployment failed", status_code)


class NotFoundError(GitHubAPIError):
    """The workflow run does not exist."""

    def __init__(self, run_id: str):
        super().__init__(f"Run {run_id} not found.", 404)
        self.run_id = run_id


class TransientServerError(GitHubAPIError):
    """GitHub had a server-side problem; the call may be retried."""

    pass


class ClientError(GitHubAPIError):
    """GitHub refused the request; retrying will not help."""

    def __init__(self, status_code: int):
        super().__init__(f"GitHub API Error: {status_code}", status_code)
