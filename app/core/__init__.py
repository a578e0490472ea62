"""Core functionality for Deploy Relay."""

from app.core.exceptions import (
    ClientError,
    DispatchError,
    GitHubAPIError,
    LogFetchError,
    NotFoundError,
    PollingTimeoutError,
    RelayError,
    RunNotFoundError,
    TransientServerError,
    ValidationError,
)
from app.core.registry import RunRegistry, get_run_registry
from app.core.streaming import SessionState, StreamingSession

__all__ = [
    "RelayError",
    "ValidationError",
    "RunNotFoundError",
    "LogFetchError",
    "PollingTimeoutError",
    "GitHubAPIError",
    "DispatchError",
    "NotFoundError",
    "TransientServerError",
    "ClientError",
    "RunRegistry",
    "get_run_registry",
    "SessionState",
    "StreamingSession",
]
