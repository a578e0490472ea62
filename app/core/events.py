"""Stream events for Server-Sent Events (SSE)."""

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from app.models.deployment import StoredDeploymentRecord


@dataclass(frozen=True)
class StatusEvent:
    """Run lifecycle changed."""

    name: ClassVar[str] = "status"

    lifecycle: str
    conclusion: str | None = None

    def payload(self) -> dict[str, Any]:
        return {"lifecycle": self.lifecycle, "conclusion": self.conclusion}


@dataclass(frozen=True)
class LogEvent:
    """New log text; ``is_replace`` means the client should discard what it shows."""

    name: ClassVar[str] = "log"

    text: str
    is_replace: bool = False

    def payload(self) -> dict[str, Any]:
        return {"text": self.text, "isReplace": self.is_replace}


@dataclass(frozen=True)
class OutputsEvent:
    """Record of a successful deployment, ready for client-side storage."""

    name: ClassVar[str] = "outputs"

    record: StoredDeploymentRecord

    def payload(self) -> dict[str, Any]:
        return self.record.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class DoneEvent:
    """The run finished; no further events follow."""

    name: ClassVar[str] = "done"

    message: str = "Workflow completed."

    def payload(self) -> dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class ErrorEvent:
    """Monitoring stopped because of an error; no further events follow."""

    name: ClassVar[str] = "error"

    message: str
    code: str = "INTERNAL"
    http_status: int | None = field(default=None)

    def payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.http_status is not None:
            data["httpStatus"] = self.http_status
        return data


StreamEvent = Union[StatusEvent, LogEvent, OutputsEvent, DoneEvent, ErrorEvent]


def to_sse(event: StreamEvent) -> dict[str, str]:
    """Convert an event to the message format EventSourceResponse expects."""
    return {"event": event.name, "data": json.dumps(event.payload())}
