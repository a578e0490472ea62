"""Streaming session.

Follows one workflow run by polling GitHub and turns what it sees into
stream events for a single client connection:

    STARTING -> POLLING -> COMPLETED | FAILED | TIMED_OUT | DISCONNECTED

Each poll cycle runs to completion before the timer for the next one
starts, so there is never more than one GitHub call in flight per session.
"""

from enum import Enum
from typing import AsyncIterator

from app.config import settings
from app.core.events import (
    DoneEvent,
    ErrorEvent,
    LogEvent,
    OutputsEvent,
    StatusEvent,
    StreamEvent,
)
from app.core.exceptions import (
    ClientError,
    LogFetchError,
    NotFoundError,
    PollingTimeoutError,
    TransientServerError,
)
from app.core.log_diff import IncrementalLog
from app.core.scheduler import CancellationToken, PollTimer
from app.models.deployment import RunHandle, RunStatus, StoredDeploymentRecord
from app.services.github import GitHubActionsClient
from app.services.logs import LogArchiveFetcher
from app.services.outputs import extract_outputs
from app.utils.logging import get_logger


class SessionState(str, Enum):
    """Streaming session state."""

    STARTING = "starting"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    DISCONNECTED = "disconnected"


TERMINAL_STATES = frozenset(
    {
        SessionState.COMPLETED,
        SessionState.FAILED,
        SessionState.TIMED_OUT,
        SessionState.DISCONNECTED,
    }
)


class StreamingSession:
    """Polls one run and yields its events until a terminal condition."""

    def __init__(
        self,
        run_id: str,
        github: GitHubActionsClient,
        handle: RunHandle | None = None,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        outputs_marker: str | None = None,
        token: CancellationToken | None = None,
    ):
        self.run_id = run_id
        self.github = github
        self.handle = handle
        self.poll_interval = (
            settings.poll_interval_seconds if poll_interval is None else poll_interval
        )
        self.max_attempts = (
            settings.max_poll_attempts if max_attempts is None else max_attempts
        )
        self.outputs_marker = outputs_marker or settings.outputs_marker

        self.token = token or CancellationToken()
        self.timer = PollTimer(self.token)
        self.fetcher = LogArchiveFetcher(github)
        self.log = IncrementalLog()

        self.state = SessionState.STARTING
        self.attempts = 0
        self.last_status: tuple[str, str | None] | None = None
        self.logger = get_logger("session").bind(run_id=run_id)

    @property
    def closed(self) -> bool:
        return self.state in TERMINAL_STATES

    def cancel(self) -> None:
        """Stop the session because the client went away. Safe to call twice."""
        self.token.cancel()
        self._close(SessionState.DISCONNECTED)

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Run the poll loop, yielding events until the session closes."""
        if self.closed:
            return

        self.state = SessionState.POLLING
        self.logger.info(
            "session.started",
            poll_interval=self.poll_interval,
            max_attempts=self.max_attempts,
        )

        try:
            while not self.closed:
                batch = await self.poll_once()
                for event in batch:
                    if self.state is SessionState.DISCONNECTED:
                        return
                    yield event
                if self.closed:
                    return
                if not await self.timer.sleep(self.poll_interval):
                    self._close(SessionState.DISCONNECTED)
        finally:
            # Consumer stopped iterating or the task was cancelled
            self._close(SessionState.DISCONNECTED)

    async def poll_once(self) -> list[StreamEvent]:
        """Run a single poll cycle and return the events it produced."""
        if self.token.cancelled:
            self._close(SessionState.DISCONNECTED)
            return []

        if self.attempts >= self.max_attempts:
            error = PollingTimeoutError(self.attempts)
            return [
                self._terminate(
                    ErrorEvent(error.message, code="TIMEOUT"),
                    SessionState.TIMED_OUT,
                )
            ]
        self.attempts += 1

        try:
            return await self._cycle()
        except Exception as e:
            self.logger.exception("session.poll_failed", attempt=self.attempts)
            return [
                self._terminate(
                    ErrorEvent(f"Polling failed: {e}"),
                    SessionState.FAILED,
                )
            ]

    async def _cycle(self) -> list[StreamEvent]:
        try:
            run = await self.github.get_run(self.run_id)
        except NotFoundError as e:
            return [
                self._terminate(
                    ErrorEvent(e.message, code="NOT_FOUND", http_status=404),
                    SessionState.FAILED,
                )
            ]
        except TransientServerError as e:
            self.logger.warning(
                "session.transient_error",
                status_code=e.status_code,
                attempt=self.attempts,
            )
            return []
        except ClientError as e:
            return [
                self._terminate(
                    ErrorEvent(e.message, code="CLIENT_ERROR", http_status=e.status_code),
                    SessionState.FAILED,
                )
            ]

        events: list[StreamEvent] = []

        current = (run.status, run.conclusion)
        if current != self.last_status:
            events.append(StatusEvent(lifecycle=run.status, conclusion=run.conclusion))
            self.last_status = current

        full_log = await self._fetch_log(run)
        if full_log is not None:
            delta = self.log.update(full_log)
            if delta:
                events.append(LogEvent(text=delta.text, is_replace=delta.is_replace))

        if run.is_completed:
            # Always repeat the final status right before done
            events.append(StatusEvent(lifecycle=run.status, conclusion=run.conclusion))
            if run.succeeded:
                events.append(OutputsEvent(record=self._record()))
            events.append(self._terminate(DoneEvent(), SessionState.COMPLETED))

        return events

    async def _fetch_log(self, run: RunStatus) -> str | None:
        try:
            return await self.fetcher.fetch(run.logs_url)
        except LogFetchError as e:
            self.logger.warning("session.log_fetch_failed", error=e.message, **e.details)
            return None

    def _record(self) -> StoredDeploymentRecord:
        requested = self.handle.requested if self.handle else None
        return StoredDeploymentRecord(
            run_id=self.run_id,
            user_id=self.handle.user_id if self.handle else None,
            requested=requested,
            outputs=extract_outputs(self.log.baseline, self.outputs_marker, requested),
        )

    def _terminate(self, event: StreamEvent, state: SessionState) -> StreamEvent:
        if isinstance(event, ErrorEvent):
            self.logger.warning("session.error", message=event.message, code=event.code)
        self._close(state)
        return event

    def _close(self, state: SessionState) -> None:
        if self.closed:
            return
        self.state = state
        # Releases a pending timer wait, if any
        self.token.cancel()
        self.logger.info("session.closed", state=state.value, attempts=self.attempts)
