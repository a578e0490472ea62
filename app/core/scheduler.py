"""Cancellable poll timer."""

import asyncio


class CancellationToken:
    """One-shot signal that the consumer of a session went away."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class PollTimer:
    """Waits out a poll interval unless the token fires first."""

    def __init__(self, token: CancellationToken):
        self.token = token

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds``.

        Returns True when the interval elapsed and False when the token was
        cancelled. The pending wait is released either way.
        """
        if self.token.cancelled:
            return False
        try:
            await asyncio.wait_for(self.token.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False
