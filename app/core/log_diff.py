"""Incremental log diffing.

Workflow logs are re-downloaded in full on every poll. Most of the time the
new text simply extends what the client already has, so only the tail is
sent. When the archive was repackaged (steps retried, files reordered) the
new text no longer starts with the old one and the whole log is resent as a
replacement.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LogDelta:
    """Text to send to the client."""

    text: str
    is_replace: bool


def diff_logs(current: str, baseline: str) -> tuple[LogDelta | None, str]:
    """Compare a freshly fetched log with what was already emitted.

    Returns the delta to emit (or None) and the new baseline.
    """
    if len(current) > len(baseline) and current.startswith(baseline):
        tail = current[len(baseline):].strip()
        if not tail:
            return None, current
        return LogDelta(text=tail, is_replace=False), current

    if current and current != baseline:
        return LogDelta(text=current, is_replace=True), current

    return None, baseline


class IncrementalLog:
    """Tracks the log already emitted for one run."""

    def __init__(self):
        self.baseline = ""

    def update(self, current: str) -> LogDelta | None:
        delta, self.baseline = diff_logs(current, self.baseline)
        return delta
