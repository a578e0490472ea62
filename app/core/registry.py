"""In-memory registry of dispatched runs."""

from datetime import datetime, timedelta
from functools import lru_cache

from app.config import settings
from app.models.deployment import RunHandle


class RunRegistry:
    """Remembers who dispatched which run, so outputs can be attributed.

    Note: state lives in process memory and is lost on restart.
    """

    def __init__(self, ttl_hours: int = 24):
        self._runs: dict[str, RunHandle] = {}
        self._ttl = timedelta(hours=ttl_hours)

    def register(self, handle: RunHandle) -> RunHandle:
        """Record a freshly dispatched run, dropping any that have expired."""
        self.cleanup_expired()
        self._runs[handle.run_id] = handle
        return handle

    def get(self, run_id: str) -> RunHandle | None:
        """Get a run handle by id."""
        handle = self._runs.get(run_id)
        if handle:
            # Check if expired
            if datetime.utcnow() - handle.created_at > self._ttl:
                del self._runs[run_id]
                return None
        return handle

    def remove(self, run_id: str) -> bool:
        if run_id in self._runs:
            del self._runs[run_id]
            return True
        return False

    def cleanup_expired(self) -> int:
        """Remove expired handles. Returns count of removed handles."""
        now = datetime.utcnow()
        expired = [
            run_id
            for run_id, handle in self._runs.items()
            if now - handle.created_at > self._ttl
        ]
        for run_id in expired:
            del self._runs[run_id]
        return len(expired)

    def clear(self) -> None:
        self._runs.clear()


@lru_cache
def get_run_registry() -> RunRegistry:
    """Get the run registry singleton."""
    return RunRegistry(ttl_hours=settings.run_ttl_hours)
