"""Unit tests for the run registry."""

from datetime import datetime, timedelta

import pytest

from app.core.registry import RunRegistry
from app.models.deployment import RequestedResources, RunHandle


class TestRunRegistry:
    """Tests for RunRegistry."""

    @pytest.fixture
    def handle(self) -> RunHandle:
        """Sample run handle."""
        return RunHandle(
            run_id="1001",
            user_id="u1",
            requested=RequestedResources(create_s3=True),
        )

    def test_register_and_get(self, registry: RunRegistry, handle: RunHandle):
        registry.register(handle)

        retrieved = registry.get("1001")

        assert retrieved is not None
        assert retrieved.user_id == "u1"
        assert retrieved.requested.create_s3 is True

    def test_get_unknown_run(self, registry: RunRegistry):
        assert registry.get("missing") is None

    def test_remove(self, registry: RunRegistry, handle: RunHandle):
        registry.register(handle)

        assert registry.remove("1001") is True
        assert registry.remove("1001") is False
        assert registry.get("1001") is None

    def test_expired_handle_is_dropped(self, handle: RunHandle):
        registry = RunRegistry(ttl_hours=1)
        old = handle.model_copy(update={"created_at": datetime.utcnow() - timedelta(hours=2)})
        registry.register(old)

        assert registry.get("1001") is None

    def test_cleanup_expired(self, handle: RunHandle):
        registry = RunRegistry(ttl_hours=1)
        registry.register(handle)
        registry.register(
            RunHandle(
                run_id="old",
                user_id="u2",
                requested=RequestedResources(),
                created_at=datetime.utcnow() - timedelta(hours=3),
            )
        )

        removed = registry.cleanup_expired()

        assert removed == 1
        assert registry.get("1001") is not None

    def test_register_evicts_expired_handles(self, handle: RunHandle):
        registry = RunRegistry(ttl_hours=1)
        stale = datetime.utcnow() - timedelta(hours=5)
        for i in range(100):
            registry.register(
                RunHandle(
                    run_id=f"old-{i}",
                    user_id="u2",
                    requested=RequestedResources(),
                    created_at=stale,
                )
            )

        registry.register(handle)

        assert len(registry._runs) == 1
        assert registry.get("1001") is not None
