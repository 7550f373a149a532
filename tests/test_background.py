"""Tests for the detached background task registry."""

import asyncio

import pytest

from pinwall.core.background import BackgroundTaskRegistry


class TestBackgroundTaskRegistry:

    @pytest.mark.asyncio
    async def test_spawn_runs_without_join(self):
        registry = BackgroundTaskRegistry()
        done = asyncio.Event()

        async def work():
            done.set()

        registry.spawn(work(), name="work")
        await asyncio.wait_for(done.wait(), timeout=1.0)

        assert await registry.drain(timeout=1.0) == 0
        assert registry.pending == 0

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        registry = BackgroundTaskRegistry()

        async def boom():
            raise RuntimeError("catalog down")

        registry.spawn(boom(), name="boom")
        cancelled = await registry.drain(timeout=1.0)

        assert cancelled == 0
        assert registry.pending == 0
        assert "catalog down" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_cancels_slow_tasks(self):
        registry = BackgroundTaskRegistry()

        async def slow():
            await asyncio.sleep(30)

        task = registry.spawn(slow(), name="slow")
        cancelled = await registry.drain(timeout=0.05)

        assert cancelled == 1
        assert task.cancelled()
        assert registry.pending == 0

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        assert await BackgroundTaskRegistry().drain(timeout=0.1) == 0
