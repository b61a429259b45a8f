"""Tests for the process-wide render worker."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from flipdeck.rendering.worker import (
    configure_render_worker,
    is_render_worker_configured,
    run_on_worker,
    shutdown_render_worker,
)


@pytest.fixture(autouse=True)
def fresh_worker():
    shutdown_render_worker()
    yield
    shutdown_render_worker()


class TestConfigure:
    def test_not_configured_initially(self):
        assert is_render_worker_configured() is False

    def test_idempotent(self):
        first = configure_render_worker()
        second = configure_render_worker()
        assert first is second
        assert is_render_worker_configured() is True

    def test_concurrent_configuration_yields_one_worker(self):
        results = []
        barrier = threading.Barrier(8)

        def configure():
            barrier.wait()
            results.append(configure_render_worker())

        with ThreadPoolExecutor(max_workers=8) as pool:
            for _ in range(8):
                pool.submit(configure)

        assert len(results) == 8
        assert all(worker is results[0] for worker in results)

    def test_shutdown_then_reconfigure(self):
        first = configure_render_worker()
        shutdown_render_worker()
        assert is_render_worker_configured() is False
        assert configure_render_worker() is not first


@pytest.mark.asyncio
class TestRunOnWorker:
    async def test_configures_lazily(self):
        assert await run_on_worker(sum, [1, 2, 3]) == 6
        assert is_render_worker_configured() is True

    async def test_runs_on_dedicated_thread(self):
        name = await run_on_worker(lambda: threading.current_thread().name)
        assert name.startswith("pdf-render")
        assert name != threading.current_thread().name

    async def test_propagates_exceptions(self):
        def boom():
            raise ValueError("bad page")

        with pytest.raises(ValueError, match="bad page"):
            await run_on_worker(boom)
