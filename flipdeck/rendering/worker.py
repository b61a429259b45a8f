"""Process-wide render worker for PDF decoding and rasterization.

PyMuPDF documents are not safe to share across threads, so every decode and
page render for the process runs on one dedicated worker thread. The worker
is created once by ``configure_render_worker`` and reused until
``shutdown_render_worker``.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_lock = threading.Lock()
_executor: ThreadPoolExecutor | None = None


def configure_render_worker() -> ThreadPoolExecutor:
    """Create the render worker on first call; later calls return the same one."""
    global _executor
    with _lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-render")
            logger.info("Render worker started")
        return _executor


def is_render_worker_configured() -> bool:
    return _executor is not None


def shutdown_render_worker(wait: bool = True) -> None:
    """Stop the worker. A later ``configure_render_worker`` starts a fresh one."""
    global _executor
    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None
            logger.info("Render worker stopped")


async def run_on_worker(func: Callable[..., T], *args) -> T:
    """Run ``func(*args)`` on the render worker and await its result."""
    executor = configure_render_worker()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, func, *args)
