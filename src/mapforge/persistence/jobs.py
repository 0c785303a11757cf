from __future__ import annotations

import concurrent.futures
import logging
from concurrent.futures import Executor, Future
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

IO_THREAD_PREFIX = "map-io"


class JobHandle(Generic[T]):
    """Handle for one spawned background unit."""

    def __init__(self, future: "Future[T]", label: str = "") -> None:
        self._future = future
        self.label = label
        self.consumed = False

    @property
    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the unit finishes. Only for shutdown and tests.

        Does not raise if the unit failed; ``poll`` reports that.
        """
        done, _ = concurrent.futures.wait([self._future], timeout=timeout)
        return bool(done)

    def __repr__(self) -> str:
        return f"JobHandle({self.label!r}, done={self.done})"


class AsyncJobRunner:
    """Spawn blocking work off the interactive thread and poll for it.

    ``poll`` never blocks. Units are expected to catch their own errors and
    return them as part of their result; an exception that still escapes is
    re-raised from ``poll``; the gate turns it into a failed result.
    """

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self._owns_executor = executor is None
        self._executor: Executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=IO_THREAD_PREFIX
        )

    def spawn(self, fn: Callable[..., T], *args: Any, label: str = "") -> JobHandle[T]:
        future = self._executor.submit(fn, *args)
        logger.debug("Spawned background job %s", label or getattr(fn, "__name__", fn))
        return JobHandle(future, label)

    def poll(self, handle: JobHandle[T]) -> Optional[T]:
        """Return the result once, when finished; None while running or after."""
        if handle.consumed or not handle.done:
            return None
        handle.consumed = True
        return handle._future.result()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
