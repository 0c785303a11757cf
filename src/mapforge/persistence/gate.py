from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from .errors import ConcurrencyRejection
from .jobs import AsyncJobRunner, JobHandle
from .models import SavedMap
from .operations import LoadResult, SaveResult, perform_load, perform_save

logger = logging.getLogger(__name__)

SAVE = "save"
LOAD = "load"


@dataclass
class CompletedOperation:
    """A finished save or load, with whatever context the caller attached."""

    kind: str
    result: Union[SaveResult, LoadResult]
    context: Any = None


@dataclass
class _InFlight:
    kind: str
    path: Path
    handle: JobHandle
    context: Any


class AsyncOperationGate:
    """Single-flight guard for map I/O.

    At most one save or load runs at a time. A request made while busy
    raises ConcurrencyRejection and leaves the running operation alone.
    """

    def __init__(self, runner: Optional[AsyncJobRunner] = None) -> None:
        self.runner = runner or AsyncJobRunner()
        self.is_saving = False
        self.is_loading = False
        self.status: Optional[str] = None
        self._in_flight: Optional[_InFlight] = None

    @property
    def busy(self) -> bool:
        return self.is_saving or self.is_loading

    def _check(self, operation: str) -> None:
        if self.busy:
            in_flight = SAVE if self.is_saving else LOAD
            logger.warning("%s requested while a %s is in progress; rejected", operation.capitalize(), in_flight)
            raise ConcurrencyRejection(operation, in_flight)

    def start_save(self, path: Path, capture: Callable[[], SavedMap], context: Any = None) -> JobHandle:
        """Capture on the calling thread, then write in the background."""
        self._check(SAVE)
        path = Path(path)
        document = capture()
        handle = self.runner.spawn(perform_save, path, document, label=f"save {path.name}")
        self.is_saving = True
        self.status = f"Saving {path.name}..."
        self._in_flight = _InFlight(SAVE, path, handle, context)
        return handle

    def start_load(self, path: Path, context: Any = None) -> JobHandle:
        self._check(LOAD)
        path = Path(path)
        handle = self.runner.spawn(perform_load, path, label=f"load {path.name}")
        self.is_loading = True
        self.status = f"Loading {path.name}..."
        self._in_flight = _InFlight(LOAD, path, handle, context)
        return handle

    def poll(self) -> List[CompletedOperation]:
        """Non-blocking. Returns finished operations and clears busy state.

        A unit that raised instead of returning its result still completes:
        the exception becomes a failed result.
        """
        in_flight = self._in_flight
        if in_flight is None or not in_flight.handle.done:
            return []
        try:
            result = self.runner.poll(in_flight.handle)
        except Exception as e:
            logger.exception("Background %s of %s raised", in_flight.kind, in_flight.path)
            result = self._failed(in_flight, e)
        finally:
            self._in_flight = None
            if in_flight.kind == SAVE:
                self.is_saving = False
            else:
                self.is_loading = False
            self.status = None
        return [CompletedOperation(in_flight.kind, result, in_flight.context)]

    @staticmethod
    def _failed(in_flight: "_InFlight", error: Exception) -> Union[SaveResult, LoadResult]:
        message = f"Unexpected {in_flight.kind} error: {error}"
        if in_flight.kind == SAVE:
            return SaveResult(path=in_flight.path, success=False, error=message)
        return LoadResult(path=in_flight.path, error=message)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the in-flight operation finishes (no-op when idle)."""
        if self._in_flight is None:
            return True
        return self._in_flight.handle.wait(timeout)

    def shutdown(self, wait: bool = True) -> None:
        self.runner.shutdown(wait=wait)
