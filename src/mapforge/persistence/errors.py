from __future__ import annotations

from typing import Iterable, List


class PersistenceError(Exception):
    """Base exception for map save/load errors."""


class MapIOError(PersistenceError):
    """Raised when a map file cannot be read or written."""


class MapParseError(PersistenceError):
    """Raised when map file content is malformed or schema-incompatible JSON."""


class MapValidationError(PersistenceError):
    """Raised when manifest assets cannot be resolved against the current library."""

    def __init__(self, missing_assets: Iterable[str]) -> None:
        self.missing_assets: List[str] = list(missing_assets)
        super().__init__(f"{len(self.missing_assets)} missing asset(s): {', '.join(self.missing_assets)}")


class ConcurrencyRejection(PersistenceError):
    """Raised when a save or load is requested while another one is in flight."""

    def __init__(self, operation: str, in_flight: str) -> None:
        self.operation = operation
        self.in_flight = in_flight
        super().__init__(f"Cannot start {operation}: a {in_flight} is already in progress")


class UnknownDocumentError(PersistenceError):
    """Raised when an operation names a document id that is not open."""
