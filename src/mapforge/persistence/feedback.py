"""State the UI reads to show errors, warnings and dialogs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional


@dataclass
class MapSaveError:
    message: Optional[str] = None

    def clear(self) -> None:
        self.message = None


@dataclass
class MapLoadError:
    message: Optional[str] = None

    def clear(self) -> None:
        self.message = None


@dataclass
class SaveValidationWarning:
    """Missing assets found before a save; the save waits for confirmation."""

    show: bool = False
    missing_assets: List[str] = field(default_factory=list)
    pending_save_path: Optional[Path] = None

    def raise_for(self, missing: Iterable[str], path: Path) -> None:
        self.show = True
        self.missing_assets = sorted(set(missing))
        self.pending_save_path = Path(path)

    def clear(self) -> None:
        self.show = False
        self.missing_assets = []
        self.pending_save_path = None


@dataclass
class LoadValidationWarning:
    """Manifest assets that could not be resolved; the load was aborted."""

    show: bool = False
    missing_assets: List[str] = field(default_factory=list)
    map_path: Optional[Path] = None

    def raise_for(self, missing: Iterable[str], path: Path) -> None:
        self.show = True
        self.missing_assets = list(missing)
        self.map_path = Path(path)

    def clear(self) -> None:
        self.show = False
        self.missing_assets = []
        self.map_path = None


@dataclass
class MissingMapWarning:
    """The remembered last map no longer exists (shown at startup)."""

    show: bool = False
    path: Optional[Path] = None


@dataclass
class Feedback:
    save_error: MapSaveError = field(default_factory=MapSaveError)
    load_error: MapLoadError = field(default_factory=MapLoadError)
    save_warning: SaveValidationWarning = field(default_factory=SaveValidationWarning)
    load_warning: LoadValidationWarning = field(default_factory=LoadValidationWarning)
    missing_map: MissingMapWarning = field(default_factory=MissingMapWarning)
