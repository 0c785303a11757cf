from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .events import Event, EventBus, MapEvents
from .paths import AppPaths

logger = logging.getLogger(__name__)

MAX_RECENT_LIBRARIES = 5


def _opt_path(value: Any) -> Optional[Path]:
    if value in (None, ""):
        return None
    return Path(str(value))


def _recent_list(paths: Iterable[Path]) -> List[Path]:
    """Unique, order-preserving, capped at MAX_RECENT_LIBRARIES."""
    recent: List[Path] = []
    for p in paths:
        if p not in recent:
            recent.append(p)
    return recent[:MAX_RECENT_LIBRARIES]


@dataclass
class EditorConfig:
    """Editor settings persisted as YAML.

    - default_library_path: library opened at startup; changes only when the
      user sets it explicitly.
    - recent_libraries: most recent first, unique, at most 5.
    - last_map_path: remembered for quick access, never auto-loaded.
    """

    default_library_path: Optional[Path] = None
    recent_libraries: List[Path] = field(default_factory=list)
    last_map_path: Optional[Path] = None
    config_path: Optional[Path] = field(default=None, repr=False, compare=False)
    dirty: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        recent = [Path(str(p)) for p in (data.get("recent_libraries") or [])]
        return cls(
            default_library_path=_opt_path(data.get("default_library_path")),
            recent_libraries=_recent_list(recent),
            last_map_path=_opt_path(data.get("last_map_path")),
        )

    def _to_dict(self) -> Dict[str, Any]:
        return {
            "default_library_path": str(self.default_library_path) if self.default_library_path else None,
            "recent_libraries": [str(p) for p in self.recent_libraries],
            "last_map_path": str(self.last_map_path) if self.last_map_path else None,
        }

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EditorConfig":
        """Load from ``path`` (default: the platform config file).

        Missing or unreadable files give defaults.
        """
        path = Path(path) if path is not None else AppPaths().config_file
        data: Dict[str, Any] = {}
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
                if isinstance(raw, dict):
                    data = raw
                    logger.info("Loaded config from %s", path)
                else:
                    logger.warning("Config file %s is not a mapping; using defaults", path)
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Failed to read config file %s: %s", path, e)
        else:
            logger.info("No config file found at %s, using defaults", path)
        cfg = cls._from_dict(data)
        cfg.config_path = path
        return cfg

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path is not None else self.config_path
        if target is None:
            target = AppPaths().config_file
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self._to_dict(), f, sort_keys=False)
        self.config_path = target
        self.dirty = False
        logger.info("Saved config to %s", target)

    def update_last_map_path(self, path: Path) -> None:
        path = Path(path)
        if self.last_map_path != path:
            self.last_map_path = path
            self.dirty = True

    def add_recent_library(self, path: Path) -> None:
        path = Path(path)
        recent = _recent_list([path] + self.recent_libraries)
        if recent != self.recent_libraries:
            self.recent_libraries = recent
            self.dirty = True

    def set_default_library(self, path: Path) -> None:
        self.default_library_path = Path(path)
        self.add_recent_library(path)
        self.dirty = True

    def missing_last_map(self) -> Optional[Path]:
        """The remembered map path if its file no longer exists."""
        if self.last_map_path is not None and not self.last_map_path.exists():
            return self.last_map_path
        return None

    def save_if_dirty(self) -> bool:
        if not self.dirty:
            return False
        self.save()
        return True

    def attach(self, bus: EventBus) -> None:
        """Follow the most recently saved or loaded map path."""
        bus.subscribe(MapEvents.PATH_CHANGED, self._on_path_changed)

    def _on_path_changed(self, event: Event) -> None:
        self.update_last_map_path(event.payload["path"])
