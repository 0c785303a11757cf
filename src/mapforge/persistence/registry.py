from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from mapforge.map.map_data import DEFAULT_MAP_NAME

from .errors import UnknownDocumentError
from .models import SavedMap

logger = logging.getLogger(__name__)


def name_for_path(path: Path) -> str:
    """Display name of a document stored at ``path`` (the file stem)."""
    return Path(path).stem or "Unknown"


def _same_path(a: Optional[Path], b: Optional[Path]) -> bool:
    if a is None or b is None:
        return False
    return Path(a).expanduser().resolve() == Path(b).expanduser().resolve()


@dataclass
class OpenMap:
    """A map held in memory.

    ``saved_state`` is only set while the map is not the active one.
    """

    id: int
    name: str
    path: Optional[Path] = None
    is_dirty: bool = False
    saved_state: Optional[SavedMap] = None


class OpenMaps:
    """All maps open in memory; exactly one is active."""

    def __init__(self) -> None:
        self.maps: Dict[int, OpenMap] = {0: OpenMap(id=0, name=DEFAULT_MAP_NAME)}
        self.active_map_id: int = 0
        self.next_id: int = 1

    def __len__(self) -> int:
        return len(self.maps)

    def __contains__(self, map_id: object) -> bool:
        return map_id in self.maps

    def ids(self) -> List[int]:
        return sorted(self.maps)

    def get(self, map_id: int) -> OpenMap:
        try:
            return self.maps[map_id]
        except KeyError:
            raise UnknownDocumentError(f"No open map with id {map_id}") from None

    def active(self) -> OpenMap:
        return self.maps[self.active_map_id]

    def find_by_path(self, path: Path) -> Optional[OpenMap]:
        for open_map in self.maps.values():
            if _same_path(open_map.path, path):
                return open_map
        return None

    def has_any_unsaved(self) -> bool:
        return any(m.is_dirty for m in self.maps.values())

    def unsaved_maps(self) -> List[OpenMap]:
        return [m for m in self.maps.values() if m.is_dirty]

    def _allocate_id(self) -> int:
        map_id = self.next_id
        self.next_id += 1
        return map_id

    def add(self, name: str = DEFAULT_MAP_NAME, path: Optional[Path] = None, activate: bool = True) -> OpenMap:
        """Insert a clean entry and (by default) make it active."""
        open_map = OpenMap(id=self._allocate_id(), name=name, path=path)
        self.maps[open_map.id] = open_map
        if activate:
            self.active_map_id = open_map.id
        logger.debug("Opened map %d (%s)", open_map.id, name)
        return open_map

    def replace_active(self, name: str, path: Optional[Path]) -> OpenMap:
        """Evict the active entry and put a new clean active one in its place."""
        evicted = self.maps.pop(self.active_map_id)
        logger.debug("Evicted map %d (%s)", evicted.id, evicted.name)
        return self.add(name=name, path=path)

    def activate(self, map_id: int) -> OpenMap:
        open_map = self.get(map_id)
        self.active_map_id = map_id
        return open_map
