from __future__ import annotations

import logging
from dataclasses import dataclass

from mapforge.scene.live import SceneChanges

from .registry import OpenMaps

logger = logging.getLogger(__name__)


@dataclass
class MapDirtyState:
    """Unsaved-changes flag of the active map.

    The counts record the scene size at the last save/load for display;
    dirtiness itself comes from change events.
    """

    is_dirty: bool = False
    last_known_item_count: int = 0
    last_known_annotation_count: int = 0

    def mark_clean(self, item_count: int = 0, annotation_count: int = 0) -> None:
        self.is_dirty = False
        self.last_known_item_count = item_count
        self.last_known_annotation_count = annotation_count


class DirtyTracker:
    """Marks the active map dirty when the scene reports changes.

    Detection is coarse: any add, remove or transform event counts, even
    if the content ends up identical. The tracker never clears the flag.
    """

    def __init__(self, state: MapDirtyState, maps: OpenMaps) -> None:
        self.state = state
        self.maps = maps

    def observe(self, changes: SceneChanges) -> bool:
        if not changes.any:
            return False
        if not self.state.is_dirty:
            logger.debug("Map %d marked dirty: %s", self.maps.active_map_id, changes)
        self.state.is_dirty = True
        self.maps.active().is_dirty = True
        return True
