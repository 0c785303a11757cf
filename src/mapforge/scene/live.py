from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Protocol, Set

from mapforge.map.fog import FogOfWarData
from mapforge.map.map_data import MapData

from .components import (
    Annotation,
    DrawnLine,
    DrawnPath,
    PlacedItem,
    RenderLayer,
    SceneEntity,
    TextAnnotation,
    Transform,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneChanges:
    """Change events recorded since the last tracker reset."""

    items_added: int = 0
    annotations_added: int = 0
    items_removed: int = 0
    annotations_removed: int = 0
    items_transformed: int = 0

    @property
    def any(self) -> bool:
        return bool(
            self.items_added
            or self.annotations_added
            or self.items_removed
            or self.annotations_removed
            or self.items_transformed
        )


class SceneProvider(Protocol):
    """What the persistence engine needs from the live scene."""

    map_data: MapData
    fog: FogOfWarData

    def items(self) -> List[SceneEntity]: ...

    def annotations(self) -> List[SceneEntity]: ...

    def spawn_item(
        self, item: PlacedItem, transform: Transform, render_layer: Optional[RenderLayer] = None
    ) -> int: ...

    def spawn_annotation(self, annotation: Annotation, transform: Optional[Transform] = None) -> int: ...

    def despawn_all_items(self) -> int: ...

    def despawn_all_annotations(self) -> int: ...

    def changes(self) -> SceneChanges: ...

    def clear_change_trackers(self) -> None: ...


class LiveScene:
    """In-memory scene: placed items, annotations, map metadata and fog.

    Entities get monotonically increasing ids. Additions, removals and
    transform assignments on placed items are recorded until
    ``clear_change_trackers()`` is called (once per tick by the store).
    """

    def __init__(self, map_data: Optional[MapData] = None, fog: Optional[FogOfWarData] = None) -> None:
        self.map_data: MapData = map_data or MapData()
        self.fog: FogOfWarData = fog or FogOfWarData()
        self._entities: Dict[int, SceneEntity] = {}
        self._next_id = 1
        self._items_added: Set[int] = set()
        self._annotations_added: Set[int] = set()
        self._items_removed: Set[int] = set()
        self._annotations_removed: Set[int] = set()
        self._items_transformed: Set[int] = set()

    # Spawning

    def spawn_item(
        self, item: PlacedItem, transform: Transform, render_layer: Optional[RenderLayer] = None
    ) -> int:
        if render_layer is None:
            render_layer = RenderLayer.for_layer(item.layer)
        entity = SceneEntity(
            id=self._allocate_id(),
            transform=replace(transform),
            render_layer=render_layer,
            item=replace(item),
        )
        self._entities[entity.id] = entity
        self._items_added.add(entity.id)
        return entity.id

    def spawn_annotation(self, annotation: Annotation, transform: Optional[Transform] = None) -> int:
        entity = SceneEntity(
            id=self._allocate_id(),
            transform=replace(transform) if transform is not None else Transform(),
            render_layer=RenderLayer.EDITOR,
            annotation=annotation,
        )
        self._entities[entity.id] = entity
        self._annotations_added.add(entity.id)
        return entity.id

    def _allocate_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    # Removal

    def despawn(self, entity_id: int) -> bool:
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            return False
        if entity.is_item:
            self._items_removed.add(entity_id)
        else:
            self._annotations_removed.add(entity_id)
        return True

    def despawn_all_items(self) -> int:
        ids = [e.id for e in self._entities.values() if e.is_item]
        for entity_id in ids:
            self.despawn(entity_id)
        return len(ids)

    def despawn_all_annotations(self) -> int:
        ids = [e.id for e in self._entities.values() if e.is_annotation]
        for entity_id in ids:
            self.despawn(entity_id)
        return len(ids)

    # Mutation

    def set_transform(self, entity_id: int, transform: Transform) -> None:
        """Assign a transform. Always recorded as a change for placed items."""
        entity = self._entities[entity_id]
        entity.transform = replace(transform)
        if entity.is_item:
            self._items_transformed.add(entity_id)

    # Queries

    def get(self, entity_id: int) -> Optional[SceneEntity]:
        return self._entities.get(entity_id)

    def items(self) -> List[SceneEntity]:
        return [e for e in self._entities.values() if e.is_item]

    def annotations(self) -> List[SceneEntity]:
        return [e for e in self._entities.values() if e.is_annotation]

    def paths(self) -> List[SceneEntity]:
        return [e for e in self.annotations() if isinstance(e.annotation, DrawnPath)]

    def lines(self) -> List[SceneEntity]:
        return [e for e in self.annotations() if isinstance(e.annotation, DrawnLine)]

    def texts(self) -> List[SceneEntity]:
        return [e for e in self.annotations() if isinstance(e.annotation, TextAnnotation)]

    @property
    def item_count(self) -> int:
        return sum(1 for e in self._entities.values() if e.is_item)

    @property
    def annotation_count(self) -> int:
        return sum(1 for e in self._entities.values() if e.is_annotation)

    # Change detection

    def changes(self) -> SceneChanges:
        return SceneChanges(
            items_added=len(self._items_added),
            annotations_added=len(self._annotations_added),
            items_removed=len(self._items_removed),
            annotations_removed=len(self._annotations_removed),
            items_transformed=len(self._items_transformed),
        )

    def clear_change_trackers(self) -> None:
        self._items_added.clear()
        self._annotations_added.clear()
        self._items_removed.clear()
        self._annotations_removed.clear()
        self._items_transformed.clear()
