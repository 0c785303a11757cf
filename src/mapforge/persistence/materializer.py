from __future__ import annotations

import logging
from typing import Optional

from mapforge.map.fog import FogOfWarData
from mapforge.map.layer import Layer, clamp_z_index, draw_depth
from mapforge.map.map_data import DEFAULT_MAP_NAME, MapData
from mapforge.scene.components import (
    DrawnLine,
    DrawnPath,
    PlacedItem,
    RenderLayer,
    TextAnnotation,
    Transform,
)
from mapforge.scene.live import SceneProvider

from .models import (
    AssetManifest,
    SavedAnnotations,
    SavedFogOfWar,
    SavedLine,
    SavedMap,
    SavedPath,
    SavedPlacedItem,
    SavedTextBox,
)

logger = logging.getLogger(__name__)


class SceneMaterializer:
    """Converts between the live scene and ``SavedMap`` documents.

    ``capture`` only reads the scene. ``restore`` and ``reset_to_defaults``
    replace its whole content and must run on the interactive thread.
    """

    def __init__(self, scene: SceneProvider) -> None:
        self.scene = scene

    def capture(self) -> SavedMap:
        items = []
        for entity in self.scene.items():
            item = entity.item
            t = entity.transform
            items.append(
                SavedPlacedItem(
                    asset_path=item.asset_path,
                    position=t.position,
                    rotation=t.rotation,
                    scale=t.scale,
                    layer=item.layer,
                    z_index=item.z_index,
                )
            )

        annotations = SavedAnnotations()
        for entity in self.scene.annotations():
            a = entity.annotation
            if isinstance(a, DrawnPath):
                annotations.paths.append(
                    SavedPath(points=list(a.points), color=a.color, stroke_width=a.stroke_width)
                )
            elif isinstance(a, DrawnLine):
                annotations.lines.append(
                    SavedLine(start=a.start, end=a.end, color=a.color, stroke_width=a.stroke_width)
                )
            elif isinstance(a, TextAnnotation):
                annotations.text_boxes.append(
                    SavedTextBox(
                        position=entity.transform.position,
                        content=a.content,
                        font_size=a.font_size,
                        color=a.color,
                    )
                )

        return SavedMap(
            asset_manifest=AssetManifest.from_items(items),
            map_data=self.scene.map_data.model_copy(deep=True),
            placed_items=items,
            annotations=annotations,
            fog_of_war=SavedFogOfWar(revealed_cells=self.scene.fog.sorted_cells()),
        )

    def restore(self, doc: SavedMap) -> None:
        """Replace the scene with ``doc``.

        Asset paths must already be resolved. z-order values outside the
        layer range are clamped.
        """
        self._clear()
        self.scene.map_data = doc.map_data.model_copy(deep=True)
        self.scene.fog = FogOfWarData(doc.fog_of_war.revealed_cells)

        for saved in doc.placed_items:
            z_index = clamp_z_index(saved.z_index)
            if z_index != saved.z_index:
                logger.debug("Clamped z_index %d -> %d for %s", saved.z_index, z_index, saved.asset_path)
            transform = Transform(
                x=saved.position[0],
                y=saved.position[1],
                z=draw_depth(saved.layer, z_index),
                rotation=saved.rotation,
                scale_x=saved.scale[0],
                scale_y=saved.scale[1],
            )
            self.scene.spawn_item(
                PlacedItem(asset_path=saved.asset_path, layer=saved.layer, z_index=z_index),
                transform,
                RenderLayer.for_layer(saved.layer),
            )

        z = Layer.ANNOTATION.z_base()
        for path in doc.annotations.paths:
            self.scene.spawn_annotation(
                DrawnPath(points=list(path.points), color=path.color, stroke_width=path.stroke_width),
                Transform(z=z),
            )
        for line in doc.annotations.lines:
            self.scene.spawn_annotation(
                DrawnLine(start=line.start, end=line.end, color=line.color, stroke_width=line.stroke_width),
                Transform(z=z),
            )
        for text in doc.annotations.text_boxes:
            self.scene.spawn_annotation(
                TextAnnotation(content=text.content, font_size=text.font_size, color=text.color),
                Transform.at(text.position, z),
            )

        logger.debug(
            "Restored %d items and %d annotations",
            len(doc.placed_items),
            doc.annotations.count(),
        )

    def reset_to_defaults(self, name: Optional[str] = None) -> None:
        """Empty scene, default map data (optionally renamed), fully fogged."""
        self._clear()
        self.scene.map_data = MapData(name=name or DEFAULT_MAP_NAME)
        self.scene.fog = FogOfWarData()

    def _clear(self) -> None:
        self.scene.despawn_all_items()
        self.scene.despawn_all_annotations()
