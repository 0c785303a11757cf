from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from mapforge.map.layer import Layer

Vec2 = Tuple[float, float]
Color = Tuple[float, float, float, float]  # RGBA, 0..1

WHITE: Color = (1.0, 1.0, 1.0, 1.0)


class RenderLayer(IntEnum):
    """Visibility group of a live object.

    PLAYER objects are drawn in both the editor and the player view; EDITOR
    objects only in the editor.
    """

    PLAYER = 0
    EDITOR = 1

    @classmethod
    def for_layer(cls, layer: Layer) -> "RenderLayer":
        return cls.PLAYER if layer.is_player_visible() else cls.EDITOR


@dataclass
class Transform:
    """2D transform with draw depth ``z`` and non-uniform scale."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    rotation: float = 0.0  # radians, around the view axis
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def position(self) -> Vec2:
        return (self.x, self.y)

    @property
    def scale(self) -> Vec2:
        return (self.scale_x, self.scale_y)

    @classmethod
    def at(cls, position: Vec2, z: float = 0.0) -> "Transform":
        return cls(x=float(position[0]), y=float(position[1]), z=z)


@dataclass
class PlacedItem:
    """An asset placed on the map."""

    asset_path: str
    layer: Layer = Layer.TERRAIN
    z_index: int = 0


@dataclass
class DrawnPath:
    """Freehand stroke."""

    points: List[Vec2] = field(default_factory=list)
    color: Color = WHITE
    stroke_width: float = 3.0


@dataclass
class DrawnLine:
    start: Vec2 = (0.0, 0.0)
    end: Vec2 = (0.0, 0.0)
    color: Color = WHITE
    stroke_width: float = 3.0


@dataclass
class TextAnnotation:
    """Text label; its position lives in the owning entity's transform."""

    content: str = ""
    font_size: float = 16.0
    color: Color = WHITE


Annotation = Union[DrawnPath, DrawnLine, TextAnnotation]


@dataclass
class SceneEntity:
    """One live object: a placed item or an annotation, never both."""

    id: int
    transform: Transform
    render_layer: RenderLayer = RenderLayer.PLAYER
    item: Optional[PlacedItem] = None
    annotation: Optional[Annotation] = None

    @property
    def is_item(self) -> bool:
        return self.item is not None

    @property
    def is_annotation(self) -> bool:
        return self.annotation is not None
