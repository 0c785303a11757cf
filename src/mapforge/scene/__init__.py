"""Engine-agnostic live scene used by the persistence engine."""

from .components import (
    Annotation,
    Color,
    DrawnLine,
    DrawnPath,
    PlacedItem,
    RenderLayer,
    SceneEntity,
    TextAnnotation,
    Transform,
    Vec2,
)
from .live import LiveScene, SceneChanges, SceneProvider

__all__ = [
    "Annotation",
    "Color",
    "DrawnLine",
    "DrawnPath",
    "PlacedItem",
    "RenderLayer",
    "SceneEntity",
    "TextAnnotation",
    "Transform",
    "Vec2",
    "LiveScene",
    "SceneChanges",
    "SceneProvider",
]
