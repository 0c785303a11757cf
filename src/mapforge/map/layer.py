from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

# Highest z-order allowed within a layer (0..MAX_Z_INDEX inclusive)
MAX_Z_INDEX = 24


class Layer(str, Enum):
    """Draw layers of a map, bottom to top.

    Values are the names written to map files.
    """

    BACKGROUND = "Background"
    TERRAIN = "Terrain"
    DOODAD = "Doodad"
    TOKEN = "Token"
    GM = "GM"                  # hidden from players
    ANNOTATION = "Annotation"  # drawings, lines, text (editor-only)
    FOG_OF_WAR = "FogOfWar"    # reserved
    PLAY = "Play"              # player viewport indicator (editor-only)

    @classmethod
    def default(cls) -> "Layer":
        return cls.TERRAIN

    @classmethod
    def all(cls) -> Tuple["Layer", ...]:
        """Layers available for normal editing (excludes Play)."""
        return (
            cls.BACKGROUND,
            cls.TERRAIN,
            cls.DOODAD,
            cls.TOKEN,
            cls.GM,
            cls.ANNOTATION,
            cls.FOG_OF_WAR,
        )

    @staticmethod
    def max_z_index() -> int:
        return MAX_Z_INDEX

    def z_base(self) -> float:
        return _Z_BASE[self]

    def is_player_visible(self) -> bool:
        return self not in (Layer.GM, Layer.ANNOTATION, Layer.FOG_OF_WAR, Layer.PLAY)

    def is_available(self) -> bool:
        return self is not Layer.FOG_OF_WAR

    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_Z_BASE: Dict[Layer, float] = {
    Layer.BACKGROUND: 0.0,
    Layer.TERRAIN: 50.0,
    Layer.DOODAD: 100.0,
    Layer.TOKEN: 150.0,
    Layer.GM: 200.0,
    Layer.ANNOTATION: 250.0,
    Layer.FOG_OF_WAR: 300.0,
    Layer.PLAY: 400.0,
}

_DISPLAY_NAMES: Dict[Layer, str] = {
    Layer.BACKGROUND: "Background",
    Layer.TERRAIN: "Terrain",
    Layer.DOODAD: "Doodads",
    Layer.TOKEN: "Tokens",
    Layer.GM: "GM",
    Layer.ANNOTATION: "Annotations",
    Layer.FOG_OF_WAR: "Fog of War",
    Layer.PLAY: "Play",
}


def clamp_z_index(z_index: int) -> int:
    """Clamp a stored z-order into the valid per-layer range.

    Older maps used a wider range; values outside 0..MAX_Z_INDEX are pulled in.
    """
    return max(0, min(MAX_Z_INDEX, int(z_index)))


def draw_depth(layer: Layer, z_index: int) -> float:
    """Final draw depth of an item: layer base plus clamped z-order."""
    return layer.z_base() + clamp_z_index(z_index)
