from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .layer import Layer

DEFAULT_MAP_NAME = "Untitled Map"
DEFAULT_GRID_SIZE = 70.0


class LayerData(BaseModel):
    """Per-layer visibility and lock flags."""

    model_config = ConfigDict(extra="ignore")

    layer_type: Layer = Field(..., description="Layer these flags apply to")
    visible: bool = Field(True, description="Layer is drawn in the editor")
    locked: bool = Field(False, description="Items on the layer cannot be selected")


def _default_layers() -> List[LayerData]:
    return [LayerData(layer_type=layer) for layer in Layer.all()]


class MapData(BaseModel):
    """Map-level metadata: name, grid, layer flags.

    Shared by the live editor state and the map file; the same model is
    written to and read from disk.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    name: str = Field(DEFAULT_MAP_NAME, description="Display name of the map")
    grid_size: float = Field(DEFAULT_GRID_SIZE, gt=0, description="Grid cell size in world units")
    grid_visible: bool = Field(True, description="Whether the grid overlay is drawn")
    layers: List[LayerData] = Field(default_factory=_default_layers, description="Per-layer flags")

    def layer(self, layer: Layer) -> Optional[LayerData]:
        for data in self.layers:
            if data.layer_type == layer:
                return data
        return None

    def is_layer_visible(self, layer: Layer) -> bool:
        data = self.layer(layer)
        return True if data is None else data.visible

    def is_layer_locked(self, layer: Layer) -> bool:
        data = self.layer(layer)
        return False if data is None else data.locked
