from __future__ import annotations

from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mapforge.map.layer import Layer
from mapforge.map.map_data import MapData

Vec2 = Tuple[float, float]
Color = Tuple[float, float, float, float]
Cell = Tuple[int, int]

WHITE: Color = (1.0, 1.0, 1.0, 1.0)


class _Saved(BaseModel):
    # Unknown keys from newer files are dropped, missing ones take defaults.
    model_config = ConfigDict(extra="ignore")


class SavedPlacedItem(_Saved):
    asset_path: str = Field(..., description="Asset identifier of the placed image")
    position: Vec2 = Field((0.0, 0.0), description="World position")
    rotation: float = Field(0.0, description="Rotation in radians")
    scale: Vec2 = Field((1.0, 1.0), description="Non-uniform scale")
    layer: Layer = Field(Layer.TERRAIN, description="Draw layer")
    z_index: int = Field(0, description="Order within the layer; clamped on restore")


class SavedPath(_Saved):
    points: List[Vec2] = Field(default_factory=list)
    color: Color = WHITE
    stroke_width: float = 3.0


class SavedLine(_Saved):
    start: Vec2 = (0.0, 0.0)
    end: Vec2 = (0.0, 0.0)
    color: Color = WHITE
    stroke_width: float = 3.0


class SavedTextBox(_Saved):
    position: Vec2 = (0.0, 0.0)
    content: str = ""
    font_size: float = 16.0
    color: Color = WHITE


class SavedAnnotations(_Saved):
    paths: List[SavedPath] = Field(default_factory=list)
    lines: List[SavedLine] = Field(default_factory=list)
    text_boxes: List[SavedTextBox] = Field(default_factory=list)

    def count(self) -> int:
        return len(self.paths) + len(self.lines) + len(self.text_boxes)


class SavedFogOfWar(_Saved):
    """Revealed cells; empty means fully fogged."""

    revealed_cells: List[Cell] = Field(default_factory=list)
    # Legacy hidden-cell format. Read and ignored: without map bounds it
    # cannot be inverted, so such maps start fully fogged.
    fogged_cells: List[Cell] = Field(default_factory=list, exclude=True)

    @field_validator("revealed_cells")
    @classmethod
    def sort_unique_cells(cls, v: List[Cell]) -> List[Cell]:
        return sorted(set(v))


class AssetManifest(_Saved):
    """Sorted, de-duplicated asset identifiers referenced by placed items.

    Derived data: rebuilt at every save and only used for path resolution
    on load.
    """

    assets: List[str] = Field(default_factory=list)

    @classmethod
    def from_items(cls, items: Iterable[SavedPlacedItem]) -> "AssetManifest":
        return cls(assets=sorted({item.asset_path for item in items}))


class SavedMap(_Saved):
    """A complete map document as written to disk."""

    asset_manifest: AssetManifest = Field(default_factory=AssetManifest)
    map_data: MapData
    placed_items: List[SavedPlacedItem]
    annotations: SavedAnnotations = Field(default_factory=SavedAnnotations)
    fog_of_war: SavedFogOfWar = Field(default_factory=SavedFogOfWar)

    def with_rebuilt_manifest(self) -> "SavedMap":
        return self.model_copy(update={"asset_manifest": AssetManifest.from_items(self.placed_items)})
