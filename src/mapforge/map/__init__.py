"""Live map state shared by the editor and the map file format."""

from .fog import FogOfWarData, cell_to_world, cells_in_radius, world_to_cell
from .layer import MAX_Z_INDEX, Layer, clamp_z_index, draw_depth
from .map_data import DEFAULT_MAP_NAME, LayerData, MapData

__all__ = [
    "FogOfWarData",
    "cell_to_world",
    "cells_in_radius",
    "world_to_cell",
    "MAX_Z_INDEX",
    "Layer",
    "clamp_z_index",
    "draw_depth",
    "DEFAULT_MAP_NAME",
    "LayerData",
    "MapData",
]
