from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
Point = Tuple[float, float]


class FogOfWarData:
    """
    Fog of war over the map grid using a revealed-cells model.

    - Empty set: everything is fogged (the default, so new maps are safe to
      show players).
    - Cells in the set are revealed.
    - Resetting fog clears the set.
    """

    def __init__(self, revealed_cells: Optional[Iterable[Cell]] = None) -> None:
        self.revealed_cells: Set[Cell] = set()
        if revealed_cells is not None:
            for x, y in revealed_cells:
                self.revealed_cells.add((int(x), int(y)))

    def reset(self) -> None:
        """Hide everything again."""
        self.revealed_cells.clear()
        logger.debug("Fog reset; all cells fogged")

    def reveal_all(self, min_cell: Cell, max_cell: Cell) -> None:
        """Reveal every cell in the inclusive rectangle min_cell..max_cell."""
        for x in range(min_cell[0], max_cell[0] + 1):
            for y in range(min_cell[1], max_cell[1] + 1):
                self.revealed_cells.add((x, y))

    def reveal_cell(self, cell: Cell) -> None:
        self.revealed_cells.add(cell)

    def fog_cell(self, cell: Cell) -> None:
        self.revealed_cells.discard(cell)

    def is_cell_revealed(self, cell: Cell) -> bool:
        return cell in self.revealed_cells

    def is_cell_fogged(self, cell: Cell) -> bool:
        return cell not in self.revealed_cells

    def revealed_count(self) -> int:
        return len(self.revealed_cells)

    def has_revealed_cells(self) -> bool:
        return bool(self.revealed_cells)

    def sorted_cells(self) -> List[Cell]:
        return sorted(self.revealed_cells)

    def copy(self) -> "FogOfWarData":
        return FogOfWarData(self.revealed_cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FogOfWarData):
            return NotImplemented
        return self.revealed_cells == other.revealed_cells

    def __repr__(self) -> str:
        return f"FogOfWarData(revealed={len(self.revealed_cells)})"


def world_to_cell(world_pos: Point, grid_size: float) -> Cell:
    """Grid cell containing a world position."""
    return (
        math.floor(world_pos[0] / grid_size),
        math.floor(world_pos[1] / grid_size),
    )


def cell_to_world(cell: Cell, grid_size: float) -> Point:
    """World position of a cell's centre."""
    return (
        cell[0] * grid_size + grid_size / 2.0,
        cell[1] * grid_size + grid_size / 2.0,
    )


def cells_in_radius(center: Point, radius: float, grid_size: float) -> List[Cell]:
    """All cells whose centre lies within ``radius`` of ``center``."""
    cx, cy = world_to_cell(center, grid_size)
    cell_radius = math.ceil(radius / grid_size)
    cells: List[Cell] = []
    for dx in range(-cell_radius, cell_radius + 1):
        for dy in range(-cell_radius, cell_radius + 1):
            cell = (cx + dx, cy + dy)
            wx, wy = cell_to_world(cell, grid_size)
            if math.hypot(center[0] - wx, center[1] - wy) <= radius:
                cells.append(cell)
    return cells
