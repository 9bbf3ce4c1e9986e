"""Grid map for Light Cycle levels."""

from enum import Enum
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ..config import (LevelConfig, OutletSpec, StationSpec,
                          SplitterSpec, ColorChangerSpec)

Cell = Tuple[int, int]


class Direction(Enum):
    """Direction of travel between 4-adjacent cells; y grows downward."""
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        return self.dy == 0

    @property
    def opposite(self) -> "Direction":
        return Direction((-self.dx, -self.dy))

    def same_axis(self, other: "Direction") -> bool:
        return self.is_horizontal == other.is_horizontal

    @classmethod
    def parse(cls, name: str) -> "Direction":
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {name}") from None

    @classmethod
    def between(cls, a: Cell, b: Cell) -> Optional["Direction"]:
        """Direction of a single step from a to b, None if not 4-adjacent."""
        try:
            return cls((b[0] - a[0], b[1] - a[1]))
        except ValueError:
            return None


# Fixed enumeration order; pathfinding determinism depends on it.
NEIGHBOR_ORDER = (Direction.LEFT, Direction.RIGHT, Direction.UP, Direction.DOWN)


def is_adjacent(a: Cell, b: Cell) -> bool:
    """True if a and b share an edge."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


class GridMap:
    """
    Read-only description of one level's square grid.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Built once per level with ``from_level`` and never mutated afterwards.
    """

    def __init__(self, size: int,
                 obstacles: List[Cell] = (),
                 splitters: List["SplitterSpec"] = (),
                 color_changers: List["ColorChangerSpec"] = (),
                 outlets: List["OutletSpec"] = (),
                 stations: List["StationSpec"] = ()):
        if size <= 0:
            raise ValueError(f"Grid size must be positive, got {size}")
        self.size = size

        # Boolean mask: True = obstacle (impassable)
        self.obstacles = np.zeros((size, size), dtype=bool)
        for x, y in obstacles:
            if self.in_bounds(x, y):
                self.obstacles[y, x] = True
        self.obstacles.flags.writeable = False

        self._splitters: Dict[Cell, "SplitterSpec"] = {
            (s.x, s.y): s for s in splitters}
        self._color_changers: Dict[Cell, "ColorChangerSpec"] = {
            (c.x, c.y): c for c in color_changers}
        self._outlets: Dict[Cell, "OutletSpec"] = {
            (o.x, o.y): o for o in outlets}
        self._stations: Dict[Cell, "StationSpec"] = {
            (s.x, s.y): s for s in stations}

    @classmethod
    def from_level(cls, level: "LevelConfig") -> "GridMap":
        return cls(level.size,
                   obstacles=level.obstacles,
                   splitters=level.splitters,
                   color_changers=level.color_changers,
                   outlets=level.outlets,
                   stations=level.stations)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def is_obstacle(self, x: int, y: int) -> bool:
        """Check if cell is an obstacle. Out-of-bounds cells are not."""
        if not self.in_bounds(x, y):
            return False
        return bool(self.obstacles[y, x])

    def is_walkable(self, x: int, y: int) -> bool:
        """Check if cell is within bounds and not an obstacle."""
        return self.in_bounds(x, y) and not self.obstacles[y, x]

    def splitter_at(self, x: int, y: int) -> Optional["SplitterSpec"]:
        return self._splitters.get((x, y))

    def color_changer_at(self, x: int, y: int) -> Optional["ColorChangerSpec"]:
        return self._color_changers.get((x, y))

    def outlet_at(self, x: int, y: int) -> Optional["OutletSpec"]:
        return self._outlets.get((x, y))

    def station_at(self, x: int, y: int) -> Optional["StationSpec"]:
        return self._stations.get((x, y))

    def get_neighbors(self, x: int, y: int) -> List[Cell]:
        """Walkable von Neumann neighbors, in ``NEIGHBOR_ORDER``."""
        neighbors = []
        for direction in NEIGHBOR_ORDER:
            nx, ny = x + direction.dx, y + direction.dy
            if self.is_walkable(nx, ny):
                neighbors.append((nx, ny))
        return neighbors
