"""Junction bookkeeping for cells shared by more than one path."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from .authoring import Path
from .grid import Cell, Direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathVisit:
    """One path's pass through a cell."""
    outlet_id: str
    index: int
    entry: Optional[Direction]  # None at the path's first cell
    exit: Optional[Direction]   # None at the path's last cell


@dataclass(frozen=True)
class Junction:
    """
    A cell two or more distinct outlets' paths pass through.

    ``configurations`` lists the owning outlets in path order; the entry at
    ``active_config_index`` is the outlet shown as having priority here.
    """
    cell: Cell
    visits: Tuple[PathVisit, ...]
    configurations: Tuple[str, ...]
    active_config_index: int = 0

    @property
    def active_outlet(self) -> str:
        return self.configurations[self.active_config_index]

    def toggled(self) -> "Junction":
        return replace(self, active_config_index=(
            (self.active_config_index + 1) % len(self.configurations)))


def build_visit_index(paths: Iterable[Path]) -> Dict[Cell, List[PathVisit]]:
    """Map every cell to the visits of all paths through it."""
    index: Dict[Cell, List[PathVisit]] = {}
    for path in paths:
        cells = path.cells
        for i, cell in enumerate(cells):
            entry = Direction.between(cells[i - 1], cell) if i > 0 else None
            exit_ = Direction.between(cell, cells[i + 1]) if i < len(cells) - 1 else None
            index.setdefault(cell, []).append(
                PathVisit(outlet_id=path.outlet_id, index=i, entry=entry, exit=exit_))
    return index


def compute_junctions(paths: Iterable[Path],
                      previous: Optional[Dict[Cell, Junction]] = None) -> Dict[Cell, Junction]:
    """
    Derive the junction map from the current paths.

    The priority choice of a junction that already existed carries over:
    it follows its outlet if that outlet still owns the cell, otherwise
    the old index is clamped into the new configuration list.
    """
    previous = previous or {}
    junctions: Dict[Cell, Junction] = {}
    for cell, visits in build_visit_index(paths).items():
        owners: List[str] = []
        for visit in visits:
            if visit.outlet_id not in owners:
                owners.append(visit.outlet_id)
        if len(owners) < 2:
            continue

        active = 0
        old = previous.get(cell)
        if old is not None:
            if old.active_outlet in owners:
                active = owners.index(old.active_outlet)
            else:
                active = min(old.active_config_index, len(owners) - 1)

        junctions[cell] = Junction(cell=cell, visits=tuple(visits),
                                   configurations=tuple(owners),
                                   active_config_index=active)
    return junctions


class JunctionRegistry:
    """Derived cache of junctions; rebuilt whole after every path change."""

    def __init__(self):
        self._junctions: Dict[Cell, Junction] = {}

    def rebuild(self, paths: Iterable[Path]) -> None:
        self._junctions = compute_junctions(paths, self._junctions)
        logger.debug("Rebuilt junctions: %d shared cells", len(self._junctions))

    def clear(self) -> None:
        self._junctions = {}

    def toggle(self, x: int, y: int) -> Optional[Junction]:
        """Advance the priority at (x, y); None if the cell is no junction."""
        junction = self._junctions.get((x, y))
        if junction is None:
            return None
        junction = junction.toggled()
        self._junctions[(x, y)] = junction
        return junction

    def get(self, x: int, y: int) -> Optional[Junction]:
        return self._junctions.get((x, y))

    def all(self) -> List[Junction]:
        return [self._junctions[c] for c in sorted(self._junctions)]

    def __len__(self) -> int:
        return len(self._junctions)

    def __contains__(self, cell: Cell) -> bool:
        return cell in self._junctions
