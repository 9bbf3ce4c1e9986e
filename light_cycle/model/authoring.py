"""Path drawing: adjacency extension, backtracking and assisted routing."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

from .grid import Cell, GridMap, is_adjacent
from .pathfinding import find_path

if TYPE_CHECKING:
    from ..config import OutletSpec

logger = logging.getLogger(__name__)


class EditError(Enum):
    """Reasons a path edit or simulation control call is rejected."""
    INVALID_MOVE = "invalid_move"
    OBSTACLE_BLOCKED = "obstacle_blocked"
    NO_PATH_FOUND = "no_path_found"
    INCOMPLETE_PATHS = "incomplete_paths"
    UNKNOWN_OUTLET = "unknown_outlet"
    PATH_FINALIZED = "path_finalized"
    NO_ACTIVE_PATH = "no_active_path"
    NOT_A_JUNCTION = "not_a_junction"
    SIMULATION_RUNNING = "simulation_running"
    NOTHING_TO_UNDO = "nothing_to_undo"


@dataclass(frozen=True)
class EditResult:
    ok: bool
    error: Optional[EditError] = None
    message: str = ""
    backtracked: bool = False

    @classmethod
    def success(cls, message: str = "", backtracked: bool = False) -> "EditResult":
        return cls(ok=True, message=message, backtracked=backtracked)

    @classmethod
    def failure(cls, error: EditError, message: str = "") -> "EditResult":
        return cls(ok=False, error=error, message=message or error.value)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class Path:
    """
    Cells an outlet's cycles travel, head first.

    Immutable: every edit produces a new Path, so a stored path is never
    aliased by an in-progress edit.
    """
    outlet_id: str
    cells: Tuple[Cell, ...]
    finalized: bool = False

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def head(self) -> Cell:
        return self.cells[0]

    @property
    def last(self) -> Cell:
        return self.cells[-1]

    @property
    def is_empty(self) -> bool:
        """A path holding only its outlet cell has not been drawn yet."""
        return len(self.cells) <= 1

    def index_of(self, cell: Cell) -> Optional[int]:
        try:
            return self.cells.index(cell)
        except ValueError:
            return None

    def truncated(self, index: int) -> "Path":
        """Keep cells[0..index]; a truncated path is never finalized."""
        return replace(self, cells=self.cells[:index + 1], finalized=False)


class PathExtensionPolicy(ABC):
    """How ``extend`` handles a target that is not adjacent to the path end."""

    name = ""

    @abstractmethod
    def route(self, grid: GridMap, start: Cell,
              target: Cell) -> Tuple[Optional[List[Cell]], Optional[EditError]]:
        """Return the cells to add after ``start`` or the rejection reason."""


class ManualPolicy(PathExtensionPolicy):
    """Free drawing: only strictly adjacent cells are accepted."""

    name = "manual"

    def route(self, grid, start, target):
        return None, EditError.INVALID_MOVE


class AssistedPolicy(PathExtensionPolicy):
    """Click-to-draw: fill the gap with the shortest obstacle-free route."""

    name = "assisted"

    def route(self, grid, start, target):
        found = find_path(grid, start, target)
        if found is None:
            return None, EditError.NO_PATH_FOUND
        return found[1:], None


MANUAL = ManualPolicy()
ASSISTED = AssistedPolicy()


def policy_named(name: str) -> PathExtensionPolicy:
    for policy in (ASSISTED, MANUAL):
        if policy.name == name:
            return policy
    raise ValueError(f"Unknown extension policy: {name}")


class PathAuthor:
    """
    Stateless path editing rules for one grid.

    Every operation returns a new Path plus an EditResult; on rejection
    the original Path is returned untouched.
    """

    def __init__(self, grid: GridMap):
        self.grid = grid

    def start(self, outlet: "OutletSpec") -> Path:
        return Path(outlet_id=outlet.id, cells=(outlet.cell,))

    def extend(self, path: Path, target: Cell,
               policy: PathExtensionPolicy = ASSISTED) -> Tuple[Path, EditResult]:
        """
        Extend ``path`` toward ``target``.

        1. A target already on the path (before its end) truncates back to it.
        2. An adjacent walkable target is appended.
        3. Anything else is handed to ``policy``; route cells that revisit
           the path truncate instead of appending.
        Reaching a station finalizes the path.
        """
        if path.finalized:
            return path, EditResult.failure(
                EditError.PATH_FINALIZED, f"Path for {path.outlet_id} already ends at a station")
        if not self.grid.in_bounds(*target):
            return path, EditResult.failure(
                EditError.INVALID_MOVE, f"{target} is outside the grid")

        index = path.index_of(target)
        if index is not None and index < len(path) - 1:
            logger.debug("Backtrack %s to index %d", path.outlet_id, index)
            return path.truncated(index), EditResult.success(
                f"Backtracked to {target}", backtracked=True)
        if target == path.last:
            return path, EditResult.success("Already at target")

        if self.grid.is_obstacle(*target):
            return path, EditResult.failure(
                EditError.OBSTACLE_BLOCKED, f"{target} is an obstacle")

        if is_adjacent(path.last, target):
            steps = [target]
        else:
            steps, error = policy.route(self.grid, path.last, target)
            if error is not None:
                return path, EditResult.failure(
                    error, f"Cannot reach {target} from {path.last} ({policy.name})")

        cells = list(path.cells)
        finalized = False
        for cell in steps:
            if self.grid.is_obstacle(*cell):
                return path, EditResult.failure(
                    EditError.OBSTACLE_BLOCKED, f"Route crosses obstacle {cell}")
            if cell in cells[:-1]:
                del cells[cells.index(cell) + 1:]
                continue
            cells.append(cell)
            if self.grid.station_at(*cell) is not None:
                finalized = True
                break

        extended = replace(path, cells=tuple(cells), finalized=finalized)
        logger.debug("Extend %s to %s (%d cells%s)", path.outlet_id, target,
                     len(extended), ", finalized" if finalized else "")
        return extended, EditResult.success()

    def undo_step(self, path: Path) -> Tuple[Path, EditResult]:
        """Drop the last cell; the outlet cell itself is never dropped."""
        if path.is_empty:
            return path, EditResult.failure(EditError.NOTHING_TO_UNDO)
        return path.truncated(len(path) - 2), EditResult.success(
            f"Removed {path.last}")
