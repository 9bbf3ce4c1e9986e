"""Puzzle session: the single owner of paths, junctions and the current run."""

import logging
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

from .authoring import (ASSISTED, EditError, EditResult, Path, PathAuthor,
                        PathExtensionPolicy)
from .engine import CompletionEvent, CompletionListener, SimulationEngine
from .grid import Cell, GridMap
from .junction import JunctionRegistry
from .scoring import ScoreCard, score_completion
from .state import SimulationState

if TYPE_CHECKING:
    from ..config import LevelConfig, SimulationConfig

logger = logging.getLogger(__name__)


class PuzzleSession:
    """
    One player's attempt at one level.

    Path edits go through this object so the junction registry is rebuilt
    after every change, and are refused while a run is in progress.
    Rejected calls return a failed EditResult and change nothing.
    """

    def __init__(self, level: "LevelConfig", config: "SimulationConfig",
                 policy: PathExtensionPolicy = ASSISTED):
        self.level = level
        self.config = config
        self.policy = policy
        self.grid = GridMap.from_level(level)
        self.author = PathAuthor(self.grid)

        self.paths: Dict[str, Path] = {}
        self.junctions = JunctionRegistry()
        self.active_outlet_id: Optional[str] = None
        self.undo_count = 0

        self.engine: Optional[SimulationEngine] = None
        self.last_completion: Optional[CompletionEvent] = None
        self._listeners: List[CompletionListener] = []

    # -- Path authoring ---------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.engine is not None and self.engine.is_running

    def _guard(self, outlet_id: Optional[str] = None) -> Optional[EditResult]:
        if self.is_running:
            return EditResult.failure(EditError.SIMULATION_RUNNING,
                                      "Paths cannot change during a run")
        if outlet_id is not None and self.level.outlet(outlet_id) is None:
            return EditResult.failure(EditError.UNKNOWN_OUTLET, f"No outlet {outlet_id}")
        return None

    def _store(self, path: Path) -> None:
        self.paths[path.outlet_id] = path
        self._rebuild_junctions()

    def _rebuild_junctions(self) -> None:
        self.junctions.rebuild(p for p in self.paths.values() if not p.is_empty)

    def start_path(self, outlet_id: str) -> EditResult:
        """Begin a fresh one-cell path at the outlet, discarding the old one."""
        rejected = self._guard(outlet_id)
        if rejected is not None:
            return rejected
        self.active_outlet_id = outlet_id
        self._store(self.author.start(self.level.outlet(outlet_id)))
        logger.debug("Started path for %s", outlet_id)
        return EditResult.success()

    def extend(self, outlet_id: str, target: Cell,
               policy: Optional[PathExtensionPolicy] = None) -> EditResult:
        rejected = self._guard(outlet_id)
        if rejected is not None:
            return rejected
        path = self.paths.get(outlet_id)
        if path is None:
            return EditResult.failure(EditError.NO_ACTIVE_PATH,
                                      f"Start a path at {outlet_id} first")

        extended, result = self.author.extend(path, tuple(target), policy or self.policy)
        if not result.ok:
            return result
        if result.backtracked:
            self.undo_count += 1
        self.active_outlet_id = None if extended.finalized else outlet_id
        self._store(extended)
        return result

    def trace(self, outlet_id: str, waypoints: Iterable[Cell],
              policy: Optional[PathExtensionPolicy] = None) -> EditResult:
        """Start a path and extend it through each waypoint in turn."""
        result = self.start_path(outlet_id)
        for waypoint in waypoints:
            if not result.ok:
                break
            result = self.extend(outlet_id, waypoint, policy)
        return result

    def undo(self) -> EditResult:
        """
        Remove the last cell of the path being drawn or, when none is,
        of the last outlet (in level order) that has a drawn path.
        """
        rejected = self._guard()
        if rejected is not None:
            return rejected

        outlet_id = self.active_outlet_id
        if outlet_id is None:
            outlet_id = next((o.id for o in reversed(self.level.outlets)
                              if o.id in self.paths and not self.paths[o.id].is_empty),
                             None)
        # A path being drawn owns undo even when it is down to its outlet cell
        current = self.paths.get(outlet_id) if outlet_id is not None else None
        if current is None or current.is_empty:
            return EditResult.failure(EditError.NOTHING_TO_UNDO)

        shortened, result = self.author.undo_step(self.paths[outlet_id])
        self.undo_count += 1
        if shortened.is_empty and outlet_id != self.active_outlet_id:
            del self.paths[outlet_id]
            self._rebuild_junctions()
        else:
            self._store(shortened)
        return result

    def clear_path(self, outlet_id: str) -> EditResult:
        rejected = self._guard(outlet_id)
        if rejected is not None:
            return rejected
        if self.paths.pop(outlet_id, None) is not None:
            self._rebuild_junctions()
        if self.active_outlet_id == outlet_id:
            self.active_outlet_id = None
        return EditResult.success()

    def clear_all(self) -> EditResult:
        rejected = self._guard()
        if rejected is not None:
            return rejected
        self.paths = {}
        self.junctions.clear()
        self.active_outlet_id = None
        return EditResult.success()

    def toggle_junction(self, x: int, y: int) -> EditResult:
        rejected = self._guard()
        if rejected is not None:
            return rejected
        junction = self.junctions.toggle(x, y)
        if junction is None:
            return EditResult.failure(EditError.NOT_A_JUNCTION, f"({x}, {y}) is not shared")
        return EditResult.success(f"Priority at ({x}, {y}): {junction.active_outlet}")

    @property
    def total_path_length(self) -> int:
        return sum(len(p) for p in self.paths.values() if not p.is_empty)

    # -- Simulation control -----------------------------------------------

    def add_completion_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def start_simulation(self) -> EditResult:
        if self.is_running:
            return EditResult.failure(EditError.SIMULATION_RUNNING)
        engine = SimulationEngine(self.level, self.grid, self.paths, self.config,
                                  undo_count=self.undo_count)
        result = engine.start()
        if not result.ok:
            return result

        engine.add_listener(self._on_complete)
        for listener in self._listeners:
            engine.add_listener(listener)
        self.engine = engine
        self.active_outlet_id = None
        return result

    def _on_complete(self, completion: CompletionEvent) -> None:
        self.last_completion = completion

    def tick(self, elapsed_ms: float) -> Optional[SimulationState]:
        if self.engine is None:
            return None
        return self.engine.tick(elapsed_ms)

    def stop(self) -> None:
        """Drop the run; always safe, paths are kept for a replay."""
        if self.engine is not None:
            self.engine.stop()
        self.engine = None

    def snapshot(self) -> Optional[SimulationState]:
        if self.engine is None:
            return None
        return self.engine.snapshot()

    def score(self) -> ScoreCard:
        if self.last_completion is None:
            raise ValueError("No finished run to score")
        return score_completion(self.last_completion, self.level)
