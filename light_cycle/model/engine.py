"""Simulation engine for Light Cycle runs."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple, TYPE_CHECKING

from .agent import Agent, AgentState
from .authoring import EditError, EditResult, Path
from .collision import CollisionKind, classify_collision
from .colors import blend, mix_colors
from .grid import Cell, GridMap
from .state import AgentSnapshot, EventKind, SimulationEvent, SimulationState

if TYPE_CHECKING:
    from ..config import LevelConfig, SimulationConfig

logger = logging.getLogger(__name__)


class RunOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class FailureReason(Enum):
    CRASH = "crash"
    STATION_COLOR_MISMATCH = "station_color_mismatch"
    STATION_UNDERFILLED = "station_underfilled"
    OFF_STATION = "off_station"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class CompletionEvent:
    """Emitted once per run when its outcome is final."""
    outcome: RunOutcome
    total_path_length: int
    undo_count: int
    clock_ms: float
    reasons: Tuple[FailureReason, ...] = ()
    station_arrivals: Dict[str, int] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.outcome == RunOutcome.SUCCESS


CompletionListener = Callable[[CompletionEvent], None]


class SimulationEngine:
    """
    Advances every released cycle along its path, tick by tick.

    Each tick runs in a fixed order:
    1. Release pending cycles whose time has come
    2. Advance active cycles (color changers along the way)
    3. Resolve cycles standing on their last cell
    4. Resolve pairwise meetings in spawn order
    5. Decide the run outcome

    The engine owns no timer: the caller drives ``tick(elapsed_ms)``.
    """

    def __init__(self, level: "LevelConfig", grid: GridMap,
                 paths: Mapping[str, Path], config: "SimulationConfig",
                 undo_count: int = 0):
        self.level = level
        self.grid = grid
        self.paths = dict(paths)
        self.config = config
        self.undo_count = undo_count
        self.speed_multiplier = config.speed_multiplier

        self.current_step = 0
        self.clock_ms = 0.0
        self.agents: List[Agent] = []
        self.station_arrivals: Dict[str, int] = {}
        self.completion: Optional[CompletionEvent] = None
        self.is_running = False

        self._crash_at_ms: Optional[float] = None
        self._crossed: Set[Tuple[int, int, Cell]] = set()
        self._events: List[SimulationEvent] = []
        self._listeners: List[CompletionListener] = []

    @property
    def total_path_length(self) -> int:
        return sum(len(self.paths[o.id]) for o in self.level.outlets
                   if o.id in self.paths)

    def add_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def set_speed(self, multiplier: float) -> None:
        if multiplier <= 0:
            raise ValueError(f"Speed multiplier must be positive, got {multiplier}")
        self.speed_multiplier = multiplier

    def start(self) -> EditResult:
        """Validate that every outlet has a drawn path and release the cycles."""
        if self.is_running:
            return EditResult.failure(EditError.SIMULATION_RUNNING)
        missing = [o.id for o in self.level.outlets
                   if o.id not in self.paths or len(self.paths[o.id]) < 2]
        if missing:
            return EditResult.failure(
                EditError.INCOMPLETE_PATHS,
                f"Draw paths from all outlets first (missing: {', '.join(missing)})")

        self._reset()
        self._spawn_agents()
        self.is_running = True
        logger.info("Run started: %d cycles from %d outlets",
                    len(self.agents), len(self.level.outlets))
        return EditResult.success()

    def stop(self) -> None:
        """Discard all run state; drawn paths are untouched."""
        self.is_running = False
        self._reset()

    def abandon(self, reason: FailureReason = FailureReason.TIMED_OUT) -> None:
        """End an unfinished run in failure, keeping its state for inspection."""
        if self.is_running:
            self._finish(RunOutcome.FAILURE, (reason,))

    def _reset(self) -> None:
        self.current_step = 0
        self.clock_ms = 0.0
        self.agents = []
        self.station_arrivals = {s.id: 0 for s in self.level.stations}
        self.completion = None
        self._crash_at_ms = None
        self._crossed = set()
        self._events = []

    def _spawn_agents(self) -> None:
        """Create every cycle; release times are start_delay + i * delay."""
        agent_id = 0
        for outlet in self.level.outlets:
            path = self.paths[outlet.id].cells
            for i in range(outlet.count):
                agent = Agent(agent_id=agent_id,
                              outlet_id=outlet.id,
                              color=outlet.color,
                              path=path,
                              release_ms=outlet.start_delay + i * outlet.delay,
                              trail_length=self.config.trail_length)
                self.agents.append(agent)
                if agent.release_ms <= 0:
                    self._release(agent, 0.0)
                agent_id += 1
        logger.debug("Spawned %d cycles", len(self.agents))

    def _release(self, agent: Agent, start_ms: float) -> None:
        agent.activate(start_ms)
        self._emit(EventKind.SPAWN, agent.cell, (agent.id,), agent.color.value)

    def _emit(self, kind: EventKind, cell: Optional[Cell] = None,
              agent_ids: Tuple[int, ...] = (), color: Optional[str] = None,
              detail: str = "") -> None:
        self._events.append(SimulationEvent(kind=kind, clock_ms=self.clock_ms, cell=cell,
                                            agent_ids=agent_ids, color=color, detail=detail))

    def tick(self, elapsed_ms: float) -> SimulationState:
        """Advance the run by ``elapsed_ms`` of wall time and return a snapshot."""
        if not self.is_running:
            return self.snapshot()

        self.current_step += 1
        self.clock_ms += max(0.0, elapsed_ms) * self.speed_multiplier

        # Phase 1: Release pending cycles
        for agent in self.agents:
            if agent.state == AgentState.PENDING and agent.release_ms <= self.clock_ms:
                self._release(agent, agent.release_ms)

        # Phase 2: Advance
        for agent in self.agents:
            if not agent.is_active:
                continue
            old_index, new_index = agent.advance(self.clock_ms, self.config.cells_per_ms)
            for i in range(old_index + 1, min(new_index, agent.last_index - 1) + 1):
                self._apply_color_changer(agent, agent.path[i])

        # Phase 3: Cycles on their last cell
        for agent in self.agents:
            if agent.is_active and agent.index >= agent.last_index:
                self._resolve_path_end(agent)

        # Phase 4: Meetings
        self._resolve_collisions()

        # Phase 5: Outcome
        self._evaluate_outcome()

        events, self._events = self._events, []
        return self._build_state(events)

    def _apply_color_changer(self, agent: Agent, cell: Cell) -> bool:
        changer = self.grid.color_changer_at(*cell)
        if changer is None or agent.color == changer.to_color:
            return False
        agent.color = changer.to_color
        self._emit(EventKind.COLOR_CHANGE, cell, (agent.id,), agent.color.value)
        return True

    def _resolve_path_end(self, agent: Agent) -> None:
        cell = agent.cell
        station = self.grid.station_at(*cell)
        if station is not None:
            if agent.color == station.color:
                agent.finish(AgentState.SUCCEEDED)
                self.station_arrivals[station.id] = self.station_arrivals.get(station.id, 0) + 1
                self._emit(EventKind.ARRIVAL, cell, (agent.id,), agent.color.value,
                           detail=station.id)
            else:
                agent.finish(AgentState.FAILED, FailureReason.STATION_COLOR_MISMATCH)
                self._emit(EventKind.FAILURE, cell, (agent.id,), agent.color.value,
                           detail=FailureReason.STATION_COLOR_MISMATCH.value)
            return

        if self.grid.color_changer_at(*cell) is not None:
            # Cycle stays active on the changer; only the caller can end the run.
            if self._apply_color_changer(agent, cell):
                logger.warning("Cycle %d parked on color changer at %s", agent.id, cell)
            return

        logger.warning("Cycle %d path ends off-station at %s", agent.id, cell)
        agent.finish(AgentState.FAILED, FailureReason.OFF_STATION)
        self._emit(EventKind.FAILURE, cell, (agent.id,), agent.color.value,
                   detail=FailureReason.OFF_STATION.value)

    def _resolve_collisions(self) -> None:
        active = [a for a in self.agents if a.is_active]
        for i, first in enumerate(active):
            for second in active[i + 1:]:
                if not first.is_active:
                    break
                if not second.is_active:
                    continue
                # Cycles of one outlet share a path and follow each other.
                if first.outlet_id == second.outlet_id:
                    continue
                if first.cell != second.cell:
                    continue
                self._resolve_meeting(first, second)

    def _resolve_meeting(self, first: Agent, second: Agent) -> None:
        cell = first.cell
        ids = (first.id, second.id)
        kind = classify_collision(first.heading(), second.heading())

        if kind == CollisionKind.CRASH:
            first.finish(AgentState.CRASHED, FailureReason.CRASH)
            second.finish(AgentState.CRASHED, FailureReason.CRASH)
            if self._crash_at_ms is None:
                self._crash_at_ms = self.clock_ms
            self._emit(EventKind.CRASH, cell, ids)
            logger.debug("Crash at %s between cycles %s", cell, ids)

        elif kind == CollisionKind.MERGE:
            first.color = blend(first.color, second.color)
            second.finish(AgentState.MERGED)
            self._emit(EventKind.MERGE, cell, ids, first.color.value)
            logger.debug("Merge at %s: cycle %d -> %s", cell, first.id, first.color.value)

        else:
            key = (first.id, second.id, cell)
            if key in self._crossed:
                return
            self._crossed.add(key)
            if abs(first.fraction - second.fraction) <= self.config.cross_tolerance:
                mixed = mix_colors(first.color, second.color)
                if mixed is not None:
                    first.color = mixed
                    second.color = mixed
            self._emit(EventKind.CROSS, cell, ids, first.color.value)

    def _evaluate_outcome(self) -> None:
        if self.completion is not None:
            return

        failed = [a for a in self.agents if a.state == AgentState.FAILED]
        if failed:
            reasons = []
            for a in self.agents:
                if a.failure_reason is not None and a.failure_reason not in reasons:
                    reasons.append(a.failure_reason)
            self._finish(RunOutcome.FAILURE, tuple(reasons))
            return

        if self._crash_at_ms is not None:
            # Let the explosion play out before the failure is final
            if self.clock_ms - self._crash_at_ms >= self.config.crash_grace_ms:
                self._finish(RunOutcome.FAILURE, (FailureReason.CRASH,))
            return

        if any(not a.state.is_terminal for a in self.agents):
            return

        underfilled = [s.id for s in self.level.stations
                       if self.station_arrivals.get(s.id, 0) < s.required]
        if underfilled:
            logger.debug("Underfilled stations: %s", underfilled)
            self._finish(RunOutcome.FAILURE, (FailureReason.STATION_UNDERFILLED,))
        else:
            self._finish(RunOutcome.SUCCESS, ())

    def _finish(self, outcome: RunOutcome, reasons: Tuple[FailureReason, ...]) -> None:
        self.is_running = False
        self.completion = CompletionEvent(
            outcome=outcome,
            total_path_length=self.total_path_length,
            undo_count=self.undo_count,
            clock_ms=self.clock_ms,
            reasons=reasons,
            station_arrivals=dict(self.station_arrivals))
        self._emit(EventKind.COMPLETE, detail=outcome.value)
        logger.info("Run finished: %s after %.0f ms%s", outcome.value, self.clock_ms,
                    f" ({', '.join(r.value for r in reasons)})" if reasons else "")
        for listener in self._listeners:
            listener(self.completion)

    def snapshot(self) -> SimulationState:
        """Read-only view of the run for renderers."""
        return self._build_state([])

    def _build_state(self, events: List[SimulationEvent]) -> SimulationState:
        outcome = None
        if self.completion is not None:
            outcome = self.completion.outcome.value
        elif self._crash_at_ms is not None:
            outcome = RunOutcome.FAILURE.value

        return SimulationState(
            step=self.current_step,
            clock_ms=self.clock_ms,
            agents=[
                AgentSnapshot(
                    agent_id=a.id,
                    outlet_id=a.outlet_id,
                    x=a.cell[0],
                    y=a.cell[1],
                    progress=a.progress,
                    color=a.color.value,
                    state=a.state.value,
                    trail=tuple(a.trail)
                )
                for a in self.agents
            ],
            station_arrivals=dict(self.station_arrivals),
            events=events,
            outcome=outcome
        )

    def is_finished(self) -> bool:
        return self.completion is not None
