"""State snapshot dataclasses for Light Cycle runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .grid import Cell

# Column order of the per-tick run log; one row per cycle
CSV_FIELDS = ('step', 'clock_ms', 'agent_id', 'outlet_id', 'x', 'y', 'color', 'state')


class EventKind(Enum):
    SPAWN = "spawn"
    COLOR_CHANGE = "color_change"
    MERGE = "merge"
    CROSS = "cross"
    CRASH = "crash"        # explosion effect for the renderer
    ARRIVAL = "arrival"
    FAILURE = "failure"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SimulationEvent:
    kind: EventKind
    clock_ms: float
    cell: Optional[Cell] = None
    agent_ids: Tuple[int, ...] = ()
    color: Optional[str] = None
    detail: str = ""


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of a cycle's state at a given tick."""
    agent_id: int
    outlet_id: str
    x: int
    y: int
    progress: float
    color: str
    state: str  # "pending", "active", "succeeded", "crashed", "merged", "failed"
    trail: Tuple[Tuple[int, int, float], ...] = ()


@dataclass
class SimulationState:
    """Complete snapshot of simulation state after a tick."""
    step: int
    clock_ms: float
    agents: List[AgentSnapshot]
    station_arrivals: Dict[str, int]
    events: List[SimulationEvent] = field(default_factory=list)
    outcome: Optional[str] = None  # "success" / "failure" once decided

    def agents_in(self, state: str) -> List[AgentSnapshot]:
        return [a for a in self.agents if a.state == state]

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format, keyed by ``CSV_FIELDS``."""
        clock = round(self.clock_ms, 3)
        return [
            dict(zip(CSV_FIELDS, (self.step, clock, a.agent_id, a.outlet_id,
                                  a.x, a.y, a.color, a.state)))
            for a in self.agents
        ]
