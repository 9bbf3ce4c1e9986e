"""Light cycle agent travelling a drawn path."""

import math
from collections import deque
from enum import Enum
from typing import Deque, Optional, Tuple

from .colors import Color
from .collision import Heading
from .grid import Cell, Direction


class AgentState(Enum):
    """Lifecycle of a cycle during one run."""
    PENDING = "pending"
    ACTIVE = "active"
    SUCCEEDED = "succeeded"
    CRASHED = "crashed"
    MERGED = "merged"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self not in (AgentState.PENDING, AgentState.ACTIVE)


class Agent:
    """
    A single cycle released by an outlet.

    Position along the path is a continuous ``progress`` measured in
    cells; the occupied cell is ``path[floor(progress)]``. Each cycle runs
    its own clock from its release time, so staggered releases from one
    outlet do not affect each other's speed.
    """

    def __init__(self, agent_id: int,
                 outlet_id: str,
                 color: Color,
                 path: Tuple[Cell, ...],
                 release_ms: float,
                 trail_length: int = 50):
        self.id = agent_id
        self.outlet_id = outlet_id
        self.color = color
        self.path = path
        self.release_ms = release_ms
        self.started_at_ms: Optional[float] = None
        self.progress = 0.0
        self.state = AgentState.PENDING
        self.failure_reason = None
        # Trail history for rendering: (x, y, sim time in ms)
        self.trail: Deque[Tuple[int, int, float]] = deque(maxlen=trail_length)

    @property
    def last_index(self) -> int:
        return len(self.path) - 1

    @property
    def index(self) -> int:
        return min(int(math.floor(self.progress)), self.last_index)

    @property
    def cell(self) -> Cell:
        return self.path[self.index]

    @property
    def fraction(self) -> float:
        """Progress within the current cell, in [0, 1)."""
        return self.progress - math.floor(self.progress)

    @property
    def entry_direction(self) -> Optional[Direction]:
        i = self.index
        if i == 0:
            return None
        return Direction.between(self.path[i - 1], self.path[i])

    @property
    def exit_direction(self) -> Optional[Direction]:
        i = self.index
        if i >= self.last_index:
            return None
        return Direction.between(self.path[i], self.path[i + 1])

    def heading(self) -> Heading:
        return Heading(entry=self.entry_direction,
                       exit=self.exit_direction,
                       terminating=self.index >= self.last_index)

    @property
    def is_active(self) -> bool:
        return self.state == AgentState.ACTIVE

    def activate(self, start_ms: float) -> None:
        self.state = AgentState.ACTIVE
        self.started_at_ms = start_ms
        self.trail.append((self.cell[0], self.cell[1], start_ms))

    def advance(self, clock_ms: float, cells_per_ms: float) -> Tuple[int, int]:
        """
        Move to where the cycle should be at ``clock_ms``.

        Returns the (old, new) floored path indices so the caller can apply
        effects of every cell passed during this step.
        """
        old_index = self.index
        elapsed = max(0.0, clock_ms - self.started_at_ms)
        self.progress = min(elapsed * cells_per_ms, float(self.last_index))
        new_index = self.index
        if new_index != old_index:
            self.trail.append((self.cell[0], self.cell[1], clock_ms))
        return old_index, new_index

    def finish(self, state: AgentState, reason=None) -> None:
        self.state = state
        self.failure_reason = reason

    def __repr__(self) -> str:
        return (f"Agent(id={self.id}, outlet={self.outlet_id}, pos={self.cell}, "
                f"color={self.color.value}, state={self.state.value})")
