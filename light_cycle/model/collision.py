"""Classification of two cycles meeting on one cell."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .grid import Direction


class CollisionKind(Enum):
    CRASH = "crash"
    MERGE = "merge"
    CROSS = "cross"


@dataclass(frozen=True)
class Heading:
    """How a cycle passes through the shared cell."""
    entry: Optional[Direction]
    exit: Optional[Direction]
    terminating: bool = False  # the cell is the last of its path


def classify_collision(a: Heading, b: Heading) -> CollisionKind:
    """
    Decide what happens when two cycles occupy the same cell.

    - Either cycle ending here: merge.
    - Exits on one axis: crash if opposite, merge if equal.
    - Exits on different axes: cross.
    - Otherwise (an exit could not be derived from the path) the
      ambiguous-overlap policy applies: crash if the entries are exactly
      opposite, merge in every other case.

    The result does not depend on argument order.
    """
    if a.terminating or b.terminating:
        return CollisionKind.MERGE

    if a.exit is not None and b.exit is not None:
        if a.exit.same_axis(b.exit):
            if a.exit == b.exit.opposite:
                return CollisionKind.CRASH
            return CollisionKind.MERGE
        return CollisionKind.CROSS

    return _ambiguous_overlap(a.entry, b.entry)


def _ambiguous_overlap(entry_a: Optional[Direction],
                       entry_b: Optional[Direction]) -> CollisionKind:
    if entry_a is not None and entry_b is not None and entry_a == entry_b.opposite:
        return CollisionKind.CRASH
    return CollisionKind.MERGE
