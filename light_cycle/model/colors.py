"""Cycle colors and the symmetric color mixing table."""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class Color(Enum):
    """Colors an outlet, station, changer or cycle can carry."""
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    GREEN = "green"
    CYAN = "cyan"
    MAGENTA = "magenta"
    ORANGE = "orange"
    PURPLE = "purple"
    WHITE = "white"
    PINK = "pink"

    @classmethod
    def parse(cls, name: str) -> "Color":
        """Look up a color by its lowercase name."""
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown color: {name}") from None


# Keyed by the unordered pair, so A+B and B+A share one entry.
_MIX_TABLE: Dict[FrozenSet[Color], Color] = {
    frozenset((Color.RED, Color.BLUE)): Color.PURPLE,
    frozenset((Color.RED, Color.YELLOW)): Color.ORANGE,
    frozenset((Color.BLUE, Color.YELLOW)): Color.GREEN,
    frozenset((Color.RED, Color.GREEN)): Color.YELLOW,
    frozenset((Color.CYAN, Color.MAGENTA)): Color.WHITE,
    frozenset((Color.CYAN, Color.YELLOW)): Color.GREEN,
    frozenset((Color.RED, Color.CYAN)): Color.WHITE,
}


def mix_colors(a: Color, b: Color) -> Optional[Color]:
    """
    Return the mixed color for an unordered pair, or None if the pair
    has no entry in the table. A color mixed with itself is unmapped.
    """
    return _MIX_TABLE.get(frozenset((a, b)))


def blend(first: Color, second: Color) -> Color:
    """Mix two colors, keeping ``first`` when the pair is unmapped."""
    mixed = mix_colors(first, second)
    return mixed if mixed is not None else first
