"""Configuration dataclasses and YAML loader for Light Cycle runs."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from pathlib import Path
import yaml

from .model.colors import Color
from .model.grid import Cell, Direction


@dataclass(frozen=True)
class OutletSpec:
    id: str
    x: int
    y: int
    color: Color
    count: int = 1
    delay: float = 0.0        # ms between consecutive cycles
    start_delay: float = 0.0  # ms before the first cycle

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)


@dataclass(frozen=True)
class StationSpec:
    id: str
    x: int
    y: int
    color: Color
    required: int = 1

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)


@dataclass(frozen=True)
class SplitterSpec:
    x: int
    y: int
    directions: Tuple[Direction, ...]


@dataclass(frozen=True)
class ColorChangerSpec:
    x: int
    y: int
    to_color: Color


@dataclass
class LevelConfig:
    size: int
    outlets: List[OutletSpec]
    stations: List[StationSpec]
    obstacles: List[Cell] = field(default_factory=list)
    splitters: List[SplitterSpec] = field(default_factory=list)
    color_changers: List[ColorChangerSpec] = field(default_factory=list)
    par: int = 0
    undo_bonus: int = 0
    name: str = ""
    description: str = ""

    def outlet(self, outlet_id: str) -> Optional[OutletSpec]:
        for o in self.outlets:
            if o.id == outlet_id:
                return o
        return None


@dataclass
class SimulationConfig:
    cells_per_ms: float = 0.0025     # one cell per 400 ms at 1x
    speed_multiplier: float = 1.0
    tick_ms: float = 16.0            # headless runner step
    crash_grace_ms: float = 1000.0   # explosion time before failure is final
    cross_tolerance: float = 0.25    # max fractional gap for a color-mixing cross
    trail_length: int = 50
    max_duration_ms: float = 120000.0


@dataclass
class SolutionConfig:
    """Replayable clicks per outlet, applied after ``start_path``."""
    policy: str = "assisted"  # "assisted" or "manual"
    paths: Dict[str, List[Cell]] = field(default_factory=dict)


@dataclass
class RunConfig:
    level: LevelConfig
    simulation: SimulationConfig
    solution: Optional[SolutionConfig] = None
    undo_count: int = 0

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = False
    quiet: bool = False
    out_dir: Path = field(default_factory=lambda: Path("./output"))


def _parse_cell(raw: Any) -> Cell:
    """Accept ``[x, y]`` or ``{x: .., y: ..}``."""
    if isinstance(raw, dict):
        return (int(raw['x']), int(raw['y']))
    x, y = raw
    return (int(x), int(y))


def _parse_outlets(outlets_raw: List[Dict]) -> List[OutletSpec]:
    """Parse outlet specifications from raw YAML data."""
    outlets = []
    for o in outlets_raw:
        count = int(o.get('count', 1))
        if count < 1:
            raise ValueError(f"Outlet {o['id']} must release at least one cycle")
        outlets.append(OutletSpec(
            id=str(o['id']),
            x=int(o['x']),
            y=int(o['y']),
            color=Color.parse(o['color']),
            count=count,
            delay=float(o.get('delay', 0)),
            start_delay=float(o.get('startDelay', o.get('start_delay', 0)))
        ))
    return outlets


def _parse_stations(stations_raw: List[Dict]) -> List[StationSpec]:
    """Parse station specifications from raw YAML data."""
    stations = []
    for s in stations_raw:
        required = int(s.get('required', 1))
        if required < 1:
            raise ValueError(f"Station {s['id']} must require at least one arrival")
        stations.append(StationSpec(
            id=str(s['id']),
            x=int(s['x']),
            y=int(s['y']),
            color=Color.parse(s['color']),
            required=required
        ))
    return stations


def _parse_splitters(splitters_raw: List[Dict]) -> List[SplitterSpec]:
    return [
        SplitterSpec(
            x=int(s['x']),
            y=int(s['y']),
            directions=tuple(Direction.parse(d) for d in s.get('directions', []))
        )
        for s in splitters_raw
    ]


def _parse_color_changers(changers_raw: List[Dict]) -> List[ColorChangerSpec]:
    return [
        ColorChangerSpec(
            x=int(c['x']),
            y=int(c['y']),
            to_color=Color.parse(c.get('toColor', c.get('to_color')))
        )
        for c in changers_raw
    ]


def _check_level(level: LevelConfig) -> None:
    """Reject definitions the engine cannot represent."""
    size = level.size

    def check_bounds(kind: str, x: int, y: int) -> None:
        if not (0 <= x < size and 0 <= y < size):
            raise ValueError(f"{kind} at ({x}, {y}) is outside the {size}x{size} grid")

    for x, y in level.obstacles:
        check_bounds("Obstacle", x, y)
    for s in level.splitters:
        check_bounds("Splitter", s.x, s.y)
    for c in level.color_changers:
        check_bounds("Color changer", c.x, c.y)

    blocked = set(level.obstacles)
    for kind, entities in (("Outlet", level.outlets), ("Station", level.stations)):
        seen = set()
        for e in entities:
            check_bounds(f"{kind} {e.id}", e.x, e.y)
            if e.id in seen:
                raise ValueError(f"Duplicate {kind.lower()} id: {e.id}")
            seen.add(e.id)
            if e.cell in blocked:
                raise ValueError(f"{kind} {e.id} sits on an obstacle")

    if not level.outlets:
        raise ValueError("Level defines no outlets")


def parse_level(raw: Dict[str, Any]) -> LevelConfig:
    """Build and validate a level definition from its raw mapping."""
    size = int(raw.get('gridSize', raw.get('size', 0)))
    if size <= 0:
        raise ValueError(f"Grid size must be positive, got {size}")

    outlets = _parse_outlets(raw.get('outlets', []))
    level = LevelConfig(
        size=size,
        outlets=outlets,
        stations=_parse_stations(raw.get('stations', [])),
        obstacles=[_parse_cell(c) for c in raw.get('obstacles', [])],
        splitters=_parse_splitters(raw.get('splitters', [])),
        color_changers=_parse_color_changers(
            raw.get('colorChangers', raw.get('color_changers', []))),
        # Default par is the straight-across estimate: one row per outlet
        par=int(raw.get('par', len(outlets) * (size - 1))),
        undo_bonus=int(raw.get('undoBonus', raw.get('undo_bonus', 0))),
        name=str(raw.get('name', '')),
        description=str(raw.get('description', ''))
    )
    _check_level(level)
    return level


def _positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_simulation(sim_raw: Dict[str, Any]) -> SimulationConfig:
    defaults = SimulationConfig()
    return SimulationConfig(
        cells_per_ms=_positive('cells_per_ms', float(
            sim_raw.get('cells_per_ms', defaults.cells_per_ms))),
        speed_multiplier=_positive('speed', float(
            sim_raw.get('speed', defaults.speed_multiplier))),
        tick_ms=_positive('tick_ms', float(sim_raw.get('tick_ms', defaults.tick_ms))),
        crash_grace_ms=float(sim_raw.get('crash_grace_ms', defaults.crash_grace_ms)),
        cross_tolerance=float(sim_raw.get('cross_tolerance', defaults.cross_tolerance)),
        trail_length=int(sim_raw.get('trail_length', defaults.trail_length)),
        max_duration_ms=_positive('max_duration_ms', float(
            sim_raw.get('max_duration_ms', defaults.max_duration_ms)))
    )


def _parse_solution(solution_raw: Dict[str, Any]) -> SolutionConfig:
    policy = str(solution_raw.get('policy', 'assisted')).lower()
    if policy not in ('assisted', 'manual'):
        raise ValueError(f"Unknown extension policy: {policy}")
    paths = {
        str(outlet_id): [_parse_cell(c) for c in waypoints]
        for outlet_id, waypoints in solution_raw.get('paths', {}).items()
    }
    return SolutionConfig(policy=policy, paths=paths)


def load_level(level_path: Path) -> LevelConfig:
    """Load a bare level definition file."""
    with open(level_path) as f:
        raw = yaml.safe_load(f)
    return parse_level(raw)


def load_config(config_path: Path) -> RunConfig:
    """Load and validate YAML run configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict) or 'level' not in raw:
        raise ValueError("Run configuration needs a 'level' section")

    level = parse_level(raw['level'])
    simulation = _parse_simulation(raw.get('simulation') or {})

    solution = None
    if raw.get('solution'):
        solution = _parse_solution(raw['solution'])
        unknown = [oid for oid in solution.paths if level.outlet(oid) is None]
        if unknown:
            raise ValueError(f"Solution references unknown outlets: {unknown}")

    # Parse export config (optional)
    export_raw = raw.get('export') or {}

    return RunConfig(
        level=level,
        simulation=simulation,
        solution=solution,
        undo_count=int(raw.get('undo_count', 0)),
        csv_enabled=export_raw.get('csv', False),
        out_dir=Path(export_raw.get('out_dir', './output'))
    )
