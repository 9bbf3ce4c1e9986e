"""Summary report generation for Light Cycle runs."""

from collections import Counter
from typing import Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..config import LevelConfig
    from ..model.engine import CompletionEvent
    from ..model.scoring import ScoreCard
    from ..model.state import SimulationState


class Reporter:
    """Tallies run events per tick and formats the final text report."""

    def __init__(self, config_path: str, level: "LevelConfig"):
        self.config_path = config_path
        self.level = level
        self.event_counts: Counter = Counter()
        self.peak_active = 0
        self.ticks = 0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per tick."""
        self.ticks += 1
        for event in state.events:
            self.event_counts[event.kind.value] += 1
        active = len(state.agents_in("active"))
        if active > self.peak_active:
            self.peak_active = active

    def generate_summary(self, final_state: "SimulationState",
                         completion: Optional["CompletionEvent"],
                         score: Optional["ScoreCard"],
                         output_dir: Path,
                         csv_enabled: bool) -> str:
        """Returns formatted text report."""
        title = self.level.name or self.config_path
        outcome = completion.outcome.value.upper() if completion else "UNFINISHED"

        lines = [
            "",
            "=" * 80,
            "                      LIGHT CYCLE RUN REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Level:         {title} ({self.level.size}x{self.level.size})",
            "",
            "RUN",
            "-" * 40,
            f"Outcome:               {outcome}",
            f"Ticks:                 {self.ticks}",
            f"Simulated Time:        {final_state.clock_ms:.0f} ms",
            f"Cycles:                {len(final_state.agents)} (peak active {self.peak_active})",
        ]
        if completion and completion.reasons:
            lines.append("Failure Reasons:       "
                         + ", ".join(r.value for r in completion.reasons))

        lines += ["", "STATIONS", "-" * 40]
        for station in self.level.stations:
            arrived = final_state.station_arrivals.get(station.id, 0)
            mark = 'X' if arrived >= station.required else ' '
            lines.append(f"[{mark}] {station.id:<8} {station.color.value:<8} "
                         f"{arrived} / {station.required}")

        lines += [
            "",
            "EVENTS",
            "-" * 40,
            f"Merges:  {self.event_counts['merge']}   "
            f"Crosses: {self.event_counts['cross']}   "
            f"Crashes: {self.event_counts['crash']}   "
            f"Color changes: {self.event_counts['color_change']}",
        ]

        if score is not None:
            lines += [
                "",
                "SCORE",
                "-" * 40,
                f"Total Path Length:     {score.total_path_length} (par {score.par})",
                f"Efficiency:            {score.efficiency_ratio:.2f} "
                f"({score.efficiency_points:.1f} / 70)",
                f"Undos:                 {score.undo_count} ({score.undo_points:.0f} / 30)",
                f"Score:                 {score.score:.1f}",
                f"Stars:                 {'*' * score.stars}{'.' * (3 - score.stars)}",
            ]

        lines += ["", "OUTPUT FILES", "-" * 40]
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'run_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
