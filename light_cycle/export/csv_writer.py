"""CSV run log: one row per cycle per tick."""

import csv
from pathlib import Path
from typing import IO, Optional, TYPE_CHECKING

from ..model.state import CSV_FIELDS

if TYPE_CHECKING:
    from ..model.state import SimulationState


class RunLogWriter:
    """
    Streams ``SimulationState.to_csv_rows`` to disk as the run advances.

    The file and its header are created on the first write, so a run that
    never ticks leaves no empty log behind.

        step,clock_ms,agent_id,outlet_id,x,y,color,state
        1,16.0,0,o1,0,2,cyan,active
    """

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.rows_written = 0
        self._file: Optional[IO[str]] = None
        self._writer: Optional[csv.DictWriter] = None

    def write(self, state: "SimulationState") -> None:
        if self._writer is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.output_path, 'w', newline='')
            self._writer = csv.DictWriter(self._file, fieldnames=CSV_FIELDS)
            self._writer.writeheader()
        rows = state.to_csv_rows()
        self._writer.writerows(rows)
        self.rows_written += len(rows)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._writer = None

    def __enter__(self) -> "RunLogWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
