"""
Loss-history runs kept in memory for the loss chart.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple


MAX_RUN_POINTS = 10000


@dataclass
class Run:
    """One independent record of (step, loss) samples."""
    id: str
    name: str
    points: List[Tuple[int, float]] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)
    max_points: int = MAX_RUN_POINTS

    def record(self, step: int, loss: float):
        self.points.append((step, float(loss)))
        # Oldest samples go first once the cap is reached
        if len(self.points) > self.max_points:
            del self.points[0:len(self.points) - self.max_points]

    @property
    def last(self) -> Optional[Tuple[int, float]]:
        return self.points[-1] if self.points else None

    @property
    def steps(self) -> List[int]:
        return [s for s, _ in self.points]

    @property
    def losses(self) -> List[float]:
        return [l for _, l in self.points]

    def summary(self) -> str:
        if self.last is None:
            return f"{self.name} (empty)"
        step, loss = self.last
        return f"{self.name} ({step} steps, {loss:.4f})"


class RunHistory:
    """Runs ordered newest first, with exactly one active run when non-empty."""

    def __init__(self, max_points: int = MAX_RUN_POINTS):
        self.runs: List[Run] = []
        self.active_id: Optional[str] = None
        self.max_points = max_points
        self._counter = 1

    def __len__(self) -> int:
        return len(self.runs)

    def __iter__(self) -> Iterator[Run]:
        return iter(self.runs)

    def new_run(self) -> Run:
        run = Run(
            id=f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}",
            name=f"Run {self._counter}",
            max_points=self.max_points,
        )
        self._counter += 1
        self.runs.insert(0, run)
        self.active_id = run.id
        return run

    def get(self, run_id: str) -> Optional[Run]:
        for run in self.runs:
            if run.id == run_id:
                return run
        return None

    @property
    def active(self) -> Optional[Run]:
        return self.get(self.active_id) if self.active_id else None

    def select(self, run_id: str) -> Run:
        run = self.get(run_id)
        if run is None:
            raise KeyError(f"No run with id {run_id!r}")
        self.active_id = run_id
        return run

    def delete(self, run_id: str):
        self.runs = [r for r in self.runs if r.id != run_id]
        if self.active_id == run_id:
            self.active_id = self.runs[0].id if self.runs else None
