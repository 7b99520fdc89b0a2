"""Total work time of a project with uncertain task durations.

Each task starts when all of its predecessors have finished; durations are
uniform on per-task ranges. The total work time is the finish time of the
last task, i.e. the length of the critical path for that draw.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np

from mcest.core.sources import UniformSource


DEFAULT_DURATION_BOUNDS: Tuple[Tuple[float, float], ...] = (
    (40, 56),  # T1
    (24, 32),  # T2
    (20, 40),  # T3
    (16, 48),  # T4
    (10, 30),  # T5
    (15, 30),  # T6
    (20, 25),  # T7
    (30, 50),  # T8
    (40, 60),  # T9
    (8, 16),   # T10
)

# 0-indexed task -> tasks that must finish first
DEFAULT_PREDECESSORS: Dict[int, Tuple[int, ...]] = {
    0: (),
    1: (0,),
    2: (0,),
    3: (1, 2),
    4: (1, 2),
    5: (2,),
    6: (2,),
    7: (3, 4, 5, 6),
    8: (4,),
    9: (6, 7, 8),
}


@dataclass(frozen=True)
class TaskNetwork:
    """Precedence network with uniform task durations.

    Attributes:
        bounds: (low, high) duration range per task.
        predecessors: Task index -> indices of its predecessors. Tasks must
            be listed so that predecessors have lower indices.
    """
    bounds: Tuple[Tuple[float, float], ...] = DEFAULT_DURATION_BOUNDS
    predecessors: Dict[int, Tuple[int, ...]] = field(
        default_factory=lambda: dict(DEFAULT_PREDECESSORS)
    )

    def __post_init__(self):
        if len(self.predecessors) != len(self.bounds):
            raise ValueError(
                f"{len(self.bounds)} tasks but {len(self.predecessors)} predecessor entries"
            )
        for task, preds in self.predecessors.items():
            if any(p >= task for p in preds):
                raise ValueError(f"task {task} has a predecessor that is not listed before it")

    @property
    def n_tasks(self) -> int:
        return len(self.bounds)

    def sample_durations(self, source: UniformSource) -> np.ndarray:
        """One duration per task."""
        low = np.array([lo for lo, _ in self.bounds], dtype=np.float64)
        high = np.array([hi for _, hi in self.bounds], dtype=np.float64)
        return low + np.asarray(source.random(self.n_tasks)) * (high - low)

    def finish_times(self, durations) -> np.ndarray:
        finish = np.zeros(self.n_tasks)
        for task in range(self.n_tasks):
            preds = self.predecessors[task]
            start = max((finish[p] for p in preds), default=0.0)
            finish[task] = start + durations[task]
        return finish

    def total_work_time(self, durations) -> float:
        """Finish time of the last task."""
        return float(self.finish_times(durations)[-1])
