"""Uniform random sources handed to samplers.

A uniform source is anything with a ``random(size=None)`` method returning
floats in [0, 1). ``numpy.random.Generator`` is the default; ``UniformTable``
replays a finite list of pre-generated numbers read from a text file.

Sources are never shared between workers: each worker asks a source factory
for its own stream by worker index.
"""

from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, Union

import numpy as np

from mcest.core.errors import SampleSourceError, SampleSourceExhausted


WORKER_SEED_STRIDE = 10000


class UniformSource(Protocol):
    """Capability consumed by samplers: next uniform value(s) in [0, 1)."""

    def random(self, size: Optional[int] = None): ...


SourceFactory = Callable[[int], UniformSource]


def worker_seed(base_seed: int, worker_index: int) -> int:
    """Deterministic seed for one worker's stream."""
    return base_seed + (worker_index + 1) * WORKER_SEED_STRIDE


class SeededStreams:
    """Source factory producing an independently seeded Generator per worker.

    Kept as a class rather than a closure so it can be sent to process
    workers.
    """

    def __init__(self, base_seed: int):
        self.base_seed = base_seed

    def __call__(self, worker_index: int) -> np.random.Generator:
        return np.random.default_rng(worker_seed(self.base_seed, worker_index))

    def __repr__(self) -> str:
        return f"SeededStreams(base_seed={self.base_seed})"


def seeded_streams(base_seed: int) -> SeededStreams:
    """Build the default per-worker source factory for a master seed."""
    return SeededStreams(base_seed)


def block_bounds(n: int, num_blocks: int) -> List[range]:
    """Contiguous index blocks ``floor(i*n/k) .. floor((i+1)*n/k)``.

    The blocks cover ``[0, n)`` exactly; their sizes differ by at most one.
    """
    return [
        range(i * n // num_blocks, (i + 1) * n // num_blocks)
        for i in range(num_blocks)
    ]


class UniformTable:
    """Finite, strictly ordered source of pre-generated uniform numbers.

    Attributes:
        values: The numbers in consumption order.
        position: Index of the next number to hand out.
        name: Label used in error messages (usually the file path).
    """

    def __init__(self, values: Union[Sequence[float], np.ndarray], name: str = "<table>"):
        arr = np.asarray(values, dtype=np.float64).ravel()
        if arr.size and (arr.min() < 0.0 or arr.max() > 1.0):
            raise SampleSourceError(f"{name}: values must lie in [0, 1]")
        self.values = arr
        self.position = 0
        self.name = name

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "UniformTable":
        """Read a whitespace-separated list of reals from a text file.

        Raises:
            SampleSourceError: If the file cannot be read or holds
                something other than numbers.
        """
        path = Path(path)
        try:
            text = path.read_text()
        except OSError as e:
            raise SampleSourceError(f"Could not open file: {path} ({e})") from e

        try:
            values = np.array(text.split(), dtype=np.float64)
        except ValueError as e:
            raise SampleSourceError(f"{path}: not a list of numbers ({e})") from e

        return cls(values, name=str(path))

    def __len__(self) -> int:
        return int(self.values.size)

    @property
    def remaining(self) -> int:
        """Numbers not yet consumed."""
        return len(self) - self.position

    def random(self, size: Optional[int] = None):
        """Return the next number, or the next ``size`` numbers as an array.

        Raises:
            SampleSourceExhausted: If fewer numbers remain than requested.
        """
        count = 1 if size is None else int(size)
        if count > self.remaining:
            raise SampleSourceExhausted(
                f"{self.name}: exhausted after {self.position} of {len(self)} numbers "
                f"({count} more requested)"
            )
        start = self.position
        self.position += count
        if size is None:
            return float(self.values[start])
        return self.values[start:self.position].copy()

    def split(self, num_parts: int, n_samples: Optional[int] = None,
              per_sample: int = 1) -> List["UniformTable"]:
        """Partition the unconsumed numbers into contiguous per-worker slices.

        With ``n_samples`` the slices follow the reducer's sample blocks:
        part ``i`` holds the numbers for samples ``block_bounds(n_samples,
        num_parts)[i]``, ``per_sample`` numbers each. Leftover numbers go to
        the last part. Without it the numbers are split evenly by count.
        """
        rest = self.values[self.position:]
        if n_samples is None:
            bounds = block_bounds(rest.size, num_parts)
        else:
            bounds = [
                range(block.start * per_sample, block.stop * per_sample)
                for block in block_bounds(n_samples, num_parts)
            ]
            last = bounds[-1]
            bounds[-1] = range(last.start, max(last.stop, rest.size))
        return [
            UniformTable(rest[block.start:block.stop], name=f"{self.name}[part {i}]")
            for i, block in enumerate(bounds)
        ]

    def streams(self, num_workers: int, n_samples: Optional[int] = None,
                per_sample: int = 1) -> "TableStreams":
        """Source factory handing worker ``i`` the ``i``-th slice."""
        return TableStreams(self.split(num_workers, n_samples, per_sample))


class TableStreams:
    """Source factory over pre-split table slices."""

    def __init__(self, parts: List[UniformTable]):
        self.parts = parts

    def __call__(self, worker_index: int) -> UniformTable:
        return self.parts[worker_index]
