from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


class SampleRingBuffer:
    """
    Fixed-size ring buffer of float audio samples.
    Overwrites the oldest samples when full; starts zero-filled so a
    snapshot is always ``capacity`` samples long.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._data = np.zeros(self._capacity, dtype=np.float64)
        self._write = 0
        self._total = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_written(self) -> int:
        """Number of samples appended since construction or :meth:`clear`."""
        return self._total

    def extend(self, block: ArrayLike) -> None:
        values = np.asarray(block, dtype=np.float64).reshape(-1)
        n = values.size
        if n == 0:
            return
        if n >= self._capacity:
            # Only the newest ``capacity`` samples survive.
            self._data[:] = values[-self._capacity :]
            self._write = 0
        else:
            end = self._write + n
            if end <= self._capacity:
                self._data[self._write : end] = values
            else:
                split = self._capacity - self._write
                self._data[self._write :] = values[:split]
                self._data[: n - split] = values[split:]
            self._write = end % self._capacity
        self._total += n

    def snapshot(self) -> np.ndarray:
        """Return a chronological copy (oldest first) of the buffer contents."""
        return np.concatenate((self._data[self._write :], self._data[: self._write]))

    def clear(self) -> None:
        self._data.fill(0.0)
        self._write = 0
        self._total = 0

    def __len__(self) -> int:  # pragma: no cover - trivial
        return min(self._total, self._capacity)
