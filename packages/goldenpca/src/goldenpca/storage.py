"""
Flat batch storage.

Every per-entry quantity (sample matrices, covariance matrices, eigenvalues,
eigenvectors, iteration counts) lives in one contiguous row-major buffer
sized for the whole batch:

    offset = matrix_index * prod(entry_shape) + row * cols + col

All offset arithmetic goes through BatchBuffer. Nothing else computes
positions by hand.
"""

import numpy as np
from typing import Tuple


class BatchBuffer:
    """Fixed-size flat buffer holding `count` entries of `entry_shape`."""

    def __init__(self, count: int, entry_shape: Tuple[int, ...], dtype=np.float64):
        if count < 1:
            raise ValueError(f"Batch count must be >= 1, got {count}")
        if any(d < 1 for d in entry_shape):
            raise ValueError(f"Entry dimensions must be >= 1, got {entry_shape}")
        self.count = int(count)
        self.entry_shape = tuple(int(d) for d in entry_shape)
        self.entry_size = int(np.prod(self.entry_shape, dtype=np.int64))
        self.data = np.zeros(self.count * self.entry_size, dtype=dtype)

    @property
    def dtype(self):
        return self.data.dtype

    def offset(self, index: int, *coords: int) -> int:
        """Flat position of `coords` within entry `index` (bounds-checked)."""
        if not 0 <= index < self.count:
            raise IndexError(f"Entry {index} out of range [0, {self.count})")
        if len(coords) > len(self.entry_shape):
            raise IndexError(f"Too many coordinates for entry shape {self.entry_shape}")

        position = 0
        stride = self.entry_size
        for coord, dim in zip(coords, self.entry_shape):
            stride //= dim
            if not 0 <= coord < dim:
                raise IndexError(f"Coordinate {coord} out of range [0, {dim})")
            position += coord * stride
        return index * self.entry_size + position

    def entry(self, index: int) -> np.ndarray:
        """Writable view of one entry, shaped `entry_shape`."""
        start = self.offset(index)
        return self.data[start:start + self.entry_size].reshape(self.entry_shape)

    def store(self, index: int, values) -> None:
        """Copy `values` into entry `index`, cast to the buffer dtype."""
        values = np.asarray(values)
        if values.shape != self.entry_shape:
            raise ValueError(
                f"Entry {index}: expected shape {self.entry_shape}, got {values.shape}"
            )
        self.entry(index)[...] = values

    def get(self, index: int, *coords: int):
        return self.data[self.offset(index, *coords)]

    def view(self) -> np.ndarray:
        """Read-only `(count, *entry_shape)` view over the whole batch."""
        out = self.data.reshape((self.count,) + self.entry_shape).view()
        out.flags.writeable = False
        return out
