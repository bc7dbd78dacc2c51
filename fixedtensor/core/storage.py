# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Element Storage - exclusively owned element buffer.

An ElementStorage pairs a buffer with the allocator it came from and hands
it back exactly once. After release every access raises
TensorReleasedError instead of touching memory the allocator may already
have given to someone else.
"""

from typing import Optional

import numpy as np

from ..errors import AllocationError, TensorReleasedError


class ElementStorage:
    """
    Owned, contiguous buffer of exactly `count` elements.

    Example:
        with ElementStorage.allocate(allocator, 9, np.float32) as storage:
            storage.buffer[0] = 1.0
    """

    __slots__ = ("_allocator", "_buffer", "count", "dtype")

    def __init__(self, allocator, buffer: np.ndarray, count: int):
        self._allocator = allocator
        self._buffer: Optional[np.ndarray] = buffer
        self.count = count
        self.dtype = buffer.dtype

    @classmethod
    def allocate(cls, allocator, count: int, dtype) -> "ElementStorage":
        """
        Obtain a buffer of `count` elements from `allocator`.

        Raises:
            AllocationError: Propagated from the allocator, or raised when the
                allocator returns a buffer of the wrong size or type
        """
        dtype = np.dtype(dtype)
        buffer = allocator.allocate(count, dtype)

        if (
            not isinstance(buffer, np.ndarray)
            or buffer.ndim != 1
            or buffer.size != count
            or buffer.dtype != dtype
        ):
            if isinstance(buffer, np.ndarray):
                allocator.free(buffer)
            raise AllocationError(
                f"allocator returned an unusable buffer for {count} x {dtype}",
                requested_bytes=count * dtype.itemsize,
            )
        return cls(allocator, buffer, count)

    @property
    def released(self) -> bool:
        return self._buffer is None

    @property
    def buffer(self) -> np.ndarray:
        """The live buffer."""
        if self._buffer is None:
            raise TensorReleasedError("element storage has been released")
        return self._buffer

    def release(self) -> None:
        """Hand the buffer back to its allocator. Allowed exactly once."""
        if self._buffer is None:
            raise TensorReleasedError("element storage released twice")
        buffer, self._buffer = self._buffer, None
        self._allocator.free(buffer)

    def __enter__(self) -> "ElementStorage":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._buffer is not None:
            self.release()

    def __len__(self) -> int:
        return self.count

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"ElementStorage(count={self.count}, dtype={self.dtype}, {state})"
