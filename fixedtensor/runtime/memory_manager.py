# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Memory Manager - allocation capability for element buffers.

Tensors never allocate on their own: every buffer is requested from an
object implementing the Allocator protocol and handed back to the same
object on release.

This module provides:
1. The Allocator protocol
2. HeapAllocator: one numpy allocation per request
3. PoolAllocator: a fixed byte pool with first-fit blocks and coalescing
"""

import threading
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import numpy as np

from ..errors import AllocationError
from ..observability import get_logger

# Block sizes are rounded to this many bytes so every block offset stays
# aligned for the widest supported scalar.
_ALIGNMENT = 8


@runtime_checkable
class Allocator(Protocol):
    """Capability used by ElementStorage to obtain and return buffers."""

    def allocate(self, count: int, dtype: np.dtype) -> np.ndarray:
        """Return an uninitialized 1-D buffer of `count` elements."""
        ...

    def free(self, buffer: np.ndarray) -> None:
        """Return a buffer previously obtained from `allocate`."""
        ...


class HeapAllocator:
    """
    Allocates every buffer with numpy.empty.

    Keeps track of the buffers it handed out so that freeing a foreign or
    already freed buffer is reported instead of ignored.

    Example:
        allocator = HeapAllocator(max_bytes=1024 * 1024)
        buffer = allocator.allocate(9, np.dtype(np.float32))
        allocator.free(buffer)
    """

    def __init__(self, max_bytes: Optional[int] = None, device: str = "cpu"):
        """
        Initialize heap allocator.

        Args:
            max_bytes: Optional cap on simultaneously live bytes
            device: Device label reported in errors and summaries
        """
        self.max_bytes = max_bytes
        self.device = device
        self._live: dict[int, np.ndarray] = {}
        self._total_allocated = 0
        self._peak_allocated = 0
        self._lock = threading.Lock()

    def allocate(self, count: int, dtype: np.dtype) -> np.ndarray:
        dtype = np.dtype(dtype)
        size_bytes = count * dtype.itemsize

        with self._lock:
            if (
                self.max_bytes is not None
                and self._total_allocated + size_bytes > self.max_bytes
            ):
                available = self.max_bytes - self._total_allocated
                get_logger().error(
                    "Heap limit exceeded",
                    component="allocator",
                    num_elements=count,
                    size_bytes=size_bytes,
                )
                raise AllocationError(
                    f"cannot allocate {count} x {dtype} within heap limit",
                    requested_bytes=size_bytes,
                    available_bytes=available,
                    device=self.device,
                )

            try:
                buffer = np.empty(count, dtype=dtype)
            except (MemoryError, ValueError, OverflowError) as e:
                # numpy reports sizes past its addressable limit as ValueError
                raise AllocationError(
                    f"system allocation of {count} x {dtype} failed",
                    requested_bytes=size_bytes,
                    device=self.device,
                ) from e

            self._live[id(buffer)] = buffer
            self._total_allocated += size_bytes
            self._peak_allocated = max(self._peak_allocated, self._total_allocated)

        get_logger().debug(
            "Buffer allocated",
            component="allocator",
            operation="allocate",
            num_elements=count,
            size_bytes=size_bytes,
        )
        return buffer

    def free(self, buffer: np.ndarray) -> None:
        with self._lock:
            owned = self._live.get(id(buffer))
            if owned is None or owned is not buffer:
                get_logger().warning(
                    "Rejected free of unknown buffer",
                    component="allocator",
                    operation="free",
                    size_bytes=getattr(buffer, "nbytes", None),
                )
                raise AllocationError(
                    "buffer was not allocated by this allocator or is already freed",
                    device=self.device,
                )
            del self._live[id(buffer)]
            self._total_allocated -= buffer.nbytes

        get_logger().debug(
            "Buffer freed",
            component="allocator",
            operation="free",
            num_elements=buffer.size,
            size_bytes=buffer.nbytes,
        )

    @property
    def num_live_buffers(self) -> int:
        """Number of buffers allocated and not yet freed."""
        return len(self._live)

    @property
    def total_allocated_bytes(self) -> int:
        """Currently allocated bytes."""
        return self._total_allocated

    @property
    def peak_allocated_bytes(self) -> int:
        """Peak allocated bytes."""
        return self._peak_allocated


@dataclass
class MemoryBlock:
    """A block of the pool."""

    offset: int
    size_bytes: int
    is_free: bool = True


class PoolAllocator:
    """
    Carves element buffers out of one preallocated byte pool.

    Features:
    - First-fit block allocation
    - Coalescing of adjacent free blocks on free
    - Memory usage tracking

    Example:
        pool = PoolAllocator(pool_size_mb=1)
        t = Matrix.zeros(pool)
        t.release()
        pool.summary()
    """

    def __init__(self, pool_size_mb: float = 64, device: str = "cpu"):
        """
        Initialize pool allocator.

        Args:
            pool_size_mb: Pool size in MB
            device: Device label reported in errors and summaries
        """
        self.device = device
        self.pool_size_bytes = int(pool_size_mb * 1024 * 1024)

        self._pool = np.zeros(self.pool_size_bytes, dtype=np.uint8)

        # Blocks keyed by offset; together they always tile the whole pool
        self._blocks: dict[int, MemoryBlock] = {}
        # id(buffer) -> (buffer, block offset)
        self._owners: dict[int, tuple[np.ndarray, int]] = {}

        self._total_allocated = 0
        self._peak_allocated = 0
        self._lock = threading.Lock()

        self._reset_blocks()

    def _reset_blocks(self) -> None:
        self._blocks.clear()
        self._owners.clear()
        self._total_allocated = 0
        if self.pool_size_bytes > 0:
            self._blocks[0] = MemoryBlock(offset=0, size_bytes=self.pool_size_bytes)

    @staticmethod
    def _block_size(size_bytes: int) -> int:
        rounded = -(-size_bytes // _ALIGNMENT) * _ALIGNMENT
        return max(_ALIGNMENT, rounded)

    def _largest_free_block(self) -> int:
        return max(
            (b.size_bytes for b in self._blocks.values() if b.is_free), default=0
        )

    def allocate(self, count: int, dtype: np.dtype) -> np.ndarray:
        dtype = np.dtype(dtype)
        size_bytes = count * dtype.itemsize
        needed = self._block_size(size_bytes)

        with self._lock:
            chosen = None
            for offset in sorted(self._blocks):
                block = self._blocks[offset]
                if block.is_free and block.size_bytes >= needed:
                    chosen = block
                    break

            if chosen is None:
                available = self._largest_free_block()
                get_logger().error(
                    "Pool exhausted",
                    component="allocator",
                    num_elements=count,
                    size_bytes=size_bytes,
                    available_bytes=available,
                )
                raise AllocationError(
                    f"no free block of {needed} bytes for {count} x {dtype}",
                    requested_bytes=needed,
                    available_bytes=available,
                    device=self.device,
                )

            if chosen.size_bytes > needed:
                remainder = MemoryBlock(
                    offset=chosen.offset + needed,
                    size_bytes=chosen.size_bytes - needed,
                )
                self._blocks[remainder.offset] = remainder
                chosen.size_bytes = needed
            chosen.is_free = False

            raw = self._pool[chosen.offset : chosen.offset + size_bytes]
            buffer = raw.view(dtype)
            self._owners[id(buffer)] = (buffer, chosen.offset)

            self._total_allocated += chosen.size_bytes
            self._peak_allocated = max(self._peak_allocated, self._total_allocated)

        get_logger().debug(
            "Block allocated",
            component="allocator",
            operation="allocate",
            num_elements=count,
            size_bytes=needed,
            offset=chosen.offset,
        )
        return buffer

    def _coalesce_adjacent_blocks(self) -> int:
        """
        Merge adjacent free blocks to reduce fragmentation.

        Returns:
            Number of blocks that were merged.
        """
        if len(self._blocks) < 2:
            return 0

        offsets = sorted(self._blocks)
        merged_count = 0
        i = 0

        while i < len(offsets) - 1:
            curr_block = self._blocks[offsets[i]]
            next_block = self._blocks[offsets[i + 1]]

            is_adjacent = curr_block.offset + curr_block.size_bytes == next_block.offset

            if curr_block.is_free and next_block.is_free and is_adjacent:
                curr_block.size_bytes += next_block.size_bytes
                del self._blocks[next_block.offset]
                offsets.pop(i + 1)
                merged_count += 1
            else:
                i += 1

        return merged_count

    def free(self, buffer: np.ndarray) -> None:
        """
        Return a buffer to the pool with automatic coalescing.

        Raises:
            AllocationError: If the buffer is not a live allocation of this pool
        """
        with self._lock:
            owner = self._owners.get(id(buffer))
            if owner is None or owner[0] is not buffer:
                get_logger().warning(
                    "Rejected free of unknown buffer",
                    component="allocator",
                    operation="free",
                    size_bytes=getattr(buffer, "nbytes", None),
                )
                raise AllocationError(
                    "buffer was not allocated by this pool or is already freed",
                    device=self.device,
                )
            del self._owners[id(buffer)]

            block = self._blocks[owner[1]]
            block.is_free = True
            self._total_allocated -= block.size_bytes
            size_bytes = block.size_bytes

            merged = self._coalesce_adjacent_blocks()

        get_logger().debug(
            "Block freed",
            component="allocator",
            operation="free",
            size_bytes=size_bytes,
            merged_blocks=merged,
        )

    def clear(self) -> None:
        """
        Return the pool to a single free block.

        Raises:
            AllocationError: If buffers are still live, since handing their
                bytes out again would alias them
        """
        with self._lock:
            live = len(self._owners)
            if live:
                get_logger().warning(
                    "Pool clear refused",
                    component="allocator",
                    operation="clear",
                    live_buffers=live,
                )
                raise AllocationError(
                    f"cannot clear pool while {live} buffer(s) are still allocated",
                    requested_bytes=self._total_allocated,
                    device=self.device,
                )
            self._reset_blocks()

        get_logger().info(
            "Pool cleared",
            component="allocator",
            operation="clear",
            size_bytes=self.pool_size_bytes,
        )

    @property
    def num_live_buffers(self) -> int:
        """Number of buffers allocated and not yet freed."""
        return len(self._owners)

    @property
    def num_free_blocks(self) -> int:
        """Number of free blocks in the pool."""
        return sum(1 for block in self._blocks.values() if block.is_free)

    @property
    def total_allocated_mb(self) -> float:
        """Total currently allocated memory in MB."""
        return self._total_allocated / (1024 * 1024)

    @property
    def peak_allocated_mb(self) -> float:
        """Peak allocated memory in MB."""
        return self._peak_allocated / (1024 * 1024)

    def summary(self) -> dict:
        """Get pool allocator summary."""
        return {
            "device": self.device,
            "pool_size_mb": self.pool_size_bytes / (1024 * 1024),
            "num_allocations": len(self._owners),
            "total_allocated_mb": self.total_allocated_mb,
            "peak_allocated_mb": self.peak_allocated_mb,
            "blocks": {
                offset: {
                    "size_bytes": block.size_bytes,
                    "is_free": block.is_free,
                }
                for offset, block in sorted(self._blocks.items())
            },
        }
