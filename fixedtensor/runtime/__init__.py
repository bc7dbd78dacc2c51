# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
fixedtensor Runtime Module

Allocation capabilities that element storage draws its buffers from:
- Allocator: protocol every allocator satisfies
- HeapAllocator: one numpy allocation per request
- PoolAllocator: fixed byte pool with first-fit blocks and coalescing
"""

from .memory_manager import Allocator, HeapAllocator, MemoryBlock, PoolAllocator

__all__ = [
    "Allocator",
    "HeapAllocator",
    "MemoryBlock",
    "PoolAllocator",
]
