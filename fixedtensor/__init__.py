# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
fixedtensor: Dense Fixed-Shape Tensors

Contiguous owned element buffers with row-major coordinate <-> offset
conversion. Buffers come from an injected allocator and are handed back
exactly once.

Example:
    import fixedtensor

    Matrix = fixedtensor.tensor_type(fixedtensor.DataType.Float32, (3, 3))
    allocator = fixedtensor.HeapAllocator()

    with Matrix.zeros(allocator) as m:
        m.set((2, 1), 4.0)
        m.get((2, 1))
"""

__version__ = "0.1.0"
__author__ = "Wahyu Ardiansyah"

from .core import (
    DataType,
    Shape,
    dtype_size,
    dtype_to_string,
    Index,
    IndexIterator,
    serialize_index,
    deserialize_index,
    ElementStorage,
    Tensor,
    tensor_type,
)

from .runtime import Allocator, HeapAllocator, PoolAllocator

# Observability
from .observability import set_verbosity, Verbosity

# Errors
from .errors import (
    FixedTensorError,
    IndexOutOfBoundsError,
    AllocationError,
    TensorReleasedError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Core types
    "DataType",
    "Shape",
    "dtype_size",
    "dtype_to_string",
    "Index",
    "IndexIterator",
    "serialize_index",
    "deserialize_index",
    "ElementStorage",
    "Tensor",
    "tensor_type",
    # Allocators
    "Allocator",
    "HeapAllocator",
    "PoolAllocator",
    # Observability
    "set_verbosity",
    "Verbosity",
    # Errors
    "FixedTensorError",
    "IndexOutOfBoundsError",
    "AllocationError",
    "TensorReleasedError",
    "ValidationError",
]
