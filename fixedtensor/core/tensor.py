# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Fixed-shape Tensor (Pure Python Implementation)

A tensor type is specialized once per (element type, shape) pair. The
specialization fixes rank and number of elements as class attributes and
every instance owns exactly one row-major element buffer.

Example:
    from fixedtensor import HeapAllocator, tensor_type

    Matrix = tensor_type("float32", (3, 3))
    allocator = HeapAllocator()

    with Matrix.from_function(allocator, lambda i: float(i[0] == i[1])) as eye:
        eye.get((1, 1))       # -> 1.0
        eye.set((0, 2), 5.0)
"""

import logging
from typing import Callable, ClassVar, Optional, Sequence

import numpy as np

from ..errors import TensorReleasedError
from .index_codec import (
    Index,
    IndexIterator,
    deserialize_index,
    serialize_index,
    strides,
)
from .storage import ElementStorage
from .types import ElementTypeLike, Shape, to_numpy_dtype

logger = logging.getLogger("fixedtensor.core.tensor")

_TENSOR_TYPES: dict[tuple, type] = {}


def tensor_type(
    dtype: ElementTypeLike,
    shape: Sequence[int],
    name: Optional[str] = None,
) -> type["Tensor"]:
    """
    Build (or fetch) the Tensor specialization for an element type and shape.

    Args:
        dtype: DataType member or anything numpy.dtype() accepts
        shape: Dimension lengths; () gives a scalar tensor
        name: Optional class name

    Returns:
        A Tensor subclass with dtype, shape, rank and number_of_elements fixed

    Raises:
        ValidationError: If the element type or shape is illegal
    """
    resolved_dtype = to_numpy_dtype(dtype)
    resolved_shape = shape if isinstance(shape, Shape) else Shape(shape)

    key = (resolved_dtype, resolved_shape.dims, name)
    cls = _TENSOR_TYPES.get(key)
    if cls is not None:
        return cls

    if name is None:
        dims = "x".join(str(d) for d in resolved_shape) or "scalar"
        name = f"Tensor_{resolved_dtype.name}_{dims}"

    cls = type(
        name,
        (Tensor,),
        {
            "__slots__": (),
            "__module__": __name__,
            "dtype": resolved_dtype,
            "shape": resolved_shape,
            "rank": resolved_shape.rank(),
            "number_of_elements": resolved_shape.numel(),
            "strides": strides(resolved_shape),
        },
    )
    _TENSOR_TYPES[key] = cls
    logger.debug(
        "Created tensor type %s (rank=%d, elements=%d)",
        name,
        cls.rank,
        cls.number_of_elements,
    )
    return cls


class Tensor:
    """
    Dense tensor with a fixed element type and shape.

    Not instantiated directly: build a specialization with `tensor_type`
    (or `Tensor.of`) and construct values with `from_function` or `zeros`.
    Each value exclusively owns its buffer until `release()` is called or a
    `with` block around it exits.
    """

    __slots__ = ("_storage",)

    dtype: ClassVar[Optional[np.dtype]] = None
    shape: ClassVar[Optional[Shape]] = None
    rank: ClassVar[int] = 0
    number_of_elements: ClassVar[int] = 0
    strides: ClassVar[Index] = ()

    def __init__(self, *args, **kwargs):
        raise TypeError(
            f"{type(self).__name__} values are built with from_function() or zeros()"
        )

    of = staticmethod(tensor_type)

    @classmethod
    def _specialized(cls) -> Shape:
        if cls.shape is None:
            raise TypeError(
                "Tensor is generic; specialize it with tensor_type(dtype, shape)"
            )
        return cls.shape

    @classmethod
    def _from_storage(cls, storage: ElementStorage) -> "Tensor":
        tensor = object.__new__(cls)
        tensor._storage = storage
        return tensor

    # ------------------------------------------------------------------
    # Index codec

    @classmethod
    def indexes(cls) -> IndexIterator:
        """Fresh iterator over every coordinate in row-major order."""
        return IndexIterator(cls._specialized())

    @classmethod
    def serialize_index(cls, index: Sequence[int]) -> int:
        """Linear offset of a coordinate. Raises IndexOutOfBoundsError."""
        return serialize_index(cls._specialized(), index)

    @classmethod
    def deserialize_index(cls, offset: int) -> Index:
        """Coordinate of a linear offset. Raises IndexOutOfBoundsError."""
        return deserialize_index(cls._specialized(), offset)

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def from_function(
        cls, allocator, element_fn: Callable[[Index], object]
    ) -> "Tensor":
        """
        Allocate a tensor and fill it by calling `element_fn` per coordinate.

        Coordinates are visited in ascending offset order and every slot is
        written exactly once. If `element_fn` raises, the partially filled
        buffer goes back to the allocator and the exception propagates
        unchanged.

        Args:
            allocator: Allocation capability (see fixedtensor.runtime.Allocator)
            element_fn: Called with each coordinate tuple, returns its element

        Returns:
            Fully populated tensor

        Raises:
            AllocationError: If the allocator cannot provide the buffer
        """
        shape = cls._specialized()
        storage = ElementStorage.allocate(allocator, shape.numel(), cls.dtype)
        try:
            buffer = storage.buffer
            for index in IndexIterator(shape):
                buffer[serialize_index(shape, index)] = element_fn(index)
        except BaseException:
            logger.debug("Construction of %s failed, releasing buffer", cls.__name__)
            storage.release()
            raise
        return cls._from_storage(storage)

    @classmethod
    def zeros(cls, allocator) -> "Tensor":
        """Allocate a tensor with every element set to the dtype's zero."""
        zero = cls.dtype.type(0) if cls.dtype is not None else 0
        return cls.from_function(allocator, lambda index: zero)

    # ------------------------------------------------------------------
    # Element access

    def _buffer(self) -> np.ndarray:
        try:
            return self._storage.buffer
        except TensorReleasedError:
            raise TensorReleasedError(
                "tensor has been released", tensor_type=type(self).__name__
            ) from None

    def get(self, index: Sequence[int]):
        """Read the element at a coordinate. Raises IndexOutOfBoundsError."""
        buffer = self._buffer()
        return buffer[serialize_index(self.shape, index)]

    def set(self, index: Sequence[int], value) -> None:
        """Write the element at a coordinate. Nothing changes on failure."""
        buffer = self._buffer()
        buffer[serialize_index(self.shape, index)] = value

    @property
    def elements(self) -> np.ndarray:
        """Read-only view of the flat row-major buffer."""
        view = self._buffer().view()
        view.flags.writeable = False
        return view

    def to_numpy(self) -> np.ndarray:
        """Copy of the elements shaped like the tensor."""
        return self._buffer().reshape(self.shape.dims).copy()

    # ------------------------------------------------------------------
    # Ownership

    @property
    def released(self) -> bool:
        return self._storage.released

    def release(self) -> None:
        """Return the buffer to its allocator. The tensor is unusable after."""
        try:
            self._storage.release()
        except TensorReleasedError:
            raise TensorReleasedError(
                "tensor released twice", tensor_type=type(self).__name__
            ) from None

    def __enter__(self) -> "Tensor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self.released:
            self.release()

    def __len__(self) -> int:
        return self.number_of_elements

    def __repr__(self) -> str:
        if self._storage.released:
            return f"{type(self).__name__}(<released>)"
        return f"{type(self).__name__}(shape={list(self.shape)}, dtype={self.dtype})"
