# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Index Codec - coordinate <-> linear offset conversion.

Offsets follow row-major (C) order: incrementing an offset by one advances
the last dimension fastest and carries into earlier dimensions, the same
layout numpy uses for C-contiguous arrays.

Example:
    shape = Shape((3, 3))
    serialize_index(shape, (1, 2))   # -> 5
    deserialize_index(shape, 5)      # -> (1, 2)
    list(IndexIterator(shape))       # -> [(0, 0), (0, 1), ..., (2, 2)]
"""

from numbers import Integral
from typing import Sequence

from ..errors import IndexOutOfBoundsError
from .types import Shape

Index = tuple[int, ...]


def strides(shape: Shape) -> Index:
    """Element strides per dimension for a row-major buffer."""
    result = [0] * shape.rank()
    stride = 1
    for dimension in range(shape.rank() - 1, -1, -1):
        result[dimension] = stride
        stride *= shape[dimension]
    return tuple(result)


def serialize_index(shape: Shape, index: Sequence[int]) -> int:
    """
    Convert a coordinate to its linear offset.

    Each component is checked against its dimension before that dimension
    contributes to the offset, so a failing call never produces a value.

    Args:
        shape: Shape the coordinate refers to
        index: One integer per dimension

    Returns:
        Offset in [0, shape.numel())

    Raises:
        IndexOutOfBoundsError: If the coordinate has the wrong rank or any
            component lies outside [0, shape[d])
    """
    rank = shape.rank()
    if len(index) != rank:
        raise IndexOutOfBoundsError(
            f"coordinate has {len(index)} components, shape has rank {rank}",
            index=tuple(index),
            shape=shape.dims,
        )

    serialized_index = 0
    stride = 1

    dimension = rank
    while dimension > 0:
        dimension -= 1
        component = index[dimension]
        if isinstance(component, bool) or not isinstance(component, Integral):
            raise IndexOutOfBoundsError(
                f"component {component!r} is not an integer",
                index=tuple(index),
                shape=shape.dims,
                dimension=dimension,
            )
        if component < 0 or component >= shape[dimension]:
            raise IndexOutOfBoundsError(
                f"component {component} outside dimension of length {shape[dimension]}",
                index=tuple(index),
                shape=shape.dims,
                dimension=dimension,
            )
        serialized_index += int(component) * stride
        stride *= shape[dimension]

    return serialized_index


def deserialize_index(shape: Shape, offset: int) -> Index:
    """
    Convert a linear offset back to its coordinate.

    Args:
        shape: Shape the offset refers to
        offset: Linear offset into a row-major buffer

    Returns:
        Coordinate tuple of length shape.rank()

    Raises:
        IndexOutOfBoundsError: If offset is negative, >= shape.numel(), or
            does not decompose exactly
    """
    if isinstance(offset, bool) or not isinstance(offset, Integral):
        raise IndexOutOfBoundsError(
            f"offset {offset!r} is not an integer", index=offset, shape=shape.dims
        )
    # Also covers zero-length dimensions: numel is 0 so nothing divides by 0
    if offset < 0 or offset >= shape.numel():
        raise IndexOutOfBoundsError(
            f"offset {offset} outside [0, {shape.numel()})",
            index=offset,
            shape=shape.dims,
        )

    deserialized_index = [0] * shape.rank()
    remaining = int(offset)

    dimension = shape.rank()
    while dimension > 0:
        dimension -= 1
        deserialized_index[dimension] = remaining % shape[dimension]
        remaining //= shape[dimension]

    if remaining != 0:
        raise IndexOutOfBoundsError(
            f"offset {offset} leaves remainder {remaining}",
            index=offset,
            shape=shape.dims,
        )

    return tuple(deserialized_index)


class IndexIterator:
    """
    Yields every valid coordinate of a shape in row-major order.

    The only state is a linear cursor, so instances are cheap, independent
    of any tensor, and never share state with each other. Once the cursor
    reaches numel the iterator stays exhausted.
    """

    __slots__ = ("shape", "current")

    def __init__(self, shape: Shape, current: int = 0):
        self.shape = shape
        self.current = current

    def __iter__(self) -> "IndexIterator":
        return self

    def __next__(self) -> Index:
        try:
            index = deserialize_index(self.shape, self.current)
        except IndexOutOfBoundsError:
            raise StopIteration from None
        self.current += 1
        return index

    def __length_hint__(self) -> int:
        return max(0, self.shape.numel() - self.current)

    def __repr__(self) -> str:
        return f"IndexIterator(shape={self.shape}, current={self.current})"
