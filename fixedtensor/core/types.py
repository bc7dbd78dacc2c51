# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
fixedtensor Core Types

Shape metadata and element types shared by every tensor specialization.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from numbers import Integral
from typing import Union

import numpy as np

from ..errors import ValidationError, format_invalid_shape
from .array_like import product


class DataType(Enum):
    """Supported element types for tensors."""

    Float32 = auto()
    Float16 = auto()
    Float64 = auto()
    Int8 = auto()
    Int16 = auto()
    Int32 = auto()
    Int64 = auto()
    UInt8 = auto()
    Bool = auto()


_NUMPY_DTYPES = {
    DataType.Float32: np.float32,
    DataType.Float16: np.float16,
    DataType.Float64: np.float64,
    DataType.Int8: np.int8,
    DataType.Int16: np.int16,
    DataType.Int32: np.int32,
    DataType.Int64: np.int64,
    DataType.UInt8: np.uint8,
    DataType.Bool: np.bool_,
}


def dtype_size(dtype: DataType) -> int:
    """Get the size in bytes for a data type."""
    sizes = {
        DataType.Float32: 4,
        DataType.Float16: 2,
        DataType.Float64: 8,
        DataType.Int8: 1,
        DataType.Int16: 2,
        DataType.Int32: 4,
        DataType.Int64: 8,
        DataType.UInt8: 1,
        DataType.Bool: 1,
    }
    return sizes.get(dtype, 0)


def dtype_to_string(dtype: DataType) -> str:
    """Get string representation of data type."""
    return dtype.name.lower()


ElementTypeLike = Union[DataType, np.dtype, type, str]


def to_numpy_dtype(dtype: ElementTypeLike) -> np.dtype:
    """
    Resolve an element type to a numpy dtype.

    Args:
        dtype: A DataType member or anything numpy.dtype() accepts

    Returns:
        The matching numpy dtype

    Raises:
        ValidationError: If the type is unknown or not a fixed-size scalar
    """
    if isinstance(dtype, DataType):
        return np.dtype(_NUMPY_DTYPES[dtype])

    try:
        resolved = np.dtype(dtype)
    except TypeError as e:
        raise ValidationError(
            message=f"Unknown element type {dtype!r}",
            parameter="dtype",
            expected="DataType or numpy dtype",
            received=repr(dtype),
        ) from e

    # Structured, object and flexible types have no well defined zero
    if resolved.kind not in "biufc" or resolved.itemsize == 0:
        raise ValidationError(
            message=f"Element type {resolved} is not a numeric scalar type",
            parameter="dtype",
            expected="numeric scalar dtype",
            received=str(resolved),
        )
    return resolved


def zero_value(dtype: ElementTypeLike):
    """Get the zero value of an element type."""
    return to_numpy_dtype(dtype).type(0)


@dataclass(frozen=True)
class Shape:
    """
    Represents tensor dimensions.

    The dimension tuple is fixed once built. Rank and element count are
    derived at construction and cached, an empty shape is a scalar with
    exactly one element and any zero-length dimension gives zero elements.
    """

    dims: tuple[int, ...] = field(default_factory=tuple)
    _numel: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        dims = self.dims
        if isinstance(dims, (str, bytes)) or not hasattr(dims, "__iter__"):
            raise format_invalid_shape(dims, "expected a sequence of dimensions")

        normalized = []
        for d in dims:
            if isinstance(d, bool) or not isinstance(d, Integral):
                raise format_invalid_shape(dims, f"dimension {d!r} is not an integer")
            if d < 0:
                raise format_invalid_shape(dims, f"dimension {d} is negative")
            normalized.append(int(d))

        object.__setattr__(self, "dims", tuple(normalized))
        object.__setattr__(self, "_numel", product(normalized))

    def rank(self) -> int:
        """Get number of dimensions."""
        return len(self.dims)

    def numel(self) -> int:
        """Get total number of elements."""
        return self._numel

    def is_scalar(self) -> bool:
        """Check if shape describes a rank-0 tensor."""
        return not self.dims

    def __getitem__(self, idx: int) -> int:
        return self.dims[idx]

    def __len__(self) -> int:
        return len(self.dims)

    def __iter__(self):
        return iter(self.dims)

    def __repr__(self) -> str:
        return f"Shape({list(self.dims)})"
