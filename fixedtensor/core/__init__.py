# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""fixedtensor Core Module"""

from .types import (
    DataType,
    Shape,
    dtype_size,
    dtype_to_string,
    to_numpy_dtype,
    zero_value,
)
from .array_like import product, all_values_equal, equal
from .index_codec import (
    Index,
    IndexIterator,
    serialize_index,
    deserialize_index,
    strides,
)
from .storage import ElementStorage
from .tensor import Tensor, tensor_type

__all__ = [
    "DataType",
    "Shape",
    "dtype_size",
    "dtype_to_string",
    "to_numpy_dtype",
    "zero_value",
    "product",
    "all_values_equal",
    "equal",
    "Index",
    "IndexIterator",
    "serialize_index",
    "deserialize_index",
    "strides",
    "ElementStorage",
    "Tensor",
    "tensor_type",
]
