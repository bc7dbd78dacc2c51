"""
Property-based tests using Hypothesis.

Tests the index codec guarantees over arbitrary small shapes.

These tests require:
    - hypothesis library: pip install hypothesis

If hypothesis is not available, all tests will be skipped.
"""

import pytest
import numpy as np

# Check if hypothesis is available
try:
    from hypothesis import given, strategies as st, settings

    HYPOTHESIS_AVAILABLE = True
except ImportError:
    HYPOTHESIS_AVAILABLE = False
    given = None
    st = None
    settings = None

from fixedtensor.core import (
    Shape,
    IndexIterator,
    serialize_index,
    deserialize_index,
    strides,
    product,
    tensor_type,
)
from fixedtensor.errors import IndexOutOfBoundsError
from fixedtensor.runtime import HeapAllocator

# Skip all tests if dependencies not available
pytestmark = pytest.mark.skipif(
    not HYPOTHESIS_AVAILABLE,
    reason="hypothesis not available",
)

# Shapes stay small so a full enumeration is cheap
dims_strategy = st.lists(st.integers(min_value=1, max_value=5), min_size=0, max_size=4)


class TestShapeProperties:
    """Property-based tests for Shape."""

    @given(st.lists(st.integers(min_value=0, max_value=1000), min_size=0, max_size=6))
    @settings(max_examples=50)
    def test_shape_creation(self, dims):
        """Shape should preserve dimensions."""
        shape = Shape(dims)
        assert len(shape) == len(dims)
        for i, d in enumerate(dims):
            assert shape[i] == d

    @given(st.lists(st.integers(min_value=0, max_value=20), min_size=0, max_size=5))
    @settings(max_examples=50)
    def test_numel_is_product(self, dims):
        shape = Shape(dims)
        assert shape.numel() == product(dims)
        assert shape.numel() == int(np.prod(dims, dtype=np.int64))


class TestIndexCodecProperties:
    """Property-based tests for the coordinate <-> offset codec."""

    @given(dims_strategy, st.data())
    @settings(max_examples=100)
    def test_offset_round_trip(self, dims, data):
        shape = Shape(dims)
        offset = data.draw(st.integers(min_value=0, max_value=shape.numel() - 1))
        assert serialize_index(shape, deserialize_index(shape, offset)) == offset

    @given(dims_strategy, st.data())
    @settings(max_examples=100)
    def test_coordinate_round_trip(self, dims, data):
        shape = Shape(dims)
        index = tuple(data.draw(st.integers(min_value=0, max_value=d - 1)) for d in dims)
        assert deserialize_index(shape, serialize_index(shape, index)) == index

    @given(dims_strategy, st.data())
    @settings(max_examples=100)
    def test_matches_numpy_c_order(self, dims, data):
        shape = Shape(dims)
        index = tuple(data.draw(st.integers(min_value=0, max_value=d - 1)) for d in dims)
        expected = int(np.ravel_multi_index(index, dims, order="C")) if dims else 0
        assert serialize_index(shape, index) == expected

    @given(dims_strategy)
    @settings(max_examples=50)
    def test_strides_match_numpy(self, dims):
        shape = Shape(dims)
        itemsize = np.dtype(np.int32).itemsize
        expected = tuple(s // itemsize for s in np.zeros(dims, dtype=np.int32).strides)
        assert strides(shape) == expected

    @given(
        st.lists(st.integers(min_value=1, max_value=5), min_size=1, max_size=4),
        st.data(),
    )
    @settings(max_examples=100)
    def test_any_component_past_bound_rejected(self, dims, data):
        shape = Shape(dims)
        index = [data.draw(st.integers(min_value=0, max_value=d - 1)) for d in dims]
        dimension = data.draw(st.integers(min_value=0, max_value=len(dims) - 1))
        index[dimension] = dims[dimension] + data.draw(st.integers(0, 3))

        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(shape, index)

    @given(dims_strategy, st.integers(min_value=0, max_value=100))
    @settings(max_examples=50)
    def test_offsets_past_numel_rejected(self, dims, extra):
        shape = Shape(dims)
        with pytest.raises(IndexOutOfBoundsError):
            deserialize_index(shape, shape.numel() + extra)


class TestIndexIteratorProperties:
    """Property-based tests for IndexIterator."""

    @given(st.lists(st.integers(min_value=0, max_value=4), min_size=0, max_size=4))
    @settings(max_examples=50)
    def test_iterator_visits_every_offset_in_order(self, dims):
        shape = Shape(dims)
        offsets = [serialize_index(shape, index) for index in IndexIterator(shape)]
        assert offsets == list(range(shape.numel()))

    @given(st.lists(st.integers(min_value=0, max_value=4), min_size=0, max_size=4))
    @settings(max_examples=50)
    def test_iterator_matches_ndindex(self, dims):
        shape = Shape(dims)
        assert list(IndexIterator(shape)) == list(np.ndindex(*dims))


class TestConstructionProperties:
    """Property-based tests for tensor construction."""

    @given(dims_strategy)
    @settings(max_examples=30)
    def test_from_function_writes_offsets(self, dims):
        allocator = HeapAllocator()
        T = tensor_type(np.int64, dims)

        with T.from_function(allocator, T.serialize_index) as t:
            np.testing.assert_array_equal(t.elements, np.arange(T.number_of_elements))

        assert allocator.num_live_buffers == 0
