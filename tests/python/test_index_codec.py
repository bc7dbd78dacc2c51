# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for the row-major index codec.

Validates:
- serialize_index / deserialize_index agree with numpy C order
- Bounds checking on both directions
- IndexIterator ordering, completeness and restart behaviour
"""

import threading

import pytest
import numpy as np

from fixedtensor.core import (
    Shape,
    IndexIterator,
    serialize_index,
    deserialize_index,
    strides,
)
from fixedtensor.errors import IndexOutOfBoundsError


class TestSerializeIndex:
    """Tests for coordinate -> offset conversion."""

    def test_last_dimension_fastest(self):
        shape = Shape((3, 3))
        assert serialize_index(shape, (0, 0)) == 0
        assert serialize_index(shape, (0, 1)) == 1
        assert serialize_index(shape, (1, 0)) == 3
        assert serialize_index(shape, (2, 2)) == 8

    def test_matches_numpy_ravel_multi_index(self):
        shape = Shape((13, 3, 9))
        for index in [(0, 0, 0), (5, 2, 7), (12, 2, 8), (1, 0, 3)]:
            expected = np.ravel_multi_index(index, shape.dims, order="C")
            assert serialize_index(shape, index) == expected

    def test_scalar_shape(self):
        assert serialize_index(Shape(()), ()) == 0

    def test_out_of_bounds_first_dimension(self):
        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(Shape((3, 3)), (3, 0))

    def test_out_of_bounds_last_dimension(self):
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            serialize_index(Shape((3, 3)), (0, 3))
        assert exc_info.value.dimension == 1

    def test_negative_component(self):
        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(Shape((3, 3)), (-1, 0))

    def test_wrong_rank(self):
        with pytest.raises(IndexOutOfBoundsError, match="rank"):
            serialize_index(Shape((3, 3)), (1,))
        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(Shape((3, 3)), (1, 1, 1))

    def test_non_integer_component(self):
        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(Shape((3, 3)), (1.0, 1))

    def test_zero_length_dimension_rejects_everything(self):
        with pytest.raises(IndexOutOfBoundsError):
            serialize_index(Shape((2, 0)), (0, 0))

    def test_error_is_index_error(self):
        with pytest.raises(IndexError):
            serialize_index(Shape((2,)), (2,))

    def test_accepts_numpy_integers(self):
        assert serialize_index(Shape((4, 5)), (np.int64(2), np.int32(3))) == 13


class TestDeserializeIndex:
    """Tests for offset -> coordinate conversion."""

    def test_basic(self):
        shape = Shape((3, 3))
        assert deserialize_index(shape, 0) == (0, 0)
        assert deserialize_index(shape, 5) == (1, 2)
        assert deserialize_index(shape, 8) == (2, 2)

    def test_matches_numpy_unravel_index(self):
        shape = Shape((13, 3, 9))
        for offset in [0, 1, 26, 27, 100, 350]:
            expected = tuple(int(i) for i in np.unravel_index(offset, shape.dims))
            assert deserialize_index(shape, offset) == expected

    def test_scalar_shape(self):
        assert deserialize_index(Shape(()), 0) == ()
        with pytest.raises(IndexOutOfBoundsError):
            deserialize_index(Shape(()), 1)

    def test_offset_equal_to_numel(self):
        with pytest.raises(IndexOutOfBoundsError):
            deserialize_index(Shape((3, 3)), 9)

    def test_negative_offset(self):
        with pytest.raises(IndexOutOfBoundsError):
            deserialize_index(Shape((3, 3)), -1)

    def test_zero_length_dimension(self):
        """No offset is valid, and no division by zero happens."""
        with pytest.raises(IndexOutOfBoundsError):
            deserialize_index(Shape((3, 0, 2)), 0)

    def test_returns_plain_ints(self):
        index = deserialize_index(Shape((4, 4)), 7)
        assert all(type(c) is int for c in index)


class TestRoundTrip:
    """Codec directions are mutual inverses on the valid domain."""

    @pytest.mark.parametrize("dims", [(), (1,), (5,), (3, 3), (7, 1, 12), (2, 3, 4, 5)])
    def test_offset_round_trip(self, dims):
        shape = Shape(dims)
        for offset in range(shape.numel()):
            assert serialize_index(shape, deserialize_index(shape, offset)) == offset

    @pytest.mark.parametrize("dims", [(3, 3), (13, 3, 9)])
    def test_coordinate_round_trip(self, dims):
        shape = Shape(dims)
        for index in np.ndindex(*dims):
            assert deserialize_index(shape, serialize_index(shape, index)) == index


class TestStrides:
    def test_matches_numpy(self):
        dims = (7, 1, 12)
        array = np.empty(dims, dtype=np.float32)
        expected = tuple(s // array.itemsize for s in array.strides)
        assert strides(Shape(dims)) == expected

    def test_scalar(self):
        assert strides(Shape(())) == ()


class TestIndexIterator:
    """Tests for IndexIterator."""

    def test_serialized_offsets_are_sequential(self):
        """Shape (7, 1, 12) yields offsets 0..83 in order."""
        shape = Shape((7, 1, 12))
        offsets = [serialize_index(shape, index) for index in IndexIterator(shape)]
        assert offsets == list(range(84))

    def test_deserialize_agrees_with_iteration(self):
        shape = Shape((13, 3, 9))
        for offset, index in enumerate(IndexIterator(shape)):
            assert deserialize_index(shape, offset) == index

    def test_matches_numpy_ndindex(self):
        dims = (2, 3, 4)
        assert list(IndexIterator(Shape(dims))) == list(np.ndindex(*dims))

    def test_scalar_yields_single_empty_index(self):
        assert list(IndexIterator(Shape(()))) == [()]

    def test_zero_length_dimension_is_empty(self):
        assert list(IndexIterator(Shape((5, 0)))) == []

    def test_exhausted_stays_exhausted(self):
        shape = Shape((2,))
        iterator = IndexIterator(shape)
        assert list(iterator) == [(0,), (1,)]
        assert iterator.current == 2
        assert next(iterator, None) is None
        assert iterator.current == 2

    def test_fresh_iterators_restart(self):
        shape = Shape((3, 2))
        first = IndexIterator(shape)
        next(first)
        next(first)
        second = IndexIterator(shape)
        assert next(second) == (0, 0)
        assert next(first) == (1, 0)

    def test_length_hint(self):
        import operator

        iterator = IndexIterator(Shape((3, 4)))
        assert operator.length_hint(iterator) == 12
        next(iterator)
        assert operator.length_hint(iterator) == 11

    def test_independent_iterators_across_threads(self):
        shape = Shape((4, 5, 6))
        results = {}

        def collect(key):
            results[key] = list(IndexIterator(shape))

        threads = [threading.Thread(target=collect, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        expected = list(np.ndindex(4, 5, 6))
        assert all(r == expected for r in results.values())
