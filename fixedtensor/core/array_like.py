# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Helpers over array-like sequences.

Accepts lists, tuples, Shape objects and 1-D numpy arrays.
"""

from typing import Iterable, Sequence


def product(xs: Iterable):
    """Calculate the product of all elements. The empty product is 1."""
    p = 1
    for x in xs:
        p *= x
    return p


def all_values_equal(xs: Sequence) -> bool:
    """Return True if all values in `xs` are equal (vacuously for len < 2)."""
    for i in range(len(xs) - 1):
        if xs[i] != xs[i + 1]:
            return False
    return True


def equal(lhs: Sequence, rhs: Sequence) -> bool:
    """Element-wise equality of two sequences of the same length."""
    if len(lhs) != len(rhs):
        return False
    for e0, e1 in zip(lhs, rhs):
        if e0 != e1:
            return False
    return True
