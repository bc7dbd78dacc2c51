# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for fixedtensor Python tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import fixedtensor
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Skip test modules that require optional dependencies not installed
collect_ignore = []

# Check for hypothesis
try:
    import hypothesis  # noqa: F401
except ImportError:
    collect_ignore.append("test_property_based.py")


@pytest.fixture
def heap():
    """Fresh heap allocator."""
    from fixedtensor.runtime import HeapAllocator

    return HeapAllocator()


@pytest.fixture
def pool():
    """Small pool allocator."""
    from fixedtensor.runtime import PoolAllocator

    return PoolAllocator(pool_size_mb=1)


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Keep the structured logger silent and isolated per test."""
    from fixedtensor.observability import FixedTensorLogger, Verbosity

    monkeypatch.delenv("FIXEDTENSOR_VERBOSITY", raising=False)
    FixedTensorLogger.reset()
    FixedTensorLogger.get().set_verbosity(Verbosity.SILENT)
    yield
    FixedTensorLogger.reset()
