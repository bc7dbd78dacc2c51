# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
fixedtensor Observability Module

Components:
- FixedTensorLogger: Structured logging with text or JSON output
"""

from .logger import (
    Verbosity,
    LogEntry,
    FixedTensorLogger,
    get_logger,
    set_verbosity,
)

__all__ = [
    "Verbosity",
    "LogEntry",
    "FixedTensorLogger",
    "get_logger",
    "set_verbosity",
]
