# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
fixedtensor Error Hierarchy

Every failure raised by the package is explicit and carries:
- A human-readable message
- Suggestions to fix the problem
- Context information for debugging

Error Categories:
- FixedTensorError: Base class for all fixedtensor errors
- IndexOutOfBoundsError: Coordinate or linear offset outside the shape
- AllocationError: Allocator could not satisfy or accept a buffer
- TensorReleasedError: Tensor or storage used after release
- ValidationError: Illegal shape or element type
"""

from typing import Optional


class FixedTensorError(Exception):
    """
    Base class for all fixedtensor errors.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


class IndexOutOfBoundsError(FixedTensorError, IndexError):
    """
    Coordinate or linear offset outside the tensor shape.

    Raised when:
    - A coordinate component is >= its dimension length or negative
    - A coordinate has the wrong number of components
    - A linear offset is >= the number of elements
    """

    def __init__(
        self,
        message: str,
        index=None,
        shape: Optional[tuple] = None,
        dimension: Optional[int] = None,
    ):
        self.index = index
        self.shape = shape
        self.dimension = dimension

        context = {}
        if index is not None:
            context["index"] = str(index)
        if shape is not None:
            context["shape"] = str(shape)
        if dimension is not None:
            context["dimension"] = dimension

        super().__init__(
            message=f"Index out of bounds: {message}",
            suggestions=[
                "Each coordinate component must satisfy 0 <= c[d] < shape[d]",
                "Linear offsets must be smaller than number_of_elements",
            ],
            context=context,
        )


class AllocationError(FixedTensorError, MemoryError):
    """
    Allocation capability failure.

    Raised when:
    - The allocator cannot provide the requested number of elements
    - A buffer is returned to an allocator that does not own it
    """

    def __init__(
        self,
        message: str,
        requested_bytes: Optional[int] = None,
        available_bytes: Optional[int] = None,
        device: Optional[str] = None,
    ):
        self.requested_bytes = requested_bytes
        self.available_bytes = available_bytes

        context = {}
        if requested_bytes is not None:
            context["requested_mb"] = f"{requested_bytes / (1024 * 1024):.2f}"
        if available_bytes is not None:
            context["available_mb"] = f"{available_bytes / (1024 * 1024):.2f}"
        if device:
            context["device"] = device

        suggestions = [
            "Release tensors that are no longer needed",
            "Increase the allocator pool size",
            "Use a smaller element type",
        ]

        super().__init__(
            message=f"Allocation failed: {message}",
            suggestions=suggestions,
            context=context,
        )


class TensorReleasedError(FixedTensorError):
    """Storage accessed or released after it has already been released."""

    def __init__(self, message: str, tensor_type: Optional[str] = None):
        context = {}
        if tensor_type:
            context["tensor_type"] = tensor_type

        super().__init__(
            message=f"Use after release: {message}",
            suggestions=[
                "Do not keep references to a tensor after calling release()",
                "Prefer 'with TensorType.zeros(allocator) as t:' blocks",
            ],
            context=context,
        )


class ValidationError(FixedTensorError, ValueError):
    """
    Input validation error.

    Raised when:
    - A shape contains negative or non-integer dimensions
    - An element type is not supported
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
    ):
        context = {}
        if parameter:
            context["parameter"] = parameter
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received

        suggestions = [
            "Check the parameter value and type",
            "Review the API documentation",
        ]

        super().__init__(
            message=f"Validation failed: {message}",
            suggestions=suggestions,
            context=context,
        )


def format_invalid_shape(shape, reason: str) -> ValidationError:
    """Create a ValidationError for an illegal shape."""
    return ValidationError(
        message=f"Invalid shape {shape!r}: {reason}",
        parameter="shape",
        expected="sequence of non-negative integers",
        received=repr(shape),
    )
