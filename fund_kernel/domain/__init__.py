"""
Pure domain layer.

Immutable data transfer objects and the clock abstraction. No I/O
except ``SystemClock``.
"""

from fund_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from fund_kernel.domain.dtos import (
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationResult",
]
