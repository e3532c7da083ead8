"""
DTOs -- Validation result objects.

Responsibility:
    Defines the uniform error shape produced by every report validator
    (profile, donation, income, expense, grant expenditure) and the
    aggregate result the compiler attaches to its output.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Errors are immutable and always carry a machine-readable ``code``
      and a dotted ``path`` naming the offending field
      (e.g. ``profile.details.representative.lastName``).
    - ``ValidationResult.is_valid`` is True iff ``errors`` is empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ValidationErrorCode(str, Enum):
    """Closed set of validation error codes."""

    REQUIRED = "REQUIRED"
    MAX_LENGTH_EXCEEDED = "MAX_LENGTH_EXCEEDED"
    NEGATIVE_VALUE = "NEGATIVE_VALUE"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_VALUE = "INVALID_VALUE"


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, the dotted path of the field and a
        human-readable (Japanese) message for the operator.

    Non-goals:
        - Does NOT raise -- it IS the error representation.
    """

    code: ValidationErrorCode
    path: str
    message: str = ""


@dataclass(frozen=True)
class ValidationResult:
    """
    Aggregate of zero or more ValidationErrors.

    Guarantees:
        - Immutable (frozen dataclass)
        - errors is always a tuple (never None)
        - bool(result) == result.is_valid
    """

    is_valid: bool
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> ValidationResult:
        """Create a successful validation result."""
        return cls(is_valid=True, errors=())

    @classmethod
    def failure(cls, *errors: ValidationError) -> ValidationResult:
        """Create a failed validation result."""
        return cls(is_valid=False, errors=tuple(errors))

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> ValidationResult:
        """Create a result that is valid iff ``errors`` is empty."""
        if not errors:
            return cls.success()
        return cls.failure(*errors)

    def codes(self) -> set[ValidationErrorCode]:
        return {e.code for e in self.errors}

    def paths(self) -> set[str]:
        return {e.path for e in self.errors}

    def __bool__(self) -> bool:
        return self.is_valid
