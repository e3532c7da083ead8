"""
Typed Exception Hierarchy for the fund report compiler.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A report export either succeeds with a complete document or fails with a
reason the caller can act on. Callers catch by type and read structured
attributes; they never parse message strings.

    try:
        compiled = service.compile(organization_id, 2025)
    except ProfileNotFoundError as e:
        show_setup_page(e.organization_id, e.financial_year)
    except ReportEncodingError as e:
        highlight_characters(e.characters)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FundReportError (base)
    |
    +-- ProfileError
    |   +-- ProfileNotFoundError
    |
    +-- SourceError
    |   +-- TransactionFetchError
    |
    +-- ReportEncodingError
    |
    +-- ReportValidationError
    |
    +-- ConfigurationError
        +-- InvalidReportConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Profile         | PROFILE_NOT_FOUND           | No profile for organization/year
----------------|-----------------------------|-----------------------------------------
Source          | TRANSACTION_FETCH_FAILED    | A TransactionSource could not load a category
----------------|-----------------------------|-----------------------------------------
Encoding        | REPORT_ENCODING_FAILED      | Text outside the Shift_JIS (cp932) repertoire
----------------|-----------------------------|-----------------------------------------
Validation      | REPORT_VALIDATION_FAILED    | Validators found errors and policy is "reject"
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_REPORT_CONFIG       | Report schema set is malformed

===============================================================================
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fund_kernel.domain.dtos import ValidationError


class FundReportError(Exception):
    """
    Base exception for all fund report errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "FUND_REPORT_ERROR"


# Profile-related exceptions


class ProfileError(FundReportError):
    """Base exception for organization report profile errors."""

    code: str = "PROFILE_ERROR"


class ProfileNotFoundError(ProfileError):
    """No report profile exists for the organization and financial year."""

    code: str = "PROFILE_NOT_FOUND"

    def __init__(self, organization_id: str, financial_year: int):
        self.organization_id = organization_id
        self.financial_year = financial_year
        super().__init__(
            f"Profile not found for organization {organization_id} "
            f"and year {financial_year}"
        )


# Source-related exceptions


class SourceError(FundReportError):
    """Base exception for transaction source errors."""

    code: str = "SOURCE_ERROR"


class TransactionFetchError(SourceError):
    """A transaction source failed to load one report category."""

    code: str = "TRANSACTION_FETCH_FAILED"

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"Failed to fetch transactions for {category}: {reason}")


# Output-related exceptions


class ReportEncodingError(FundReportError):
    """
    The rendered document contains characters with no Shift_JIS mapping.

    ``characters`` lists each offending character once, in order of first
    appearance, so the operator can fix the source records.
    """

    code: str = "REPORT_ENCODING_FAILED"

    def __init__(self, encoding: str, characters: tuple[str, ...]):
        self.encoding = encoding
        self.characters = characters
        shown = ", ".join(f"{c!r} (U+{ord(c):04X})" for c in characters)
        super().__init__(f"Cannot encode report as {encoding}: {shown}")


class ReportValidationError(FundReportError):
    """Validators reported errors and the compiler is configured to reject."""

    code: str = "REPORT_VALIDATION_FAILED"

    def __init__(self, errors: tuple[ValidationError, ...]):
        self.errors = errors
        self.error_count = len(errors)
        first = errors[0].path if errors else "-"
        super().__init__(
            f"Report failed validation with {len(errors)} error(s); first at {first}"
        )


# Configuration exceptions


class ConfigurationError(FundReportError):
    """Base exception for report configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidReportConfigError(ConfigurationError):
    """The report schema set is structurally invalid."""

    code: str = "INVALID_REPORT_CONFIG"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid report configuration in {source}: {reason}")
