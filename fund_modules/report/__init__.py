"""
Report Module (``fund_modules.report``).

Responsibility
--------------
Compiles the categorized ledger transactions of one political organization
and financial year into the 収支報告書 XML document: profile (07_01),
summary (07_02), donations (07_07), income (07_03..07_06), expense summary
(07_13), regular and political expenses (07_14 / 07_15) and grant
expenditures (07_16), then encodes it as Shift_JIS.

Architecture position
---------------------
**Modules layer**. Assemblers are the only I/O, through the injected
``TransactionSource``. Converters, summaries, validators and serializers
are pure functions over frozen dataclasses.

Invariants enforced
-------------------
* Amounts are resolved and rounded half-up to whole yen before any
  threshold comparison or summation.
* For every bucketed section, itemized rows plus the under-threshold
  amount equal the section total.
* Row numbers are 1..n within a sheet, in transaction order.
* The presence-flag string has the schema's fixed length; profile and
  summary are always "1".

Failure modes
-------------
* ``ProfileNotFoundError`` -- no profile for the organization and year.
* Source errors propagate unchanged; no partial report.
* ``ReportValidationError`` -- only under ``ValidationPolicy.REJECT``.
* ``ReportEncodingError`` -- unencodable text under the strict policy.
"""

from fund_modules.report.config import (
    EncodingErrorPolicy,
    ReportConfig,
    ValidationPolicy,
)
from fund_modules.report.models import (
    PartyInfo,
    ReportCategory,
    ReportData,
    Transaction,
    TransactionType,
)
from fund_modules.report.profile import OrganizationReportProfile
from fund_modules.report.serializers import build_presence_flags, serialize_report
from fund_modules.report.service import (
    CompiledReport,
    ReportCompilationService,
    encode_shift_jis,
    generate_filename,
)
from fund_modules.report.sources import (
    ProfileRepository,
    TransactionFilters,
    TransactionSource,
)
from fund_modules.report.thresholds import ThresholdPolicy
from fund_modules.report.validators import validate_report

__all__ = [
    "CompiledReport",
    "EncodingErrorPolicy",
    "OrganizationReportProfile",
    "PartyInfo",
    "ProfileRepository",
    "ReportCategory",
    "ReportCompilationService",
    "ReportConfig",
    "ReportData",
    "Transaction",
    "TransactionFilters",
    "TransactionSource",
    "ThresholdPolicy",
    "TransactionType",
    "ValidationPolicy",
    "build_presence_flags",
    "encode_shift_jis",
    "generate_filename",
    "serialize_report",
    "validate_report",
]
