"""
ReportCompilationService -- compile one 収支報告書 XML document.

Responsibility:
    Orchestrates a single compilation: look up the profile, run the
    assemblers, derive the summaries and the grant-expenditure sheet,
    validate, serialize, encode to Shift_JIS and name the file.

Architecture position:
    Modules > Report. The only stateful seam is the injected collaborators
    (TransactionSource, ProfileRepository, Clock); one ``compile`` call
    shares nothing with another.

Failure modes:
    - ProfileNotFoundError when the organization has no profile for the year.
    - Any TransactionSource error propagates unchanged; no partial report.
    - ReportValidationError only under ValidationPolicy.REJECT.
    - ReportEncodingError under EncodingErrorPolicy.STRICT when the document
      contains characters outside the Shift_JIS (cp932) repertoire.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from fund_kernel.domain.clock import Clock, SystemClock
from fund_kernel.domain.dtos import ValidationResult
from fund_kernel.exceptions import (
    ProfileNotFoundError,
    ReportEncodingError,
    ReportValidationError,
)
from fund_kernel.logging_config import LogContext, get_logger
from fund_modules.report.assemblers import (
    DonationAssembler,
    ExpenseAssembler,
    IncomeAssembler,
)
from fund_modules.report.config import (
    SHIFT_JIS_CODEC,
    EncodingErrorPolicy,
    ReportConfig,
    ValidationPolicy,
)
from fund_modules.report.grant_expenditure import extract_grant_expenditures
from fund_modules.report.models import (
    DonationData,
    ExpenseData,
    IncomeData,
    ReportData,
)
from fund_modules.report.profile import OrganizationReportProfile
from fund_modules.report.serializers import serialize_report
from fund_modules.report.sources import (
    ProfileRepository,
    TransactionFilters,
    TransactionSource,
)
from fund_modules.report.summary import build_expense_summary, build_summary
from fund_modules.report.validators import validate_report

logger = get_logger("modules.report.service")

UNKNOWN_SLUG = "unknown"


@dataclass(frozen=True)
class CompiledReport:
    """
    Output of one compilation.

    ``xml`` is the Unicode document (its declaration names Shift_JIS);
    ``shift_jis_bytes`` is that document encoded for download. The two
    differ in length whenever the document holds Japanese text.
    """

    xml: str
    shift_jis_bytes: bytes
    filename: str
    report_data: ReportData
    validation: ValidationResult


# =============================================================================
# Pure helpers
# =============================================================================


def generate_filename(financial_year: int, slug: str | None, now: datetime) -> str:
    """``report_{year}_{slug|unknown}_{YYYYMMDD}_{HHMM}.xml``."""
    return (
        f"report_{financial_year}_{slug or UNKNOWN_SLUG}_"
        f"{now:%Y%m%d}_{now:%H%M}.xml"
    )


# JIS X 0208 code points that Unicode text often carries where cp932 holds
# the same glyph under a different code point.
JIS_TO_CP932 = {
    0x301C: 0xFF5E,  # 〜 WAVE DASH
    0x2016: 0x2225,  # ‖ DOUBLE VERTICAL LINE
    0x2212: 0xFF0D,  # − MINUS SIGN
    0x2014: 0x2015,  # EM DASH
    0x00A2: 0xFFE0,  # ¢
    0x00A3: 0xFFE1,  # £
    0x00AC: 0xFFE2,  # ¬
}


def encode_shift_jis(
    xml: str, policy: EncodingErrorPolicy = EncodingErrorPolicy.STRICT,
) -> bytes:
    """
    Encode with cp932 after folding the JIS variants in ``JIS_TO_CP932``.

    STRICT raises ReportEncodingError listing each unencodable character
    once; REPLACE substitutes "?".
    """
    xml = xml.translate(JIS_TO_CP932)
    if policy is EncodingErrorPolicy.REPLACE:
        return xml.encode(SHIFT_JIS_CODEC, errors="replace")
    try:
        return xml.encode(SHIFT_JIS_CODEC)
    except UnicodeEncodeError as exc:
        offending: dict[str, None] = {}
        for char in xml[exc.start:]:
            try:
                char.encode(SHIFT_JIS_CODEC)
            except UnicodeEncodeError:
                offending[char] = None
        raise ReportEncodingError(SHIFT_JIS_CODEC, tuple(offending)) from exc


def assemble_report_data(
    profile: OrganizationReportProfile,
    donation: DonationData,
    income: IncomeData,
    expense: ExpenseData,
    config: ReportConfig,
) -> ReportData:
    """Derive the summaries and the grant-expenditure sheet from converted sections."""
    expense_summary = build_expense_summary(expense)
    return ReportData(
        profile=profile,
        summary=build_summary(donation, income, expense_summary, config.previous_carryover),
        donation=donation,
        income=income,
        expense=expense,
        expense_summary=expense_summary,
        grant_expenditure=extract_grant_expenditures(
            expense, dict(config.schema.grant_expenditure_labels),
        ),
    )


def count_placeholder_rows(report: ReportData) -> int:
    """Rows whose donor or counterpart is still an interim placeholder."""
    rows = [
        *report.donation.personal_donations.rows,
        *report.income.grant_income.rows,
    ]
    for _, section in report.expense.regular_sections():
        rows.extend(section.rows)
    for _, sections in report.expense.political_sections():
        for section in sections:
            rows.extend(section.rows)
    return sum(1 for row in rows if row.party_is_placeholder)


# =============================================================================
# Service
# =============================================================================


class ReportCompilationService:
    """
    Compile the XML report for one organization and financial year.

    Contract:
        ``compile()`` either returns a complete CompiledReport or raises;
        it never returns a partial document.

    Non-goals:
        - Does NOT persist the output or the ReportData.
        - Does NOT cache between calls.
    """

    def __init__(
        self,
        transaction_source: TransactionSource,
        profile_repository: ProfileRepository,
        config: ReportConfig | None = None,
        clock: Clock | None = None,
    ):
        self._profiles = profile_repository
        self._config = config or ReportConfig.with_defaults()
        self._clock = clock or SystemClock()
        self._donations = DonationAssembler(transaction_source, self._config)
        self._income = IncomeAssembler(transaction_source, self._config)
        self._expenses = ExpenseAssembler(transaction_source, self._config)

    @property
    def config(self) -> ReportConfig:
        return self._config

    def compile(self, organization_id: str, financial_year: int) -> CompiledReport:
        with LogContext.bind(
            correlation_id=f"{organization_id}:{financial_year}",
            organization_id=organization_id,
            financial_year=str(financial_year),
        ):
            return self._compile(organization_id, financial_year)

    def _compile(self, organization_id: str, financial_year: int) -> CompiledReport:
        start = time.monotonic()
        logger.info("report_compilation_started", extra={
            "schema_id": self._config.schema.schema_id,
            "validation_policy": self._config.validation_policy.value,
        })

        profile = self._profiles.find_by_organization_and_year(organization_id, financial_year)
        if profile is None:
            logger.warning("report_profile_missing")
            raise ProfileNotFoundError(organization_id, financial_year)

        filters = TransactionFilters(organization_id, financial_year)
        report = assemble_report_data(
            profile,
            self._donations.assemble(filters),
            self._income.assemble(filters),
            self._expenses.assemble(filters),
            self._config,
        )

        placeholders = count_placeholder_rows(report)
        if placeholders:
            logger.warning("placeholder_party_used", extra={"row_count": placeholders})

        validation = self._validate(report)

        xml = serialize_report(report, self._config.schema)
        try:
            encoded = encode_shift_jis(xml, self._config.encoding_errors)
        except ReportEncodingError as exc:
            logger.error("report_encoding_failed", extra={
                "encoding": exc.encoding,
                "characters": list(exc.characters),
            })
            raise

        slug = self._profiles.get_organization_slug(organization_id)
        now = self._clock.now().astimezone(ZoneInfo(self._config.timezone))
        filename = generate_filename(financial_year, slug, now)

        logger.info("report_compilation_completed", extra={
            "filename": filename,
            "byte_length": len(encoded),
            "is_valid": validation.is_valid,
            "duration_ms": int((time.monotonic() - start) * 1000),
        })
        return CompiledReport(
            xml=xml,
            shift_jis_bytes=encoded,
            filename=filename,
            report_data=report,
            validation=validation,
        )

    def _validate(self, report: ReportData) -> ValidationResult:
        validation = validate_report(report)
        if validation.is_valid:
            logger.info("report_validation_passed")
            return validation

        logger.warning("report_validation_failed", extra={
            "error_count": len(validation.errors),
            "paths": [e.path for e in validation.errors[:10]],
            "policy": self._config.validation_policy.value,
        })
        if self._config.validation_policy is ValidationPolicy.REJECT:
            raise ReportValidationError(validation.errors)
        return validation
