"""
Report Compilation Configuration.

Runtime policy for the compiler plus the immutable format definition
(``ReportSchema``) it is injected with. Nothing in the report module
reads YAML or module-level tables; everything flows from here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from fund_config import get_report_schema
from fund_config.schema import PartyPlaceholder, ReportSchema, TextLimits
from fund_kernel.logging_config import get_logger
from fund_modules.report.models import ReportCategory
from fund_modules.report.thresholds import ThresholdPolicy

logger = get_logger("modules.report.config")

SHIFT_JIS_CODEC = "cp932"


class ValidationPolicy(str, Enum):
    """What the compiler does when validators report errors."""

    ATTACH = "attach"  # compile anyway, return errors alongside the document
    REJECT = "reject"  # raise ReportValidationError


class EncodingErrorPolicy(str, Enum):
    """How characters outside the Shift_JIS repertoire are handled."""

    STRICT = "strict"  # raise ReportEncodingError
    REPLACE = "replace"  # substitute "?"


@dataclass(frozen=True)
class ConversionRules:
    """The subset of the schema the pure converters need."""

    text_limits: TextLimits
    other_income_threshold: int
    regular_expense_threshold: int
    political_expense_threshold: int
    donor_placeholder: PartyPlaceholder
    counterpart_placeholder: PartyPlaceholder

    @classmethod
    def from_schema(cls, schema: ReportSchema, policy: ThresholdPolicy) -> Self:
        """Expense cutoffs come from the counterpart-detail policy."""
        return cls(
            text_limits=schema.text_limits,
            other_income_threshold=schema.form_threshold("SYUUSHI07_06"),
            regular_expense_threshold=policy.form_threshold("SYUUSHI07_14"),
            political_expense_threshold=policy.form_threshold("SYUUSHI07_15"),
            donor_placeholder=schema.donor_placeholder,
            counterpart_placeholder=schema.counterpart_placeholder,
        )


@dataclass
class ReportConfig:
    """
    Compiler configuration.

    ``schema`` is the loaded format definition. ``timezone`` is the zone
    used for the filename timestamp. ``previous_carryover`` is the 前年繰越額
    printed on SYUUSHI07_02 until carryover tracking exists.
    """

    schema: ReportSchema
    validation_policy: ValidationPolicy = ValidationPolicy.ATTACH
    encoding_errors: EncodingErrorPolicy = EncodingErrorPolicy.STRICT
    timezone: str = "Asia/Tokyo"
    previous_carryover: int = 0
    max_fetch_workers: int = 8
    threshold_policy: ThresholdPolicy = field(init=False)
    conversion_rules: ConversionRules = field(init=False)

    def __post_init__(self) -> None:
        self.validation_policy = ValidationPolicy(self.validation_policy)
        self.encoding_errors = EncodingErrorPolicy(self.encoding_errors)
        if self.previous_carryover < 0:
            raise ValueError("previous_carryover cannot be negative")
        if self.max_fetch_workers < 1:
            raise ValueError("max_fetch_workers must be at least 1")
        labels = dict(self.schema.grant_expenditure_labels)
        missing = [
            c.value
            for c in ReportCategory
            if c.value.endswith("_expenses")
            and c is not ReportCategory.PERSONNEL_EXPENSES
            and c.value not in labels
        ]
        if missing:
            raise ValueError(f"Grant expenditure labels missing for: {', '.join(missing)}")
        self.threshold_policy = ThresholdPolicy.from_schema(self.schema)
        self.conversion_rules = ConversionRules.from_schema(self.schema, self.threshold_policy)

    @classmethod
    def with_defaults(cls) -> Self:
        """Load the bundled schema set with default policies."""
        return cls(schema=get_report_schema())

    @classmethod
    def from_schema(cls, schema: ReportSchema, **policy: Any) -> Self:
        """Wrap an already-loaded schema; ``policy`` overrides the defaults."""
        return cls(schema=schema, **policy)

    @classmethod
    def from_dict(cls, data: dict[str, Any], schema: ReportSchema | None = None) -> Self:
        """Build from a settings mapping; ``schema_set`` selects the YAML set."""
        if schema is None:
            set_name = data.get("schema_set")
            schema = get_report_schema(set_name) if set_name else get_report_schema()
        config = cls(
            schema=schema,
            validation_policy=ValidationPolicy(data.get("validation_policy", "attach")),
            encoding_errors=EncodingErrorPolicy(data.get("encoding_errors", "strict")),
            timezone=data.get("timezone", "Asia/Tokyo"),
            previous_carryover=int(data.get("previous_carryover", 0)),
            max_fetch_workers=int(data.get("max_fetch_workers", 8)),
        )
        logger.info("report_config_loaded", extra={
            "schema_id": schema.schema_id,
            "validation_policy": config.validation_policy.value,
            "encoding_errors": config.encoding_errors.value,
        })
        return config
