"""
ThresholdPolicy -- which transactions need counterpart detail.

Pure lookup over ``(transaction_type, category_key)`` built from the
injected ``ReportSchema``. The compiler takes the SYUUSHI07_14 and
SYUUSHI07_15 bucketing cutoffs from here:

    routine expenses (光熱水費 / 備品・消耗品費 / 事務所費)   >= 100,000 yen
    political-activity expenses (9 categories)              >=  50,000 yen
    loans and grants from HQ                                every transaction
    everything else                                         no detail required
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Self

from fund_config.schema import ReportSchema
from fund_modules.report.models import TransactionType


class DetailKind(str, Enum):
    NOT_REQUIRED = "not_required"
    NO_THRESHOLD = "no_threshold"
    THRESHOLD = "threshold"


@dataclass(frozen=True)
class DetailRequirement:
    """Disclosure rule for one category."""

    kind: DetailKind
    threshold: int | None = None

    @property
    def is_required(self) -> bool:
        return self.kind is not DetailKind.NOT_REQUIRED


_NOT_REQUIRED = DetailRequirement(DetailKind.NOT_REQUIRED)


class ThresholdPolicy:
    """
    Counterpart-detail rules keyed by transaction type and category key.

    Contract:
        Immutable after construction. Unknown categories need no detail.

    Guarantees:
        - ``is_above_detail_threshold`` is True for every amount when the
          category has no threshold (or needs no detail at all).
        - ``requires_counterpart_detail`` is exactly
          ``is_counterpart_required and is_above_detail_threshold``.
    """

    def __init__(
        self,
        rules: dict[tuple[TransactionType, str], DetailRequirement],
        form_thresholds: dict[str, int] | None = None,
    ):
        self._rules = MappingProxyType(dict(rules))
        self._form_thresholds = MappingProxyType(dict(form_thresholds or {}))

    @classmethod
    def from_schema(cls, schema: ReportSchema) -> Self:
        rules: dict[tuple[TransactionType, str], DetailRequirement] = {}
        form_thresholds: dict[str, int] = {}
        for rule in schema.counterpart_rules:
            key = (TransactionType(rule.transaction_type), rule.category_key)
            if rule.threshold is None:
                rules[key] = DetailRequirement(DetailKind.NO_THRESHOLD)
            else:
                rules[key] = DetailRequirement(DetailKind.THRESHOLD, rule.threshold)
                form_thresholds[rule.form_id] = rule.threshold
        return cls(rules, form_thresholds)

    def form_threshold(self, form_id: str) -> int:
        """Itemization cutoff shared by the categories ``form_id`` prints."""
        try:
            return self._form_thresholds[form_id]
        except KeyError:
            raise KeyError(f"No counterpart-detail threshold for {form_id}") from None

    def requirement(
        self, transaction_type: TransactionType | str, category_key: str
    ) -> DetailRequirement:
        return self._rules.get((TransactionType(transaction_type), category_key), _NOT_REQUIRED)

    def is_counterpart_required(
        self, transaction_type: TransactionType | str, category_key: str
    ) -> bool:
        return self.requirement(transaction_type, category_key).is_required

    def is_above_detail_threshold(
        self,
        transaction_type: TransactionType | str,
        category_key: str,
        amount: int | Decimal,
    ) -> bool:
        requirement = self.requirement(transaction_type, category_key)
        if requirement.threshold is None:
            return True
        return amount >= requirement.threshold

    def requires_counterpart_detail(
        self,
        transaction_type: TransactionType | str,
        category_key: str,
        amount: int | Decimal,
    ) -> bool:
        return self.is_counterpart_required(
            transaction_type, category_key
        ) and self.is_above_detail_threshold(transaction_type, category_key, amount)

    def categories_requiring_counterpart(
        self, transaction_type: TransactionType | str
    ) -> tuple[str, ...]:
        tx_type = TransactionType(transaction_type)
        return tuple(key for (t, key) in self._rules if t is tx_type)
