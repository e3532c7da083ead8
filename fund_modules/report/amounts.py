"""
Amount resolution and text normalization -- pure functions, ZERO I/O.

Ledger rows carry both a debit and a credit amount; which one is the
transaction's value depends on whether it is income or expense. Amounts
stay unrounded here; converters round each one with ``round_half_up``
before summing or comparing it with a threshold.
"""

from __future__ import annotations

import math
import re
import unicodedata
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

from fund_modules.report.models import RawAmount

_WHITESPACE = re.compile(r"\s+")
_ZERO = Decimal("0")


def _positive(value: RawAmount) -> Decimal | None:
    """Return ``value`` as a Decimal if it is finite and > 0, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        number = Decimal(repr(value))
    else:
        try:
            number = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            return None
        if not number.is_finite():
            return None
    return number if number > 0 else None


def resolve_income_amount(debit: RawAmount, credit: RawAmount) -> Decimal:
    """Income value: the credit side when present, else the debit side, else 0."""
    credit_value = _positive(credit)
    if credit_value is not None:
        return credit_value
    debit_value = _positive(debit)
    return debit_value if debit_value is not None else _ZERO


def resolve_expense_amount(debit: RawAmount, credit: RawAmount) -> Decimal:
    """Expense value: the debit side when present, else the credit side, else 0."""
    debit_value = _positive(debit)
    if debit_value is not None:
        return debit_value
    credit_value = _positive(credit)
    return credit_value if credit_value is not None else _ZERO


def round_half_up(value: RawAmount) -> int:
    """Round to the nearest yen; ties go toward +infinity. Non-finite -> 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        number = Decimal(repr(value))
    else:
        number = Decimal(value)
        if not number.is_finite():
            return 0
    rounding = ROUND_HALF_UP if number >= 0 else ROUND_HALF_DOWN
    return int(number.quantize(Decimal(1), rounding=rounding))


def sanitize_text(value: str | None, max_length: int | None = None) -> str:
    """Collapse whitespace runs to one space, trim, then truncate."""
    if not value:
        return ""
    normalized = _WHITESPACE.sub(" ", value).strip()
    if max_length and len(normalized) > max_length:
        return normalized[:max_length].rstrip()
    return normalized


def build_bikou(
    transaction_no: str | None,
    memo: str | None,
    memo_max_length: int = 160,
    total_max_length: int = 200,
) -> str:
    """
    Build the BIKOU (remarks) text for a report row.

    The memo (if any) is followed by the ledger row reference
    ``MF行番号: {transaction_no}``. The reference alone is returned when the
    memo is empty or the combined text sanitizes to nothing.
    """
    row_info = f"MF行番号: {transaction_no or '-'}"
    memo_text = sanitize_text(memo, memo_max_length)
    combined = f"{memo_text} / {row_info}" if memo_text else row_info
    return sanitize_text(combined, total_max_length) or row_info


_KATAKANA_TO_HIRAGANA = {code: code - 0x60 for code in range(0x30A1, 0x30F7)}


def japanese_sort_key(value: str) -> tuple[str, str]:
    """
    Collation key approximating Japanese dictionary order.

    NFKC folds full-width Latin and half-width kana; katakana is folded
    onto hiragana so both scripts sort by reading. Kanji keep code point
    order. The raw value breaks ties so the order stays total.
    """
    folded = unicodedata.normalize("NFKC", value).translate(_KATAKANA_TO_HIRAGANA)
    return folded.casefold(), value
