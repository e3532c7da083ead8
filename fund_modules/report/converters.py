"""
Section converters -- pure functions, ZERO I/O.

Each converter turns the transaction list of one report category into the
section that category's sheet prints. Transactions arrive already filtered
and sorted by the source; converters never reorder them.

Bucketed forms (SYUUSHI07_06 / 07_14 / 07_15):
    every amount is resolved and rounded first, then compared with the
    form's threshold. At or above it, the transaction becomes a detail row
    numbered 1, 2, ... in emission order; below it, the amount goes to
    ``under_threshold_amount``. Both count toward ``total_amount``.

Itemized forms (SYUUSHI07_03 / 07_04 / 07_05 / 07_07 KUBUN1):
    one row per transaction, no threshold.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import TypeVar

from fund_modules.report.amounts import (
    build_bikou,
    japanese_sort_key,
    resolve_expense_amount,
    resolve_income_amount,
    round_half_up,
    sanitize_text,
)
from fund_modules.report.config import ConversionRules
from fund_modules.report.models import (
    BusinessIncomeRow,
    GrantIncomeRow,
    LoanIncomeRow,
    OtherIncomeRow,
    PartyInfo,
    PersonalDonationRow,
    PersonalDonationSection,
    PoliticalExpenseRow,
    PoliticalExpenseSection,
    RawAmount,
    RegularExpenseRow,
    ReportCategory,
    Section,
    Transaction,
)

_RowT = TypeVar("_RowT")

Resolver = Callable[[RawAmount, RawAmount], Decimal]


# =========================================================================
# Shared helpers
# =========================================================================


def _bucket(
    transactions: Sequence[Transaction],
    resolve: Resolver,
    threshold: int | None,
    build_row: Callable[[Transaction, int, str], _RowT],
) -> tuple[int, int, tuple[_RowT, ...]]:
    """Round-then-bucket. Returns (total, under_threshold, rows)."""
    total = 0
    under = 0
    rows: list[_RowT] = []
    for tx in transactions:
        amount = round_half_up(resolve(tx.debit_amount, tx.credit_amount))
        total += amount
        if threshold is None or amount >= threshold:
            rows.append(build_row(tx, amount, str(len(rows) + 1)))
        else:
            under += amount
    return total, under, tuple(rows)


def _counterpart(tx: Transaction, rules: ConversionRules) -> PartyInfo:
    if tx.counterpart is not None:
        return tx.counterpart
    placeholder = rules.counterpart_placeholder
    return PartyInfo(
        name=placeholder.name,
        address=placeholder.address,
        is_placeholder=True,
    )


def _donor(tx: Transaction, rules: ConversionRules) -> PartyInfo:
    if tx.donor is not None:
        return tx.donor
    placeholder = rules.donor_placeholder
    return PartyInfo(
        name=placeholder.name,
        address=placeholder.address,
        occupation=placeholder.occupation,
        is_placeholder=True,
    )


def _income_bikou(tx: Transaction, rules: ConversionRules) -> str:
    limits = rules.text_limits
    return build_bikou(tx.transaction_no, tx.memo, limits.bikou_memo, limits.bikou_income_total)


def _expense_bikou(tx: Transaction, rules: ConversionRules) -> str:
    limits = rules.text_limits
    return build_bikou(tx.transaction_no, tx.memo, limits.bikou_memo, limits.bikou_expense_total)


# =========================================================================
# 1. DONATIONS (SYUUSHI07_07)
# =========================================================================


def convert_personal_donations(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> PersonalDonationSection:
    """KUBUN1 個人からの寄附: one row per donation."""
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str) -> PersonalDonationRow:
        donor = _donor(tx, rules)
        return PersonalDonationRow(
            row_number=number,
            amount=amount,
            donor_name=sanitize_text(donor.name, limits.name),
            transaction_date=tx.transaction_date,
            address=sanitize_text(donor.address, limits.address),
            occupation=sanitize_text(donor.occupation, limits.occupation),
            bikou=build_bikou(
                tx.transaction_no, tx.memo,
                limits.bikou_donation_memo, limits.bikou_donation_total,
            ),
            party_is_placeholder=donor.is_placeholder,
        )

    total, _, rows = _bucket(transactions, resolve_income_amount, None, build)
    return PersonalDonationSection(total_amount=total, rows=rows, other_amount=0)


# =========================================================================
# 2. INCOME (SYUUSHI07_03 .. 07_06)
# =========================================================================


def convert_business_income(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[BusinessIncomeRow]:
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str) -> BusinessIncomeRow:
        return BusinessIncomeRow(
            row_number=number,
            amount=amount,
            business_type=sanitize_text(tx.friendly_category, limits.category),
            bikou=_income_bikou(tx, rules),
        )

    total, _, rows = _bucket(transactions, resolve_income_amount, None, build)
    return Section(total_amount=total, rows=rows)


def convert_loan_income(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[LoanIncomeRow]:
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str) -> LoanIncomeRow:
        return LoanIncomeRow(
            row_number=number,
            amount=amount,
            lender=sanitize_text(_counterpart(tx, rules).name, limits.category),
            bikou=_income_bikou(tx, rules),
        )

    total, _, rows = _bucket(transactions, resolve_income_amount, None, build)
    return Section(total_amount=total, rows=rows)


def convert_grant_income(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[GrantIncomeRow]:
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str) -> GrantIncomeRow:
        party = _counterpart(tx, rules)
        return GrantIncomeRow(
            row_number=number,
            amount=amount,
            headquarters_name=sanitize_text(party.name, limits.name),
            transaction_date=tx.transaction_date,
            office_address=sanitize_text(party.address, limits.grant_office_address),
            bikou=_income_bikou(tx, rules),
            party_is_placeholder=party.is_placeholder,
        )

    total, _, rows = _bucket(transactions, resolve_income_amount, None, build)
    return Section(total_amount=total, rows=rows)


def convert_other_income(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[OtherIncomeRow]:
    """その他の収入: itemized at or above the form threshold (100,000 yen)."""
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str) -> OtherIncomeRow:
        return OtherIncomeRow(
            row_number=number,
            amount=amount,
            summary=sanitize_text(tx.friendly_category, limits.category),
            bikou=_income_bikou(tx, rules),
        )

    total, under, rows = _bucket(
        transactions, resolve_income_amount, rules.other_income_threshold, build,
    )
    return Section(total_amount=total, rows=rows, under_threshold_amount=under)


# =========================================================================
# 3. EXPENSES (SYUUSHI07_13 / 07_14 / 07_15)
# =========================================================================


def convert_personnel_expenses(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[RegularExpenseRow]:
    """人件費: total only, never itemized."""
    total = sum(
        round_half_up(resolve_expense_amount(tx.debit_amount, tx.credit_amount))
        for tx in transactions
    )
    return Section(total_amount=total)


def _build_expense_row(
    row_type: type[RegularExpenseRow] | type[PoliticalExpenseRow],
    rules: ConversionRules,
) -> Callable[[Transaction, int, str], RegularExpenseRow | PoliticalExpenseRow]:
    limits = rules.text_limits

    def build(tx: Transaction, amount: int, number: str):
        party = _counterpart(tx, rules)
        return row_type(
            row_number=number,
            amount=amount,
            purpose=sanitize_text(tx.friendly_category, limits.category),
            transaction_date=tx.transaction_date,
            payee_name=sanitize_text(party.name, limits.name),
            payee_address=sanitize_text(party.address, limits.address),
            bikou=_expense_bikou(tx, rules),
            receipt_type=tx.receipt_type,
            is_grant_expenditure=tx.is_grant_expenditure,
            party_is_placeholder=party.is_placeholder,
        )

    return build


def convert_regular_expenses(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> Section[RegularExpenseRow]:
    """経常経費 KUBUN (光熱水費 / 備品・消耗品費 / 事務所費)."""
    total, under, rows = _bucket(
        transactions,
        resolve_expense_amount,
        rules.regular_expense_threshold,
        _build_expense_row(RegularExpenseRow, rules),
    )
    return Section(total_amount=total, rows=rows, under_threshold_amount=under)


def convert_political_expenses(
    transactions: Sequence[Transaction], rules: ConversionRules,
) -> tuple[PoliticalExpenseSection, ...]:
    """
    政治活動費 KUBUN: one section per HIMOKU (friendly category).

    Each group is bucketed on its own and numbered from 1. Groups are
    ordered by HIMOKU in Japanese dictionary order (katakana and hiragana
    interleaved by reading) with the empty HIMOKU last.
    """
    groups: dict[str, list[Transaction]] = {}
    for tx in transactions:
        groups.setdefault(tx.friendly_category or "", []).append(tx)

    build = _build_expense_row(PoliticalExpenseRow, rules)
    sections = []
    for himoku, group in groups.items():
        total, under, rows = _bucket(
            group, resolve_expense_amount, rules.political_expense_threshold, build,
        )
        sections.append(PoliticalExpenseSection(
            total_amount=total,
            rows=rows,
            under_threshold_amount=under,
            himoku=himoku,
        ))

    sections.sort(key=lambda s: (s.himoku == "", japanese_sort_key(s.himoku)))
    return tuple(sections)


# =========================================================================
# 4. DISPATCH
# =========================================================================

EXPENSE_CONVERTERS: dict[ReportCategory, Callable[..., object]] = {
    ReportCategory.PERSONNEL_EXPENSES: convert_personnel_expenses,
    ReportCategory.UTILITY_EXPENSES: convert_regular_expenses,
    ReportCategory.SUPPLIES_EXPENSES: convert_regular_expenses,
    ReportCategory.OFFICE_EXPENSES: convert_regular_expenses,
    ReportCategory.ORGANIZATION_EXPENSES: convert_political_expenses,
    ReportCategory.ELECTION_EXPENSES: convert_political_expenses,
    ReportCategory.PUBLICATION_EXPENSES: convert_political_expenses,
    ReportCategory.ADVERTISING_EXPENSES: convert_political_expenses,
    ReportCategory.FUNDRAISING_PARTY_EXPENSES: convert_political_expenses,
    ReportCategory.OTHER_BUSINESS_EXPENSES: convert_political_expenses,
    ReportCategory.RESEARCH_EXPENSES: convert_political_expenses,
    ReportCategory.DONATION_GRANT_EXPENSES: convert_political_expenses,
    ReportCategory.OTHER_POLITICAL_EXPENSES: convert_political_expenses,
}

INCOME_CONVERTERS: dict[ReportCategory, Callable[..., object]] = {
    ReportCategory.BUSINESS_INCOME: convert_business_income,
    ReportCategory.LOAN_INCOME: convert_loan_income,
    ReportCategory.GRANT_INCOME: convert_grant_income,
    ReportCategory.OTHER_INCOME: convert_other_income,
}
