"""
Grant expenditure extraction (SYUUSHI07_16 本部又は支部に対する交付金の支出).

Pure function over already-converted expense sections: every itemized
row flagged as a grant expenditure is copied into the SYUUSHI07_16 sheet,
labelled with the expense item (費目) of the category it came from.

Invariants:
    - Rows are collected in sheet order: KUBUN1..3 of SYUUSHI07_14, then
      KUBUN1..9 of SYUUSHI07_15 with each category's HIMOKU sheets in order.
    - Row numbers run 1..n across the whole extraction.
    - ``total_amount`` is the sum of the extracted rows. Amounts that fell
      under a form threshold are never extracted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from fund_modules.report.models import (
    ExpenseData,
    GrantExpenditureRow,
    GrantExpenditureSection,
    RegularExpenseRow,
    PoliticalExpenseRow,
    ReportCategory,
)


def _flagged(
    category: ReportCategory,
    rows: Iterable[RegularExpenseRow | PoliticalExpenseRow],
) -> list[tuple[ReportCategory, RegularExpenseRow | PoliticalExpenseRow]]:
    return [(category, row) for row in rows if row.is_grant_expenditure]


def extract_grant_expenditures(
    expense: ExpenseData,
    labels: Mapping[str, str],
) -> GrantExpenditureSection:
    """
    Build the SYUUSHI07_16 section from flagged expense rows.

    ``labels`` maps a category key (``ReportCategory`` value) to its
    expense item label; an unmapped category falls back to its key.
    """
    flagged: list[tuple[ReportCategory, RegularExpenseRow | PoliticalExpenseRow]] = []
    for category, section in expense.regular_sections():
        flagged.extend(_flagged(category, section.rows))
    for category, sections in expense.political_sections():
        for section in sections:
            flagged.extend(_flagged(category, section.rows))

    rows = tuple(
        GrantExpenditureRow(
            row_number=str(index),
            amount=row.amount,
            source_category=category,
            expense_item=labels.get(category.value, category.value),
            transaction_date=row.transaction_date,
            headquarters_name=row.payee_name,
            office_address=row.payee_address,
            bikou=row.bikou,
        )
        for index, (category, row) in enumerate(flagged, start=1)
    )
    return GrantExpenditureSection(
        total_amount=sum(row.amount for row in rows),
        rows=rows,
    )
