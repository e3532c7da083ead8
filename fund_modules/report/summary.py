"""
Report summaries -- SYUUSHI07_02 収支の総括表 and SYUUSHI07_13 支出項目別金額の内訳.

Pure functions. Both summaries are derived from converted sections only;
neither looks at transactions.

Formulas (SYUUSHI07_02):
    HONNEN_SYUNYU_GK = donations + business + loans + grants + other income
    SYUNYU_SGK       = ZENNEN_KKS_GK + HONNEN_SYUNYU_GK
    SISYUTU_SGK      = SYUUSHI07_13 total (personnel + regular + political)
    YOKUNEN_KKS_GK   = SYUNYU_SGK - SISYUTU_SGK
"""

from __future__ import annotations

from fund_modules.report.models import (
    DonationData,
    ExpenseData,
    ExpenseSummaryData,
    ExpenseSummaryItem,
    IncomeData,
    SummaryData,
    political_total,
)


def build_expense_summary(expense: ExpenseData) -> ExpenseSummaryData:
    """
    Aggregate SYUUSHI07_14 / 07_15 totals (plus personnel) into SYUUSHI07_13.

    Regular items are None when zero; the subtotals and every political
    item are always present. Grant amounts and remarks are not tracked.
    """
    personnel = expense.personnel_expenses.total_amount
    utility = expense.utility_expenses.total_amount
    supplies = expense.supplies_expenses.total_amount
    office = expense.office_expenses.total_amount
    regular_subtotal = personnel + utility + supplies + office

    organization = political_total(expense.organization_expenses)
    election = political_total(expense.election_expenses)
    publication = political_total(expense.publication_expenses)
    advertising = political_total(expense.advertising_expenses)
    party = political_total(expense.fundraising_party_expenses)
    other_business = political_total(expense.other_business_expenses)
    research = political_total(expense.research_expenses)
    donation_grant = political_total(expense.donation_grant_expenses)
    other_political = political_total(expense.other_political_expenses)

    business = publication + advertising + party + other_business
    political_subtotal = (
        organization + election + business + research + donation_grant + other_political
    )

    def optional(amount: int) -> ExpenseSummaryItem:
        return ExpenseSummaryItem(amount=amount if amount > 0 else None)

    return ExpenseSummaryData(
        personnel=optional(personnel),
        utility=optional(utility),
        supplies=optional(supplies),
        office=optional(office),
        regular_subtotal=ExpenseSummaryItem(amount=regular_subtotal),
        organization=ExpenseSummaryItem(amount=organization),
        election=ExpenseSummaryItem(amount=election),
        business=ExpenseSummaryItem(amount=business),
        publication=ExpenseSummaryItem(amount=publication),
        advertising=ExpenseSummaryItem(amount=advertising),
        fundraising_party=ExpenseSummaryItem(amount=party),
        other_business=ExpenseSummaryItem(amount=other_business),
        research=ExpenseSummaryItem(amount=research),
        donation_grant=ExpenseSummaryItem(amount=donation_grant),
        other_political=ExpenseSummaryItem(amount=other_political),
        political_subtotal=ExpenseSummaryItem(amount=political_subtotal),
        total_amount=regular_subtotal + political_subtotal,
    )


def build_summary(
    donation: DonationData,
    income: IncomeData,
    expense_summary: ExpenseSummaryData,
    previous_carryover: int = 0,
) -> SummaryData:
    """Compute SYUUSHI07_02 from the converted sections."""
    donation_total = donation.total_amount
    current_year_income = donation_total + income.total_amount
    total_income = previous_carryover + current_year_income
    total_expenditure = expense_summary.total_amount

    return SummaryData(
        total_income=total_income,
        previous_carryover=previous_carryover,
        current_year_income=current_year_income,
        total_expenditure=total_expenditure,
        next_carryover=total_income - total_expenditure,
        personal_donation_total=donation_total,
        donation_subtotal=donation_total,
        donation_grand_total=donation_total,
    )
