"""
Report validators -- structural checks over converted sections.

Responsibility:
    Collect ``ValidationError``s for the profile and for every itemized
    row the report will print: required text, maximum lengths, positive
    amounts, year format and enumerated codes.

Architecture position:
    Pure functions, zero I/O. Validators never mutate and never raise;
    whether errors block compilation is the compiler's ValidationPolicy.

Paths use the camelCase field names of the report JSON, e.g.
``profile.details.representative.lastName`` or
``expenses.utilityExpenses.rows[0].mokuteki``. Political-activity sheets
are indexed per HIMOKU: ``expenses.organizationExpenses[1].rows[0].nm``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from fund_kernel.domain.dtos import (
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
)
from fund_modules.report.models import (
    DonationData,
    ExpenseData,
    GrantExpenditureSection,
    IncomeData,
    PersonalDonationSection,
    PoliticalExpenseRow,
    RegularExpenseRow,
    ReportCategory,
    ReportData,
    Section,
)
from fund_modules.report.profile import (
    ACTIVITY_AREAS,
    DIET_RELATION_TYPES,
    OrganizationReportProfile,
    PersonName,
)

PROFILE_NAME_MAX_LENGTH = 120
PROFILE_ADDRESS_MAX_LENGTH = 80
PERSON_NAME_MAX_LENGTH = 30

ROW_CATEGORY_MAX_LENGTH = 200
ROW_NAME_MAX_LENGTH = 120
ROW_ADDRESS_MAX_LENGTH = 120
GRANT_OFFICE_ADDRESS_MAX_LENGTH = 80
OCCUPATION_MAX_LENGTH = 50

_SECTION_PATHS: dict[ReportCategory, tuple[str, str]] = {
    ReportCategory.UTILITY_EXPENSES: ("expenses.utilityExpenses", "光熱水費"),
    ReportCategory.SUPPLIES_EXPENSES: ("expenses.suppliesExpenses", "備品・消耗品費"),
    ReportCategory.OFFICE_EXPENSES: ("expenses.officeExpenses", "事務所費"),
    ReportCategory.ORGANIZATION_EXPENSES: ("expenses.organizationExpenses", "組織活動費"),
    ReportCategory.ELECTION_EXPENSES: ("expenses.electionExpenses", "選挙関係費"),
    ReportCategory.PUBLICATION_EXPENSES: ("expenses.publicationExpenses", "機関紙誌の発行事業費"),
    ReportCategory.ADVERTISING_EXPENSES: ("expenses.advertisingExpenses", "宣伝事業費"),
    ReportCategory.FUNDRAISING_PARTY_EXPENSES: (
        "expenses.fundraisingPartyExpenses", "政治資金パーティー開催事業費",
    ),
    ReportCategory.OTHER_BUSINESS_EXPENSES: ("expenses.otherBusinessExpenses", "その他の事業費"),
    ReportCategory.RESEARCH_EXPENSES: ("expenses.researchExpenses", "調査研究費"),
    ReportCategory.DONATION_GRANT_EXPENSES: ("expenses.donationGrantExpenses", "寄附・交付金"),
    ReportCategory.OTHER_POLITICAL_EXPENSES: ("expenses.otherPoliticalExpenses", "その他の経費"),
}


# =============================================================================
# Field checks
# =============================================================================


def _check_text(
    errors: list[ValidationError],
    value: str | None,
    path: str,
    label: str,
    max_length: int,
    *,
    required: bool = True,
) -> None:
    if not value:
        if required:
            errors.append(ValidationError(
                ValidationErrorCode.REQUIRED, path, f"{label}が入力されていません",
            ))
    elif len(value) > max_length:
        errors.append(ValidationError(
            ValidationErrorCode.MAX_LENGTH_EXCEEDED,
            path,
            f"{label}は{max_length}文字以内で入力してください",
        ))


def _check_amount(
    errors: list[ValidationError], amount: int | None, path: str, label: str,
) -> None:
    if amount is None:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, path, f"{label}金額が入力されていません",
        ))
    elif amount <= 0:
        errors.append(ValidationError(
            ValidationErrorCode.NEGATIVE_VALUE, path, f"{label}金額は正の整数で入力してください",
        ))


def _check_date(
    errors: list[ValidationError], value: date | None, path: str, label: str,
) -> None:
    if value is None:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, path, f"{label}年月日が入力されていません",
        ))


def _row_label(section_name: str, index: int) -> str:
    return f"{section_name}の{index + 1}行目: "


# =============================================================================
# Profile
# =============================================================================


def _validate_person(
    errors: list[ValidationError], person: PersonName | None, path: str, label: str,
) -> None:
    if person is None:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, path, f"{label}が入力されていません",
        ))
        return
    _check_text(errors, person.last_name, f"{path}.lastName", f"{label}の姓", PERSON_NAME_MAX_LENGTH)
    _check_text(errors, person.first_name, f"{path}.firstName", f"{label}の名", PERSON_NAME_MAX_LENGTH)


def validate_profile(profile: OrganizationReportProfile) -> list[ValidationError]:
    """団体の基本情報 (SYUUSHI07_01)."""
    errors: list[ValidationError] = []

    year_path = "profile.financialYear"
    if not profile.financial_year:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, year_path, "報告年が入力されていません",
        ))
    elif not 1000 <= profile.financial_year <= 9999:
        errors.append(ValidationError(
            ValidationErrorCode.INVALID_FORMAT, year_path, "報告年は4桁の数字で入力してください",
        ))

    _check_text(errors, profile.official_name, "profile.officialName",
                "政治団体の名称", PROFILE_NAME_MAX_LENGTH)
    _check_text(errors, profile.official_name_kana, "profile.officialNameKana",
                "政治団体の名称（ふりがな）", PROFILE_NAME_MAX_LENGTH)
    _check_text(errors, profile.office_address, "profile.officeAddress",
                "主たる事務所の所在地", PROFILE_ADDRESS_MAX_LENGTH)

    details = profile.details
    _validate_person(errors, details.representative,
                     "profile.details.representative", "代表者")
    _validate_person(errors, details.accountant,
                     "profile.details.accountant", "会計責任者")

    area_path = "profile.details.activityArea"
    if not details.activity_area:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, area_path, "活動区域が選択されていません",
        ))
    elif details.activity_area not in ACTIVITY_AREAS:
        errors.append(ValidationError(
            ValidationErrorCode.INVALID_VALUE, area_path, "活動区域の値が不正です",
        ))

    relation_path = "profile.details.dietMemberRelation"
    relation = details.diet_member_relation
    if relation is None:
        errors.append(ValidationError(
            ValidationErrorCode.REQUIRED, relation_path, "国会議員関係政治団体の区分が選択されていません",
        ))
    elif relation.type not in DIET_RELATION_TYPES:
        errors.append(ValidationError(
            ValidationErrorCode.INVALID_VALUE, relation_path, "国会議員関係政治団体の区分の値が不正です",
        ))

    return errors


# =============================================================================
# Donations and income
# =============================================================================


def validate_personal_donations(section: PersonalDonationSection) -> list[ValidationError]:
    errors: list[ValidationError] = []
    base = "donations.personalDonations"
    for i, row in enumerate(section.rows):
        path = f"{base}.rows[{i}]"
        label = _row_label("個人からの寄附", i)
        _check_text(errors, row.donor_name, f"{path}.kifusyaNm", f"{label}寄附者氏名", ROW_NAME_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)
        _check_date(errors, row.transaction_date, f"{path}.dt", label)
        _check_text(errors, row.address, f"{path}.adr", f"{label}住所", ROW_ADDRESS_MAX_LENGTH)
        _check_text(errors, row.occupation, f"{path}.syokugyo", f"{label}職業",
                    OCCUPATION_MAX_LENGTH, required=False)
    return errors


def validate_donations(donation: DonationData) -> list[ValidationError]:
    return validate_personal_donations(donation.personal_donations)


def validate_income(income: IncomeData) -> list[ValidationError]:
    """事業収入 / 借入金 / 交付金 / その他の収入."""
    errors: list[ValidationError] = []

    for i, row in enumerate(income.business_income.rows):
        path = f"income.businessIncome.rows[{i}]"
        label = _row_label("事業による収入", i)
        _check_text(errors, row.business_type, f"{path}.gigyouSyurui", f"{label}事業の種類",
                    ROW_CATEGORY_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)

    for i, row in enumerate(income.loan_income.rows):
        path = f"income.loanIncome.rows[{i}]"
        label = _row_label("借入金", i)
        _check_text(errors, row.lender, f"{path}.kariiresaki", f"{label}借入先",
                    ROW_CATEGORY_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)

    for i, row in enumerate(income.grant_income.rows):
        path = f"income.grantIncome.rows[{i}]"
        label = _row_label("本部又は支部から供与された交付金", i)
        _check_text(errors, row.headquarters_name, f"{path}.honsibuNm", f"{label}本支部名称",
                    ROW_NAME_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)
        _check_date(errors, row.transaction_date, f"{path}.dt", label)
        _check_text(errors, row.office_address, f"{path}.jimuAdr", f"{label}事務所の所在地",
                    GRANT_OFFICE_ADDRESS_MAX_LENGTH)

    for i, row in enumerate(income.other_income.rows):
        path = f"income.otherIncome.rows[{i}]"
        label = _row_label("その他の収入", i)
        _check_text(errors, row.summary, f"{path}.tekiyou", f"{label}摘要",
                    ROW_CATEGORY_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)

    return errors


# =============================================================================
# Expenses
# =============================================================================


def validate_expense_rows(
    rows: Sequence[RegularExpenseRow | PoliticalExpenseRow],
    base_path: str,
    section_name: str,
) -> list[ValidationError]:
    """目的 / 金額 / 年月日 / 氏名 / 住所 for every row of one sheet."""
    errors: list[ValidationError] = []
    for i, row in enumerate(rows):
        path = f"{base_path}.rows[{i}]"
        label = _row_label(section_name, i)
        _check_text(errors, row.purpose, f"{path}.mokuteki", f"{label}目的", ROW_CATEGORY_MAX_LENGTH)
        _check_amount(errors, row.amount, f"{path}.kingaku", label)
        _check_date(errors, row.transaction_date, f"{path}.dt", label)
        _check_text(errors, row.payee_name, f"{path}.nm", f"{label}氏名", ROW_NAME_MAX_LENGTH)
        _check_text(errors, row.payee_address, f"{path}.adr", f"{label}住所", ROW_ADDRESS_MAX_LENGTH)
    return errors


def validate_regular_expense_section(
    category: ReportCategory, section: Section[RegularExpenseRow],
) -> list[ValidationError]:
    base_path, name = _SECTION_PATHS[category]
    return validate_expense_rows(section.rows, base_path, name)


def validate_expenses(expense: ExpenseData) -> list[ValidationError]:
    """
    Regular sheets use ``expenses.<category>.rows[i]``; political sheets
    are indexed per HIMOKU, ``expenses.<category>[k].rows[i]``, and their
    labels name the HIMOKU.
    """
    errors: list[ValidationError] = []
    for category, section in expense.regular_sections():
        errors.extend(validate_regular_expense_section(category, section))
    for category, sections in expense.political_sections():
        base_path, name = _SECTION_PATHS[category]
        for k, section in enumerate(sections):
            sheet_name = f"{name}（{section.himoku}）" if section.himoku else name
            errors.extend(validate_expense_rows(section.rows, f"{base_path}[{k}]", sheet_name))
    return errors


def validate_grant_expenditure(section: GrantExpenditureSection) -> list[ValidationError]:
    """本部又は支部に対する交付金の支出 (SYUUSHI07_16)."""
    errors: list[ValidationError] = []
    for i, row in enumerate(section.rows):
        path = f"expenses.grantExpenditures.rows[{i}]"
        label = _row_label("本部又は支部に対する交付金の支出", i)
        if not row.expense_item:
            errors.append(ValidationError(
                ValidationErrorCode.REQUIRED, f"{path}.shisyutuKmk",
                f"{label}支出項目が入力されていません",
            ))
        _check_amount(errors, row.amount, f"{path}.kingaku", label)
        _check_date(errors, row.transaction_date, f"{path}.dt", label)
        _check_text(errors, row.headquarters_name, f"{path}.honsibuNm", f"{label}本支部名称",
                    ROW_NAME_MAX_LENGTH, required=False)
        _check_text(errors, row.office_address, f"{path}.jimuAdr", f"{label}事務所の所在地",
                    ROW_ADDRESS_MAX_LENGTH, required=False)
    return errors


# =============================================================================
# Whole report
# =============================================================================


def validate_report(report: ReportData) -> ValidationResult:
    """Run every validator and aggregate the errors in document order."""
    errors: list[ValidationError] = []
    errors.extend(validate_profile(report.profile))
    errors.extend(validate_donations(report.donation))
    errors.extend(validate_income(report.income))
    errors.extend(validate_expenses(report.expense))
    errors.extend(validate_grant_expenditure(report.grant_expenditure))
    return ValidationResult.from_errors(errors)
