"""
Report serializers -- ReportData to the 収支報告書 XML tree.

Responsibility:
    Emit each form with the exact tag names and element order the import
    software expects, compute the SYUUSHI_UMU presence-flag string, and
    assemble the ``<BOOK>`` document.

Architecture position:
    Pure functions over already-converted, already-rounded sections. No
    I/O and no logging except on a misconfigured flag table.

Invariants:
    - Absent scalars are written as empty elements, never omitted.
    - Amounts are plain integer strings; dates are Wareki (``R7/1/15``).
    - Forms follow a fixed order: 07_01, 07_02, 07_07, 07_03, 07_04,
      07_05, 07_06, 07_14, 07_13, 07_15, 07_16.
    - SYUUSHI07_01 and SYUUSHI07_02 are always present; every other form
      is present only when it has data.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from fund_config.schema import ReportSchema
from fund_kernel.logging_config import get_logger
from fund_modules.report.formatting import format_amount, format_wareki_date
from fund_modules.report.models import (
    DONATION_CATEGORIES,
    INCOME_CATEGORIES,
    POLITICAL_EXPENSE_CATEGORIES,
    BusinessIncomeRow,
    ExpenseData,
    ExpenseSummaryData,
    ExpenseSummaryItem,
    GrantExpenditureSection,
    GrantIncomeRow,
    LoanIncomeRow,
    OtherIncomeRow,
    PersonalDonationSection,
    PoliticalExpenseSection,
    RegularExpenseRow,
    PoliticalExpenseRow,
    ReportCategory,
    ReportData,
    Section,
    SummaryData,
)
from fund_modules.report.profile import (
    MAX_CONTACT_PERSONS,
    MAX_DIET_MEMBERS,
    OrganizationReportProfile,
    Period,
)
from fund_modules.report.xml_writer import add_text, render_document

logger = get_logger("modules.report.serializers")

PERIOD_SEPARATOR = "～"


def _optional_amount(value: int | None) -> str:
    """Amount text, or "" (empty element) for None and zero."""
    return format_amount(value) if value else ""


# =============================================================================
# SYUUSHI07_01 団体の基本情報
# =============================================================================


def _periods(root: ET.Element, prefix: str, periods: tuple[Period, ...]) -> None:
    """First period in ``{prefix}1``/``{prefix}2``; the rest in ``{prefix}_FUKUSU``."""
    first = periods[0] if periods else None
    add_text(root, f"{prefix}1", first.from_date if first else "")
    add_text(root, f"{prefix}2", first.to_date if first else "")
    overflow = ",".join(
        f"{p.from_date}{PERIOD_SEPARATOR}{p.to_date}" for p in periods[1:]
    )
    add_text(root, f"{prefix}_FUKUSU", overflow)


def serialize_profile(profile: OrganizationReportProfile) -> ET.Element:
    root = ET.Element("SYUUSHI07_01")
    details = profile.details

    add_text(root, "HOUKOKU_NEN", str(profile.financial_year))
    add_text(root, "KAISAI_DT", details.specific_party_date)
    add_text(root, "DANTAI_NM", profile.official_name)
    add_text(root, "DANTAI_KANA", profile.official_name_kana)
    add_text(root, "JIM_ADR", profile.office_address)
    add_text(root, "JIM_APA_ADR", profile.office_address_building)

    representative = details.representative
    add_text(root, "DAI_NM1", representative.last_name if representative else "")
    add_text(root, "DAI_NM2", representative.first_name if representative else "")
    accountant = details.accountant
    add_text(root, "KAI_NM1", accountant.last_name if accountant else "")
    add_text(root, "KAI_NM2", accountant.first_name if accountant else "")

    for i in range(MAX_CONTACT_PERSONS):
        person = details.contact_persons[i] if i < len(details.contact_persons) else None
        add_text(root, f"TANTOU{i + 1}_NM1", person.last_name if person else "")
        add_text(root, f"TANTOU{i + 1}_NM2", person.first_name if person else "")
        add_text(root, f"TANTOU{i + 1}_TEL", person.tel if person else "")

    add_text(root, "DANTAI_KBN", details.organization_type)
    add_text(root, "KATU_KUKI", details.activity_area)

    fund = details.fund_management
    add_text(root, "SIKIN_UMU", "1" if fund else "0")
    add_text(root, "KOSYOKU_NM", fund.public_position_name if fund else "")
    add_text(root, "KOSYOKU_KBN", fund.public_position_type if fund else "")
    applicant = fund.applicant if fund else None
    add_text(root, "SIKIN_TODOKE_NM1", applicant.last_name if applicant else "")
    add_text(root, "SIKIN_TODOKE_NM2", applicant.first_name if applicant else "")
    _periods(root, "SIKIN_KIKAN", fund.periods if fund else ())

    relation = details.diet_member_relation
    relation_type = relation.type if relation else "0"
    add_text(root, "GIIN_DANTAI_KBN", relation_type)
    members = relation.members if relation and relation_type != "0" else ()
    for i in range(MAX_DIET_MEMBERS):
        member = members[i] if i < len(members) else None
        add_text(root, f"GIIN{i + 1}_KOSYOKU_NM_1", member.last_name if member else "")
        add_text(root, f"GIIN{i + 1}_KOSYOKU_NM_2", member.first_name if member else "")
        add_text(root, f"GIIN{i + 1}_KOSYOKU_NM", member.chamber if member else "")
        add_text(root, f"GIIN{i + 1}_KOSYOKU_KBN", member.position_type if member else "")
    _periods(
        root,
        "GIIN_KIKAN",
        relation.periods if relation and relation_type != "0" else (),
    )
    return root


# =============================================================================
# SYUUSHI07_02 収支の総括表
# =============================================================================


def serialize_summary(summary: SummaryData) -> ET.Element:
    root = ET.Element("SYUUSHI07_02")
    sheet = ET.SubElement(root, "SHEET")

    add_text(sheet, "SYUNYU_SGK", format_amount(summary.total_income))
    add_text(sheet, "ZENNEN_KKS_GK", format_amount(summary.previous_carryover))
    add_text(sheet, "HONNEN_SYUNYU_GK", format_amount(summary.current_year_income))
    add_text(sheet, "SISYUTU_SGK", format_amount(summary.total_expenditure))
    add_text(sheet, "YOKUNEN_KKS_GK", format_amount(summary.next_carryover))

    add_text(sheet, "KOJIN_FUTAN_KGK", format_amount(summary.member_fee_amount))
    add_text(sheet, "KOJIN_FUTAN_SU", format_amount(summary.member_fee_count))

    donation_lines = (
        ("KOJIN_KIFU", summary.personal_donation_total, summary.personal_donation_bikou),
        ("TOKUTEI_KIFU", summary.specific_donation_total, summary.specific_donation_bikou),
        ("HOJIN_KIFU", summary.corporate_donation_total, summary.corporate_donation_bikou),
        ("SEIJI_KIFU", summary.political_donation_total, summary.political_donation_bikou),
        ("KIFU_SKEI", summary.donation_subtotal, summary.donation_subtotal_bikou),
        ("ATUSEN", summary.mediated_donation_total, summary.mediated_donation_bikou),
        ("TOKUMEI_KIFU", summary.anonymous_donation_total, summary.anonymous_donation_bikou),
        ("KIFU_GKEI", summary.donation_grand_total, summary.donation_grand_total_bikou),
    )
    for prefix, amount, bikou in donation_lines:
        add_text(sheet, f"{prefix}_GK", format_amount(amount))
        add_text(sheet, f"{prefix}_BIKOU", bikou)
    return root


# =============================================================================
# SYUUSHI07_07 寄附の明細
# =============================================================================


def serialize_personal_donations(section: PersonalDonationSection) -> ET.Element:
    root = ET.Element("SYUUSHI07_07")
    sheet = ET.SubElement(ET.SubElement(root, "KUBUN1"), "SHEET")

    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    add_text(sheet, "SONOTA_GK", _optional_amount(section.other_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "KIFUSYA_NM", row.donor_name)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "DT", format_wareki_date(row.transaction_date))
        add_text(el, "ADR", row.address)
        add_text(el, "SYOKUGYO", row.occupation)
        add_text(el, "BIKOU", row.bikou)
        add_text(el, "SEQ_NO", row.sequence_no)
        add_text(el, "ZEIGAKUKOUJYO", row.tax_deduction)
        add_text(el, "ROWKBN", row.row_kind)
    return root


# =============================================================================
# SYUUSHI07_03 .. 07_06 収入
# =============================================================================


def serialize_business_income(section: Section[BusinessIncomeRow]) -> ET.Element:
    root = ET.Element("SYUUSHI07_03")
    sheet = ET.SubElement(root, "SHEET")
    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "GIGYOU_SYURUI", row.business_type)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "BIKOU", row.bikou)
    return root


def serialize_loan_income(section: Section[LoanIncomeRow]) -> ET.Element:
    root = ET.Element("SYUUSHI07_04")
    sheet = ET.SubElement(root, "SHEET")
    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "KARIIRESAKI", row.lender)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "BIKOU", row.bikou)
    return root


def serialize_grant_income(section: Section[GrantIncomeRow]) -> ET.Element:
    root = ET.Element("SYUUSHI07_05")
    sheet = ET.SubElement(root, "SHEET")
    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "HONSIBU_NM", row.headquarters_name)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "DT", format_wareki_date(row.transaction_date))
        add_text(el, "JIMU_ADR", row.office_address)
        add_text(el, "BIKOU", row.bikou)
    return root


def serialize_other_income(section: Section[OtherIncomeRow]) -> ET.Element:
    root = ET.Element("SYUUSHI07_06")
    sheet = ET.SubElement(root, "SHEET")
    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    add_text(sheet, "MIMAN_GK", _optional_amount(section.under_threshold_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "TEKIYOU", row.summary)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "BIKOU", row.bikou)
    return root


# =============================================================================
# SYUUSHI07_14 / 07_15 支出
# =============================================================================


def _expense_rows(
    sheet: ET.Element, rows: tuple[RegularExpenseRow | PoliticalExpenseRow, ...],
) -> None:
    for row in rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "MOKUTEKI", row.purpose)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "DT", format_wareki_date(row.transaction_date))
        add_text(el, "NM", row.payee_name)
        add_text(el, "ADR", row.payee_address)
        add_text(el, "BIKOU", row.bikou)
        if row.receipt_type is not None:
            add_text(el, "RYOUSYU", str(row.receipt_type))


def serialize_regular_expenses(expense: ExpenseData) -> ET.Element:
    """経常経費: KUBUN1 光熱水費, KUBUN2 備品・消耗品費, KUBUN3 事務所費."""
    root = ET.Element("SYUUSHI07_14")
    for index, (_, section) in enumerate(expense.regular_sections(), start=1):
        sheet = ET.SubElement(ET.SubElement(root, f"KUBUN{index}"), "SHEET")
        add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
        add_text(sheet, "SONOTA_GK", _optional_amount(section.under_threshold_amount))
        _expense_rows(sheet, section.rows)
    return root


def serialize_political_expenses(expense: ExpenseData) -> ET.Element:
    """
    政治活動費: KUBUN1..9, one SHEET per HIMOKU.

    A category without transactions still gets one empty SHEET so the
    KUBUN numbering stays positional.
    """
    root = ET.Element("SYUUSHI07_15")
    for index, (_, sections) in enumerate(expense.political_sections(), start=1):
        kubun = ET.SubElement(root, f"KUBUN{index}")
        for section in sections or (PoliticalExpenseSection(),):
            sheet = ET.SubElement(kubun, "SHEET")
            add_text(sheet, "HIMOKU", section.himoku)
            add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
            add_text(sheet, "SONOTA_GK", _optional_amount(section.under_threshold_amount))
            _expense_rows(sheet, section.rows)
    return root


# =============================================================================
# SYUUSHI07_13 支出項目別金額の内訳
# =============================================================================

_REGULAR_SUMMARY_TAGS = (
    ("personnel", "JINKENHI"),
    ("utility", "KOUNETU"),
    ("supplies", "BIHIN"),
    ("office", "JIMUSYO"),
)

_POLITICAL_SUMMARY_TAGS = (
    ("organization", "SOSIKI"),
    ("election", "SENKYO"),
    ("business", "SONOTA_JIGYO"),
    ("publication", "HAKKOU_JIGYO"),
    ("advertising", "SENDEN"),
    ("fundraising_party", "KAISAI"),
    ("other_business", "SONOTA"),
    ("research", "CYOUSA"),
    ("donation_grant", "KIFU"),
    ("other_political", "SONOTA_KEIHI"),
)


def _summary_item(
    sheet: ET.Element, prefix: str, item: ExpenseSummaryItem, *, always_amount: bool,
) -> None:
    if item.amount is None and not always_amount:
        add_text(sheet, f"{prefix}_GK")
    else:
        add_text(sheet, f"{prefix}_GK", format_amount(item.amount or 0))
    add_text(
        sheet,
        f"{prefix}_KOUFU",
        None if item.grant_amount is None else format_amount(item.grant_amount),
    )
    add_text(sheet, f"{prefix}_BIKOU", item.bikou)


def serialize_expense_summary(data: ExpenseSummaryData) -> ET.Element:
    root = ET.Element("SYUUSHI07_13")
    sheet = ET.SubElement(root, "SHEET")
    for attr, prefix in _REGULAR_SUMMARY_TAGS:
        _summary_item(sheet, prefix, getattr(data, attr), always_amount=False)
    _summary_item(sheet, "KEIHI_SKEI", data.regular_subtotal, always_amount=True)
    for attr, prefix in _POLITICAL_SUMMARY_TAGS:
        _summary_item(sheet, prefix, getattr(data, attr), always_amount=True)
    _summary_item(sheet, "KATUDOU_SKEI", data.political_subtotal, always_amount=True)
    add_text(sheet, "GKEI_GK", format_amount(data.total_amount))
    return root


# =============================================================================
# SYUUSHI07_16 本部又は支部に対する交付金の支出
# =============================================================================


def serialize_grant_expenditure(section: GrantExpenditureSection) -> ET.Element:
    root = ET.Element("SYUUSHI07_16")
    sheet = ET.SubElement(root, "SHEET")
    add_text(sheet, "KINGAKU_GK", format_amount(section.total_amount))
    for row in section.rows:
        el = ET.SubElement(sheet, "ROW")
        add_text(el, "ICHIREN_NO", row.row_number)
        add_text(el, "SHISYUTU_KMK", row.expense_item)
        add_text(el, "KINGAKU", format_amount(row.amount))
        add_text(el, "DT", format_wareki_date(row.transaction_date))
        add_text(el, "HONSIBU_NM", row.headquarters_name)
        add_text(el, "JIMU_ADR", row.office_address)
        add_text(el, "BIKOU", row.bikou)
    return root


# =============================================================================
# Presence flags and document
# =============================================================================


def _sheet_has_data(report: ReportData, sheet: str) -> bool:
    if sheet in ("profile", "summary"):
        return True
    try:
        category = ReportCategory(sheet)
    except ValueError:
        logger.error("presence_flag_unknown_sheet", extra={"sheet": sheet})
        raise ValueError(f"Unknown presence-flag sheet: {sheet}") from None

    if category in DONATION_CATEGORIES:
        return getattr(report.donation, category.value).has_data
    if category in INCOME_CATEGORIES:
        return getattr(report.income, category.value).has_data
    if category in POLITICAL_EXPENSE_CATEGORIES:
        return any(s.has_data for s in getattr(report.expense, category.value))
    return getattr(report.expense, category.value).has_data


def build_presence_flags(report: ReportData, schema: ReportSchema) -> str:
    """
    SYUUSHI_UMU: one "0"/"1" per position of the schema's flag layout.

    Profile and summary are always "1". Positions without a mapped sheet
    stay "0".
    """
    flags = ["0"] * schema.flag_length
    for entry in schema.flag_positions:
        if _sheet_has_data(report, entry.sheet):
            flags[entry.position] = "1"
    return "".join(flags)


def build_document(report: ReportData, schema: ReportSchema) -> ET.Element:
    """Assemble ``<BOOK>``: HEAD, SYUUSHI_UMU_FLG, then each present form."""
    book = ET.Element("BOOK")

    head = ET.SubElement(book, "HEAD")
    for entry in schema.xml_head:
        add_text(head, entry.tag, entry.value)
    flag_element = ET.SubElement(book, "SYUUSHI_UMU_FLG")
    add_text(flag_element, "SYUUSHI_UMU", build_presence_flags(report, schema))

    book.append(serialize_profile(report.profile))
    book.append(serialize_summary(report.summary))

    donations = report.donation.personal_donations
    if donations.has_data:
        book.append(serialize_personal_donations(donations))

    income = report.income
    if income.business_income.has_data:
        book.append(serialize_business_income(income.business_income))
    if income.loan_income.has_data:
        book.append(serialize_loan_income(income.loan_income))
    if income.grant_income.has_data:
        book.append(serialize_grant_income(income.grant_income))
    if income.other_income.has_data:
        book.append(serialize_other_income(income.other_income))

    if report.expense.has_regular_expense_sheet:
        book.append(serialize_regular_expenses(report.expense))
    if report.expense_summary.has_data:
        book.append(serialize_expense_summary(report.expense_summary))
    if report.expense.has_political_activity_sheet:
        book.append(serialize_political_expenses(report.expense))
    if report.grant_expenditure.has_data:
        book.append(serialize_grant_expenditure(report.grant_expenditure))

    return book


def serialize_report(report: ReportData, schema: ReportSchema) -> str:
    """Render the full document as a Unicode string with a Shift_JIS declaration."""
    return render_document(build_document(report, schema))
