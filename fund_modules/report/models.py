"""
Report Domain Models.

The nouns of report compilation: the ledger transactions read from the
source, the per-form report rows they become, the sections that group
those rows, and the aggregates the serializers walk.

Every model is a frozen dataclass. Amounts on rows and sections are
integer yen that have already been rounded; raw transaction amounts stay
unrounded until a converter uses them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar, Union

from fund_modules.report.profile import OrganizationReportProfile

# Raw ledger amount as delivered by the source. None, NaN and negative
# values are treated as absent by the amount resolvers.
RawAmount = Union[int, float, Decimal, None]


class TransactionType(str, Enum):
    """Ledger side classification of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class ReportCategory(str, Enum):
    """One transaction list the source must supply per compilation.

    The value doubles as the sheet key used by the presence-flag table and
    the grant expenditure labels.
    """

    # SYUUSHI07_07
    PERSONAL_DONATIONS = "personal_donations"
    # SYUUSHI07_03 .. 07_06
    BUSINESS_INCOME = "business_income"
    LOAN_INCOME = "loan_income"
    GRANT_INCOME = "grant_income"
    OTHER_INCOME = "other_income"
    # SYUUSHI07_13 only (no detail sheet)
    PERSONNEL_EXPENSES = "personnel_expenses"
    # SYUUSHI07_14 KUBUN1..3
    UTILITY_EXPENSES = "utility_expenses"
    SUPPLIES_EXPENSES = "supplies_expenses"
    OFFICE_EXPENSES = "office_expenses"
    # SYUUSHI07_15 KUBUN1..9
    ORGANIZATION_EXPENSES = "organization_expenses"
    ELECTION_EXPENSES = "election_expenses"
    PUBLICATION_EXPENSES = "publication_expenses"
    ADVERTISING_EXPENSES = "advertising_expenses"
    FUNDRAISING_PARTY_EXPENSES = "fundraising_party_expenses"
    OTHER_BUSINESS_EXPENSES = "other_business_expenses"
    RESEARCH_EXPENSES = "research_expenses"
    DONATION_GRANT_EXPENSES = "donation_grant_expenses"
    OTHER_POLITICAL_EXPENSES = "other_political_expenses"


DONATION_CATEGORIES: tuple[ReportCategory, ...] = (
    ReportCategory.PERSONAL_DONATIONS,
)

INCOME_CATEGORIES: tuple[ReportCategory, ...] = (
    ReportCategory.BUSINESS_INCOME,
    ReportCategory.LOAN_INCOME,
    ReportCategory.GRANT_INCOME,
    ReportCategory.OTHER_INCOME,
)

REGULAR_EXPENSE_CATEGORIES: tuple[ReportCategory, ...] = (
    ReportCategory.UTILITY_EXPENSES,
    ReportCategory.SUPPLIES_EXPENSES,
    ReportCategory.OFFICE_EXPENSES,
)

POLITICAL_EXPENSE_CATEGORIES: tuple[ReportCategory, ...] = (
    ReportCategory.ORGANIZATION_EXPENSES,
    ReportCategory.ELECTION_EXPENSES,
    ReportCategory.PUBLICATION_EXPENSES,
    ReportCategory.ADVERTISING_EXPENSES,
    ReportCategory.FUNDRAISING_PARTY_EXPENSES,
    ReportCategory.OTHER_BUSINESS_EXPENSES,
    ReportCategory.RESEARCH_EXPENSES,
    ReportCategory.DONATION_GRANT_EXPENSES,
    ReportCategory.OTHER_POLITICAL_EXPENSES,
)

EXPENSE_CATEGORIES: tuple[ReportCategory, ...] = (
    (ReportCategory.PERSONNEL_EXPENSES,)
    + REGULAR_EXPENSE_CATEGORIES
    + POLITICAL_EXPENSE_CATEGORIES
)


# =============================================================================
# Source transactions
# =============================================================================


@dataclass(frozen=True)
class PartyInfo:
    """Counterpart or donor details joined onto a transaction.

    ``is_placeholder`` marks interim values that stand in for records not
    yet migrated; rows built from them carry ``party_is_placeholder``.
    """

    name: str
    address: str
    occupation: str = ""
    is_placeholder: bool = False


@dataclass(frozen=True)
class Transaction:
    """A ledger transaction as supplied by the TransactionSource."""

    transaction_no: str
    transaction_date: date
    transaction_type: TransactionType
    category_key: str
    friendly_category: str | None = None
    label: str | None = None
    description: str | None = None
    memo: str | None = None
    debit_amount: RawAmount = 0
    credit_amount: RawAmount = 0
    debit_partner: str | None = None
    credit_partner: str | None = None
    counterpart: PartyInfo | None = None
    donor: PartyInfo | None = None
    is_grant_expenditure: bool = False
    receipt_type: int | None = None


# =============================================================================
# Report rows (one variant per form)
# =============================================================================


@dataclass(frozen=True)
class BusinessIncomeRow:
    """SYUUSHI07_03 事業による収入."""

    row_number: str
    amount: int
    business_type: str  # GIGYOU_SYURUI
    bikou: str = ""


@dataclass(frozen=True)
class LoanIncomeRow:
    """SYUUSHI07_04 借入金."""

    row_number: str
    amount: int
    lender: str  # KARIIRESAKI
    bikou: str = ""


@dataclass(frozen=True)
class GrantIncomeRow:
    """SYUUSHI07_05 本部又は支部から供与された交付金."""

    row_number: str
    amount: int
    headquarters_name: str  # HONSIBU_NM
    transaction_date: date
    office_address: str  # JIMU_ADR
    bikou: str = ""
    party_is_placeholder: bool = False


@dataclass(frozen=True)
class OtherIncomeRow:
    """SYUUSHI07_06 その他の収入."""

    row_number: str
    amount: int
    summary: str  # TEKIYOU
    bikou: str = ""


@dataclass(frozen=True)
class PersonalDonationRow:
    """SYUUSHI07_07 KUBUN1 個人からの寄附."""

    row_number: str
    amount: int
    donor_name: str  # KIFUSYA_NM
    transaction_date: date
    address: str
    occupation: str  # SYOKUGYO
    bikou: str = ""
    sequence_no: str | None = None  # SEQ_NO
    tax_deduction: str = "0"  # ZEIGAKUKOUJYO: 0=不要, 1=必要
    row_kind: str = "0"  # ROWKBN: 0=明細, 1=小計
    party_is_placeholder: bool = False


@dataclass(frozen=True)
class _ExpenseRowFields:
    row_number: str
    amount: int
    purpose: str  # MOKUTEKI
    transaction_date: date
    payee_name: str  # NM
    payee_address: str  # ADR
    bikou: str = ""
    receipt_type: int | None = None  # RYOUSYU
    is_grant_expenditure: bool = False  # 交付金に係る支出
    party_is_placeholder: bool = False


@dataclass(frozen=True)
class RegularExpenseRow(_ExpenseRowFields):
    """SYUUSHI07_14 経常経費 (KUBUN1..3)."""


@dataclass(frozen=True)
class PoliticalExpenseRow(_ExpenseRowFields):
    """SYUUSHI07_15 政治活動費 (KUBUN1..9)."""


@dataclass(frozen=True)
class GrantExpenditureRow:
    """SYUUSHI07_16 本部又は支部に対する交付金の支出."""

    row_number: str
    amount: int
    source_category: ReportCategory
    expense_item: str  # SHISYUTU_KMK
    transaction_date: date
    headquarters_name: str  # HONSIBU_NM
    office_address: str  # JIMU_ADR
    bikou: str = ""


ReportRow = Union[
    BusinessIncomeRow,
    LoanIncomeRow,
    GrantIncomeRow,
    OtherIncomeRow,
    PersonalDonationRow,
    RegularExpenseRow,
    PoliticalExpenseRow,
    GrantExpenditureRow,
]

RowT = TypeVar(
    "RowT",
    BusinessIncomeRow,
    LoanIncomeRow,
    GrantIncomeRow,
    OtherIncomeRow,
    PersonalDonationRow,
    RegularExpenseRow,
    PoliticalExpenseRow,
    GrantExpenditureRow,
)


# =============================================================================
# Sections
# =============================================================================


@dataclass(frozen=True)
class Section(Generic[RowT]):
    """
    Rows of one form plus their totals.

    Guarantees:
        ``sum(row.amount) + (under_threshold_amount or 0) == total_amount``
        for every section a converter produces.
    """

    total_amount: int = 0
    rows: tuple[RowT, ...] = ()
    under_threshold_amount: int | None = None

    @property
    def has_data(self) -> bool:
        """True when the sheet must be emitted: any row or a nonzero total."""
        return bool(self.rows) or self.total_amount > 0

    @property
    def itemized_amount(self) -> int:
        return sum(row.amount for row in self.rows)


@dataclass(frozen=True)
class PoliticalExpenseSection(Section[PoliticalExpenseRow]):
    """One HIMOKU sheet of a SYUUSHI07_15 category."""

    himoku: str = ""


@dataclass(frozen=True)
class PersonalDonationSection(Section[PersonalDonationRow]):
    """SYUUSHI07_07 KUBUN1 with the その他の寄附 amount."""

    other_amount: int = 0  # SONOTA_GK


@dataclass(frozen=True)
class GrantExpenditureSection(Section[GrantExpenditureRow]):
    """SYUUSHI07_16; emitted only when at least one row was extracted."""

    @property
    def has_data(self) -> bool:
        return bool(self.rows)


def political_total(sections: tuple[PoliticalExpenseSection, ...]) -> int:
    """Sum of the totals of every HIMOKU sheet of one category."""
    return sum(s.total_amount for s in sections)


# =============================================================================
# Aggregates
# =============================================================================


@dataclass(frozen=True)
class DonationData:
    """SYUUSHI07_07 寄附."""

    personal_donations: PersonalDonationSection = field(
        default_factory=PersonalDonationSection
    )

    @property
    def total_amount(self) -> int:
        return self.personal_donations.total_amount


@dataclass(frozen=True)
class IncomeData:
    """SYUUSHI07_03 .. SYUUSHI07_06."""

    business_income: Section[BusinessIncomeRow] = field(default_factory=Section)
    loan_income: Section[LoanIncomeRow] = field(default_factory=Section)
    grant_income: Section[GrantIncomeRow] = field(default_factory=Section)
    other_income: Section[OtherIncomeRow] = field(default_factory=Section)

    @property
    def total_amount(self) -> int:
        return (
            self.business_income.total_amount
            + self.loan_income.total_amount
            + self.grant_income.total_amount
            + self.other_income.total_amount
        )


@dataclass(frozen=True)
class ExpenseData:
    """
    SYUUSHI07_14 / SYUUSHI07_15 sections plus the personnel total.

    Political categories hold one section per HIMOKU, sorted by HIMOKU with
    the empty HIMOKU last.
    """

    personnel_expenses: Section[RegularExpenseRow] = field(default_factory=Section)
    utility_expenses: Section[RegularExpenseRow] = field(default_factory=Section)
    supplies_expenses: Section[RegularExpenseRow] = field(default_factory=Section)
    office_expenses: Section[RegularExpenseRow] = field(default_factory=Section)
    organization_expenses: tuple[PoliticalExpenseSection, ...] = ()
    election_expenses: tuple[PoliticalExpenseSection, ...] = ()
    publication_expenses: tuple[PoliticalExpenseSection, ...] = ()
    advertising_expenses: tuple[PoliticalExpenseSection, ...] = ()
    fundraising_party_expenses: tuple[PoliticalExpenseSection, ...] = ()
    other_business_expenses: tuple[PoliticalExpenseSection, ...] = ()
    research_expenses: tuple[PoliticalExpenseSection, ...] = ()
    donation_grant_expenses: tuple[PoliticalExpenseSection, ...] = ()
    other_political_expenses: tuple[PoliticalExpenseSection, ...] = ()

    def regular_sections(self) -> tuple[tuple[ReportCategory, Section[RegularExpenseRow]], ...]:
        """KUBUN1..3 of SYUUSHI07_14 in sheet order."""
        return tuple(
            (category, getattr(self, category.value))
            for category in REGULAR_EXPENSE_CATEGORIES
        )

    def political_sections(
        self,
    ) -> tuple[tuple[ReportCategory, tuple[PoliticalExpenseSection, ...]], ...]:
        """KUBUN1..9 of SYUUSHI07_15 in sheet order."""
        return tuple(
            (category, getattr(self, category.value))
            for category in POLITICAL_EXPENSE_CATEGORIES
        )

    @property
    def has_regular_expense_sheet(self) -> bool:
        return any(section.has_data for _, section in self.regular_sections())

    @property
    def has_political_activity_sheet(self) -> bool:
        return any(
            section.has_data
            for _, sections in self.political_sections()
            for section in sections
        )


@dataclass(frozen=True)
class SummaryData:
    """SYUUSHI07_02 収支の総括表.

    None marks amounts outside the current scope; they are written as 0.
    """

    total_income: int  # SYUNYU_SGK = carryover + current-year income
    previous_carryover: int  # ZENNEN_KKS_GK
    current_year_income: int  # HONNEN_SYUNYU_GK
    total_expenditure: int  # SISYUTU_SGK
    next_carryover: int  # YOKUNEN_KKS_GK
    personal_donation_total: int  # KOJIN_KIFU_GK
    donation_subtotal: int  # KIFU_SKEI_GK
    donation_grand_total: int  # KIFU_GKEI_GK
    member_fee_amount: int | None = None  # KOJIN_FUTAN_KGK
    member_fee_count: int | None = None  # KOJIN_FUTAN_SU
    specific_donation_total: int | None = None  # TOKUTEI_KIFU_GK
    corporate_donation_total: int | None = None  # HOJIN_KIFU_GK
    political_donation_total: int | None = None  # SEIJI_KIFU_GK
    mediated_donation_total: int | None = None  # ATUSEN_GK
    anonymous_donation_total: int | None = None  # TOKUMEI_KIFU_GK
    personal_donation_bikou: str | None = None
    specific_donation_bikou: str | None = None
    corporate_donation_bikou: str | None = None
    political_donation_bikou: str | None = None
    donation_subtotal_bikou: str | None = None
    mediated_donation_bikou: str | None = None
    anonymous_donation_bikou: str | None = None
    donation_grand_total_bikou: str | None = None


@dataclass(frozen=True)
class ExpenseSummaryItem:
    """One line of SYUUSHI07_13: amount, grant-funded part, remarks."""

    amount: int | None = None
    grant_amount: int | None = None
    bikou: str | None = None


@dataclass(frozen=True)
class ExpenseSummaryData:
    """SYUUSHI07_13 支出項目別金額の内訳 (総括表)."""

    personnel: ExpenseSummaryItem
    utility: ExpenseSummaryItem
    supplies: ExpenseSummaryItem
    office: ExpenseSummaryItem
    regular_subtotal: ExpenseSummaryItem
    organization: ExpenseSummaryItem
    election: ExpenseSummaryItem
    business: ExpenseSummaryItem  # publication + advertising + party + other business
    publication: ExpenseSummaryItem
    advertising: ExpenseSummaryItem
    fundraising_party: ExpenseSummaryItem
    other_business: ExpenseSummaryItem
    research: ExpenseSummaryItem
    donation_grant: ExpenseSummaryItem
    other_political: ExpenseSummaryItem
    political_subtotal: ExpenseSummaryItem
    total_amount: int

    @property
    def has_data(self) -> bool:
        return self.total_amount > 0


@dataclass(frozen=True)
class ReportData:
    """
    The full aggregate for one compilation.

    Built fresh for every export; it has no identity and is never stored.
    """

    profile: OrganizationReportProfile
    summary: SummaryData
    donation: DonationData
    income: IncomeData
    expense: ExpenseData
    expense_summary: ExpenseSummaryData
    grant_expenditure: GrantExpenditureSection
