"""
ReportSchema -- the report format definition.

Defines the human-authored, reviewable description of the government
report format: XML HEAD constants, the known-form catalog, the
presence-flag layout, disclosure thresholds, text limits and interim
placeholder values. YAML sets are parsed into these types by the loader
and injected into the compiler; nothing here holds executable logic.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Document layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeadEntry:
    """One ``<HEAD>`` child element, in document order."""

    tag: str
    value: str


# Sheets a presence flag can point at. Apart from profile and summary each
# one is a transaction category of the compiler; 人件費 has no sheet.
FLAG_SHEETS: frozenset[str] = frozenset({
    "profile",
    "summary",
    "personal_donations",
    "business_income",
    "loan_income",
    "grant_income",
    "other_income",
    "utility_expenses",
    "supplies_expenses",
    "office_expenses",
    "organization_expenses",
    "election_expenses",
    "publication_expenses",
    "advertising_expenses",
    "fundraising_party_expenses",
    "other_business_expenses",
    "research_expenses",
    "donation_grant_expenses",
    "other_political_expenses",
})

# Profile and summary are always printed and always lead the flag string.
FIXED_FLAG_POSITIONS: tuple[tuple[str, int], ...] = (("profile", 0), ("summary", 1))


@dataclass(frozen=True)
class FlagPosition:
    """Maps a report sheet to its index in the SYUUSHI_UMU presence string."""

    sheet: str
    form_id: str
    position: int


# ---------------------------------------------------------------------------
# Disclosure rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CounterpartRule:
    """A category that needs counterpart detail.

    ``form_id`` is the sheet that itemizes the category. ``threshold`` is
    the inclusive yen cutoff for itemization, or None when every
    transaction is itemized.
    """

    transaction_type: str  # "income" or "expense"
    category_key: str
    form_id: str
    threshold: int | None = None


@dataclass(frozen=True)
class TextLimits:
    """Maximum character counts applied when building report rows."""

    category: int = 200
    name: int = 120
    address: int = 120
    grant_office_address: int = 80
    occupation: int = 50
    bikou_memo: int = 160
    bikou_income_total: int = 200
    bikou_expense_total: int = 100
    bikou_donation_memo: int = 70
    bikou_donation_total: int = 100


@dataclass(frozen=True)
class PartyPlaceholder:
    """Interim donor/counterpart values used until real records are joined."""

    name: str
    address: str
    occupation: str = ""


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportSchema:
    """The complete, immutable report format definition."""

    schema_id: str
    version: int
    xml_head: tuple[HeadEntry, ...]
    known_forms: tuple[str, ...]
    flag_length: int
    flag_positions: tuple[FlagPosition, ...]
    counterpart_rules: tuple[CounterpartRule, ...]
    form_thresholds: tuple[tuple[str, int], ...]
    text_limits: TextLimits
    donor_placeholder: PartyPlaceholder
    counterpart_placeholder: PartyPlaceholder
    grant_expenditure_labels: tuple[tuple[str, str], ...]
    description: str = ""
    checksum: str = ""

    def form_threshold(self, form_id: str) -> int:
        """Cutoff for a bucketed form outside the counterpart-detail rules."""
        for form, threshold in self.form_thresholds:
            if form == form_id:
                return threshold
        raise KeyError(f"No itemization threshold configured for {form_id}")

    def flag_position(self, sheet: str) -> int | None:
        for entry in self.flag_positions:
            if entry.sheet == sheet:
                return entry.position
        return None

    def grant_expenditure_label(self, sheet: str) -> str:
        for key, label in self.grant_expenditure_labels:
            if key == sheet:
                return label
        raise KeyError(f"No grant expenditure label configured for {sheet}")
