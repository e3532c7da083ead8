"""
Tests for the section converters.

Covers round-then-bucket at each form threshold, row numbering, HIMOKU
grouping and ordering, and placeholder parties.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from fund_modules.report.converters import (
    EXPENSE_CONVERTERS,
    INCOME_CONVERTERS,
    convert_business_income,
    convert_grant_income,
    convert_loan_income,
    convert_other_income,
    convert_personal_donations,
    convert_personnel_expenses,
    convert_political_expenses,
    convert_regular_expenses,
)
from fund_modules.report.models import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    PartyInfo,
)
from tests.report.conftest import make_income, make_party, make_transaction

# =============================================================================
# Personal donations (SYUUSHI07_07)
# =============================================================================


class TestConvertPersonalDonations:

    def test_one_row_per_donation(self, rules):
        donor = PartyInfo(name="山田太郎", address="東京都新宿区", occupation="会社員")
        section = convert_personal_donations([
            make_income(30_000, transaction_no="1", donor=donor),
            make_income(1_000, transaction_no="2", donor=donor),
        ], rules)

        assert section.total_amount == 31_000
        assert [r.row_number for r in section.rows] == ["1", "2"]
        assert section.rows[0].donor_name == "山田太郎"
        assert section.rows[0].occupation == "会社員"
        assert section.other_amount == 0
        assert section.under_threshold_amount is None

    def test_missing_donor_uses_placeholder(self, rules):
        section = convert_personal_donations([make_income(5_000)], rules)
        row = section.rows[0]
        assert row.party_is_placeholder
        assert row.donor_name == rules.donor_placeholder.name
        assert row.occupation == rules.donor_placeholder.occupation

    def test_donation_bikou_limits(self, rules):
        section = convert_personal_donations(
            [make_income(5_000, memo="あ" * 90, transaction_no="3", donor=make_party())],
            rules,
        )
        bikou = section.rows[0].bikou
        assert bikou == "あ" * 70 + " / MF行番号: 3"
        assert len(bikou) <= 100

    def test_empty(self, rules):
        section = convert_personal_donations([], rules)
        assert section.total_amount == 0
        assert section.rows == ()
        assert not section.has_data


# =============================================================================
# Itemized income (SYUUSHI07_03 / 07_04 / 07_05)
# =============================================================================


class TestItemizedIncome:

    def test_business_income_uses_friendly_category(self, rules):
        section = convert_business_income(
            [make_income(120_000, friendly_category="機関紙発行", memo="4月号")], rules,
        )
        row = section.rows[0]
        assert row.business_type == "機関紙発行"
        assert row.bikou == "4月号 / MF行番号: 1"
        assert section.total_amount == 120_000

    def test_small_amounts_still_itemized(self, rules):
        section = convert_business_income([make_income(1)], rules)
        assert len(section.rows) == 1

    def test_loan_income_lender_is_counterpart(self, rules):
        section = convert_loan_income(
            [make_income(1_000_000, counterpart=make_party(name="テスト銀行"))], rules,
        )
        assert section.rows[0].lender == "テスト銀行"

    def test_grant_income_truncates_office_address(self, rules):
        party = make_party(name="本部", address="あ" * 100)
        section = convert_grant_income([make_income(200_000, counterpart=party)], rules)
        row = section.rows[0]
        assert row.headquarters_name == "本部"
        assert len(row.office_address) == rules.text_limits.grant_office_address
        assert row.transaction_date == date(2024, 6, 1)
        assert not row.party_is_placeholder

    def test_grant_income_placeholder_counterpart(self, rules):
        section = convert_grant_income([make_income(200_000)], rules)
        assert section.rows[0].party_is_placeholder

    def test_income_prefers_credit_side(self, rules):
        tx = make_income(0)
        tx = replace(tx, debit_amount=400, credit_amount=900)
        assert convert_business_income([tx], rules).total_amount == 900


# =============================================================================
# Bucketed income (SYUUSHI07_06)
# =============================================================================


class TestConvertOtherIncome:

    def test_threshold_is_inclusive(self, rules):
        section = convert_other_income([
            make_income(100_000, transaction_no="1"),
            make_income(99_999, transaction_no="2"),
        ], rules)
        assert len(section.rows) == 1
        assert section.rows[0].amount == 100_000
        assert section.under_threshold_amount == 99_999
        assert section.total_amount == 199_999

    def test_rounds_before_comparing(self, rules):
        section = convert_other_income([
            make_income(99_999.5, transaction_no="1"),
            make_income(99_999.4, transaction_no="2"),
        ], rules)
        assert [r.amount for r in section.rows] == [100_000]
        assert section.under_threshold_amount == 99_999

    def test_rows_renumbered_after_skipping(self, rules):
        section = convert_other_income([
            make_income(5_000, transaction_no="1"),
            make_income(150_000, transaction_no="2"),
            make_income(300_000, transaction_no="3"),
        ], rules)
        assert [r.row_number for r in section.rows] == ["1", "2"]
        assert [r.bikou for r in section.rows] == ["MF行番号: 2", "MF行番号: 3"]

    def test_all_under_threshold_has_data(self, rules):
        section = convert_other_income([make_income(500)], rules)
        assert section.rows == ()
        assert section.has_data


# =============================================================================
# Expenses (SYUUSHI07_13 / 07_14 / 07_15)
# =============================================================================


class TestConvertPersonnelExpenses:

    def test_total_only(self, rules):
        section = convert_personnel_expenses(
            [make_transaction(300_000.5), make_transaction(200_000)], rules,
        )
        assert section.total_amount == 500_001
        assert section.rows == ()


class TestConvertRegularExpenses:

    def test_rounding_example(self, rules):
        # 100000.50 rounds to 100001 and is itemized; 100000.40 rounds to
        # 100000 and is itemized too; 99999.40 stays under the threshold.
        section = convert_regular_expenses([
            make_transaction(100_000.50, transaction_no="1"),
            make_transaction(100_000.40, transaction_no="2"),
            make_transaction(99_999.40, transaction_no="3"),
        ], rules)
        assert [r.amount for r in section.rows] == [100_001, 100_000]
        assert section.under_threshold_amount == 99_999
        assert section.total_amount == 300_000

    def test_row_fields(self, rules):
        party = make_party(name="東京電力", address="東京都千代田区内幸町")
        section = convert_regular_expenses([make_transaction(
            120_000,
            friendly_category="電気代",
            counterpart=party,
            memo="3月分",
            transaction_no="42",
            receipt_type=1,
            is_grant_expenditure=True,
        )], rules)
        row = section.rows[0]
        assert row.purpose == "電気代"
        assert row.payee_name == "東京電力"
        assert row.payee_address == "東京都千代田区内幸町"
        assert row.bikou == "3月分 / MF行番号: 42"
        assert row.receipt_type == 1
        assert row.is_grant_expenditure

    def test_expense_bikou_limit(self, rules):
        section = convert_regular_expenses(
            [make_transaction(200_000, memo="い" * 150, counterpart=make_party())], rules,
        )
        assert len(section.rows[0].bikou) == rules.text_limits.bikou_expense_total

    def test_placeholder_counterpart(self, rules):
        section = convert_regular_expenses([make_transaction(200_000)], rules)
        row = section.rows[0]
        assert row.party_is_placeholder
        assert row.payee_name == rules.counterpart_placeholder.name

    def test_sum_invariant(self, rules):
        section = convert_regular_expenses(
            [make_transaction(a) for a in (10, 100_000, 250_000, 99_999, 3)], rules,
        )
        assert section.itemized_amount + section.under_threshold_amount == section.total_amount


class TestConvertPoliticalExpenses:

    def test_groups_by_himoku(self, rules):
        sections = convert_political_expenses([
            make_transaction(60_000, friendly_category="会議費", transaction_no="1"),
            make_transaction(10_000, friendly_category="交通費", transaction_no="2"),
            make_transaction(70_000, friendly_category="会議費", transaction_no="3"),
        ], rules)
        by_himoku = {s.himoku: s for s in sections}
        assert set(by_himoku) == {"会議費", "交通費"}
        meeting = by_himoku["会議費"]
        assert meeting.total_amount == 130_000
        assert [r.row_number for r in meeting.rows] == ["1", "2"]
        travel = by_himoku["交通費"]
        assert travel.rows == ()
        assert travel.under_threshold_amount == 10_000

    def test_threshold_is_fifty_thousand(self, rules):
        (section,) = convert_political_expenses([
            make_transaction(50_000, friendly_category="x"),
            make_transaction(49_999.49, friendly_category="x"),
        ], rules)
        assert [r.amount for r in section.rows] == [50_000]
        assert section.under_threshold_amount == 49_999

    def test_sorted_with_empty_himoku_last(self, rules):
        sections = convert_political_expenses([
            make_transaction(1, friendly_category=None),
            make_transaction(1, friendly_category="b"),
            make_transaction(1, friendly_category="a"),
        ], rules)
        assert [s.himoku for s in sections] == ["a", "b", ""]

    def test_kana_ordered_by_reading(self, rules):
        sections = convert_political_expenses([
            make_transaction(1, friendly_category="うんちん"),
            make_transaction(1, friendly_category="アルバイト"),
            make_transaction(1, friendly_category="いんさつ"),
        ], rules)
        assert [s.himoku for s in sections] == ["アルバイト", "いんさつ", "うんちん"]

    def test_full_width_latin_sorts_with_ascii(self, rules):
        sections = convert_political_expenses([
            make_transaction(1, friendly_category="b"),
            make_transaction(1, friendly_category="会議費"),
            make_transaction(1, friendly_category="Ａ"),
        ], rules)
        assert [s.himoku for s in sections] == ["Ａ", "b", "会議費"]

    def test_empty(self, rules):
        assert convert_political_expenses([], rules) == ()


# =============================================================================
# Dispatch tables
# =============================================================================


class TestDispatch:

    def test_every_expense_category_has_converter(self):
        assert set(EXPENSE_CONVERTERS) == set(EXPENSE_CATEGORIES)

    def test_every_income_category_has_converter(self):
        assert set(INCOME_CONVERTERS) == set(INCOME_CATEGORIES)

    @pytest.mark.parametrize("category", INCOME_CATEGORIES)
    def test_income_converters_accept_empty(self, category, rules):
        assert INCOME_CONVERTERS[category]([], rules).total_amount == 0
