"""
Tests for the report serializers.

Structure is asserted on the element tree from ``build_document``; the
rendered string is checked for declaration, escaping and layout only.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from fund_config.schema import FLAG_SHEETS, FlagPosition
from fund_modules.report.converters import (
    convert_other_income,
    convert_personal_donations,
    convert_political_expenses,
    convert_regular_expenses,
)
from fund_modules.report.models import (
    DonationData,
    ExpenseData,
    IncomeData,
    PartyInfo,
    ReportCategory,
    Section,
)
from fund_modules.report.serializers import (
    build_document,
    build_presence_flags,
    serialize_profile,
    serialize_report,
)
from fund_modules.report.service import assemble_report_data
from fund_modules.report.xml_writer import XML_DECLARATION
from tests.report.conftest import (
    make_income,
    make_party,
    make_profile,
    make_profile_dict,
    make_transaction,
)


@pytest.fixture
def build_report(report_config):
    def _build(profile=None, donation=None, income=None, expense=None):
        return assemble_report_data(
            profile or make_profile(),
            donation or DonationData(),
            income or IncomeData(),
            expense or ExpenseData(),
            report_config,
        )
    return _build


def _form_ids(book):
    return [child.tag for child in book][2:]


def _text(element, path):
    found = element.find(path)
    assert found is not None, path
    return found.text


# =============================================================================
# Document
# =============================================================================


class TestBuildDocument:

    def test_minimal_report_has_profile_and_summary_only(self, build_report, schema):
        book = build_document(build_report(), schema)
        assert book.tag == "BOOK"
        assert [c.tag for c in book][:2] == ["HEAD", "SYUUSHI_UMU_FLG"]
        assert _form_ids(book) == ["SYUUSHI07_01", "SYUUSHI07_02"]

    def test_head_from_schema(self, build_report, schema):
        head = build_document(build_report(), schema).find("HEAD")
        assert [(c.tag, c.text) for c in head] == [
            (entry.tag, entry.value) for entry in schema.xml_head
        ]
        assert _text(head, "VERSION") == "20081001"

    def test_form_order(self, build_report, schema, rules):
        grant_row = make_transaction(
            200_000, counterpart=make_party(), is_grant_expenditure=True,
        )
        report = build_report(
            donation=DonationData(personal_donations=convert_personal_donations(
                [make_income(10_000)], rules,
            )),
            income=IncomeData(
                business_income=Section(total_amount=1),
                loan_income=Section(total_amount=1),
                grant_income=Section(total_amount=1),
                other_income=Section(total_amount=1),
            ),
            expense=ExpenseData(
                utility_expenses=convert_regular_expenses([grant_row], rules),
                research_expenses=convert_political_expenses(
                    [make_transaction(60_000, counterpart=make_party())], rules,
                ),
            ),
        )
        assert _form_ids(build_document(report, schema)) == [
            "SYUUSHI07_01",
            "SYUUSHI07_02",
            "SYUUSHI07_07",
            "SYUUSHI07_03",
            "SYUUSHI07_04",
            "SYUUSHI07_05",
            "SYUUSHI07_06",
            "SYUUSHI07_14",
            "SYUUSHI07_13",
            "SYUUSHI07_15",
            "SYUUSHI07_16",
        ]

    def test_serialize_report_string(self, build_report, schema):
        xml = serialize_report(build_report(), schema)
        assert xml.startswith(XML_DECLARATION + "\n<BOOK>\n  <HEAD>\n")
        assert xml.endswith("</BOOK>")
        assert "<KAISAI_DT/>" in xml

    def test_special_characters_escaped(self, build_report, schema):
        profile = make_profile(officialName="A&B <会>")
        xml = serialize_report(build_report(profile=profile), schema)
        assert "<DANTAI_NM>A&amp;B &lt;会&gt;</DANTAI_NM>" in xml


# =============================================================================
# Presence flags
# =============================================================================


class TestPresenceFlags:

    def test_minimal(self, build_report, schema):
        flags = build_presence_flags(build_report(), schema)
        assert flags == "11" + "0" * 49
        assert len(flags) == schema.flag_length

    def test_other_income_only(self, build_report, schema, rules):
        report = build_report(income=IncomeData(
            other_income=convert_other_income([make_income(500)], rules),
        ))
        assert build_presence_flags(report, schema) == "110001" + "0" * 45

    def test_expense_positions(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            office_expenses=Section(total_amount=10),
            other_political_expenses=convert_political_expenses(
                [make_transaction(10)], rules,
            ),
        ))
        flags = build_presence_flags(report, schema)
        assert flags[23] == "1"
        assert flags[32] == "1"
        assert flags[21] == flags[22] == flags[24] == "0"

    def test_personnel_has_no_position(self, build_report, schema):
        report = build_report(expense=ExpenseData(
            personnel_expenses=Section(total_amount=100),
        ))
        assert build_presence_flags(report, schema) == "11" + "0" * 49

    def test_unknown_sheet_raises(self, build_report, schema, captured_logs):
        broken = replace(schema, flag_positions=(
            FlagPosition(sheet="asset_details", form_id="SYUUSHI07_18", position=40),
        ))
        with pytest.raises(ValueError, match="asset_details"):
            build_presence_flags(build_report(), broken)
        assert any(r["message"] == "presence_flag_unknown_sheet" for r in captured_logs())

    def test_flag_sheets_match_report_categories(self):
        categories = {c.value for c in ReportCategory} - {"personnel_expenses"}
        assert FLAG_SHEETS == categories | {"profile", "summary"}


# =============================================================================
# SYUUSHI07_01 / 07_02
# =============================================================================


class TestSerializeProfile:

    def test_basic_fields(self):
        root = serialize_profile(make_profile())
        assert _text(root, "HOUKOKU_NEN") == "2024"
        assert _text(root, "DANTAI_NM") == "テスト政治団体"
        assert _text(root, "JIM_APA_ADR") == "テストビル3階"
        assert _text(root, "DAI_NM1") == "山田"
        assert _text(root, "KAI_NM2") == "花子"
        assert _text(root, "KATU_KUKI") == "1"

    def test_contact_persons_fill_three_slots(self):
        root = serialize_profile(make_profile())
        assert _text(root, "TANTOU1_NM1") == "田中"
        assert _text(root, "TANTOU1_TEL") == "03-1234-5678"
        assert _text(root, "TANTOU2_NM1") is None
        assert _text(root, "TANTOU3_TEL") is None
        assert root.find("TANTOU4_NM1") is None

    def test_without_fund_management(self):
        root = serialize_profile(make_profile())
        assert _text(root, "SIKIN_UMU") == "0"
        assert _text(root, "SIKIN_KIKAN1") is None
        assert _text(root, "SIKIN_KIKAN_FUKUSU") is None

    def test_fund_management_periods(self):
        data = make_profile_dict()
        data["details"]["fundManagement"] = {
            "publicPositionName": "衆議院議員",
            "publicPositionType": "1",
            "applicant": {"lastName": "山田", "firstName": "太郎"},
            "periods": [
                {"id": "p1", "from": "R5/1/1", "to": "R5/12/31"},
                {"id": "p2", "from": "R6/1/1", "to": "R6/3/31"},
                {"id": "p3", "from": "R6/4/1", "to": "R6/12/31"},
            ],
        }
        root = serialize_profile(make_profile(**data))
        assert _text(root, "SIKIN_UMU") == "1"
        assert _text(root, "KOSYOKU_NM") == "衆議院議員"
        assert _text(root, "SIKIN_TODOKE_NM1") == "山田"
        assert _text(root, "SIKIN_KIKAN1") == "R5/1/1"
        assert _text(root, "SIKIN_KIKAN2") == "R5/12/31"
        assert _text(root, "SIKIN_KIKAN_FUKUSU") == "R6/1/1～R6/3/31,R6/4/1～R6/12/31"

    def test_diet_members_ignored_for_type_zero(self):
        data = make_profile_dict()
        data["details"]["dietMemberRelation"] = {
            "type": "0",
            "members": [{"id": "m1", "lastName": "佐藤", "firstName": "一"}],
        }
        root = serialize_profile(make_profile(**data))
        assert _text(root, "GIIN_DANTAI_KBN") == "0"
        assert _text(root, "GIIN1_KOSYOKU_NM_1") is None

    def test_diet_members(self):
        data = make_profile_dict()
        data["details"]["dietMemberRelation"] = {
            "type": "1",
            "members": [{
                "id": "m1", "lastName": "佐藤", "firstName": "一",
                "chamber": "1", "positionType": "2",
            }],
            "periods": [{"id": "p1", "from": "R6/1/1", "to": "R6/12/31"}],
        }
        root = serialize_profile(make_profile(**data))
        assert _text(root, "GIIN_DANTAI_KBN") == "1"
        assert _text(root, "GIIN1_KOSYOKU_NM_1") == "佐藤"
        assert _text(root, "GIIN1_KOSYOKU_NM") == "1"
        assert _text(root, "GIIN1_KOSYOKU_KBN") == "2"
        assert _text(root, "GIIN2_KOSYOKU_NM_1") is None
        assert _text(root, "GIIN_KIKAN1") == "R6/1/1"


class TestSerializeSummary:

    def test_amounts(self, build_report, schema, rules):
        report = build_report(
            donation=DonationData(personal_donations=convert_personal_donations(
                [make_income(30_000)], rules,
            )),
            expense=ExpenseData(personnel_expenses=Section(total_amount=10_000)),
        )
        sheet = build_document(report, schema).find("SYUUSHI07_02/SHEET")
        assert _text(sheet, "SYUNYU_SGK") == "30000"
        assert _text(sheet, "ZENNEN_KKS_GK") == "0"
        assert _text(sheet, "HONNEN_SYUNYU_GK") == "30000"
        assert _text(sheet, "SISYUTU_SGK") == "10000"
        assert _text(sheet, "YOKUNEN_KKS_GK") == "20000"
        assert _text(sheet, "KOJIN_KIFU_GK") == "30000"
        assert _text(sheet, "KIFU_GKEI_GK") == "30000"

    def test_out_of_scope_amounts_are_zero(self, build_report, schema):
        sheet = build_document(build_report(), schema).find("SYUUSHI07_02/SHEET")
        assert _text(sheet, "HOJIN_KIFU_GK") == "0"
        assert _text(sheet, "KOJIN_FUTAN_SU") == "0"
        assert _text(sheet, "HOJIN_KIFU_BIKOU") is None


# =============================================================================
# Detail forms
# =============================================================================


class TestSerializeDetailForms:

    def test_personal_donation_row(self, build_report, schema, rules):
        donor = PartyInfo(name="山田太郎", address="東京都新宿区", occupation="会社員")
        report = build_report(donation=DonationData(
            personal_donations=convert_personal_donations(
                [make_income(30_000, donor=donor, transaction_date=date(2025, 1, 15))],
                rules,
            ),
        ))
        sheet = build_document(report, schema).find("SYUUSHI07_07/KUBUN1/SHEET")
        assert _text(sheet, "KINGAKU_GK") == "30000"
        assert _text(sheet, "SONOTA_GK") is None
        row = sheet.find("ROW")
        assert [c.tag for c in row] == [
            "ICHIREN_NO", "KIFUSYA_NM", "KINGAKU", "DT", "ADR",
            "SYOKUGYO", "BIKOU", "SEQ_NO", "ZEIGAKUKOUJYO", "ROWKBN",
        ]
        assert _text(row, "DT") == "R7/1/15"
        assert _text(row, "ZEIGAKUKOUJYO") == "0"
        assert _text(row, "ROWKBN") == "0"

    def test_other_income_miman(self, build_report, schema, rules):
        report = build_report(income=IncomeData(other_income=convert_other_income(
            [make_income(150_000, friendly_category="雑収入"), make_income(2_000)], rules,
        )))
        sheet = build_document(report, schema).find("SYUUSHI07_06/SHEET")
        assert _text(sheet, "KINGAKU_GK") == "152000"
        assert _text(sheet, "MIMAN_GK") == "2000"
        assert _text(sheet, "ROW/TEKIYOU") == "雑収入"

    def test_regular_expenses_three_kubun(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            supplies_expenses=convert_regular_expenses(
                [make_transaction(120_000, counterpart=make_party(), receipt_type=2)], rules,
            ),
        ))
        root = build_document(report, schema).find("SYUUSHI07_14")
        assert [c.tag for c in root] == ["KUBUN1", "KUBUN2", "KUBUN3"]
        assert _text(root, "KUBUN1/SHEET/KINGAKU_GK") == "0"
        assert root.find("KUBUN1/SHEET/ROW") is None
        row = root.find("KUBUN2/SHEET/ROW")
        assert _text(row, "MOKUTEKI") == "事務用品"
        assert _text(row, "RYOUSYU") == "2"

    def test_receipt_type_omitted_when_unset(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            utility_expenses=convert_regular_expenses(
                [make_transaction(120_000, counterpart=make_party())], rules,
            ),
        ))
        row = build_document(report, schema).find("SYUUSHI07_14/KUBUN1/SHEET/ROW")
        assert row.find("RYOUSYU") is None

    def test_political_expenses_empty_kubun_gets_one_sheet(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            election_expenses=convert_political_expenses([
                make_transaction(60_000, friendly_category="ポスター", counterpart=make_party()),
                make_transaction(3_000, friendly_category="交通費"),
            ], rules),
        ))
        root = build_document(report, schema).find("SYUUSHI07_15")
        assert [c.tag for c in root] == [f"KUBUN{i}" for i in range(1, 10)]

        empty = root.findall("KUBUN1/SHEET")
        assert len(empty) == 1
        assert _text(empty[0], "HIMOKU") is None
        assert _text(empty[0], "KINGAKU_GK") == "0"

        sheets = root.findall("KUBUN2/SHEET")
        assert [_text(s, "HIMOKU") for s in sheets] == ["ポスター", "交通費"]
        assert _text(sheets[1], "SONOTA_GK") == "3000"
        assert sheets[1].find("ROW") is None

    def test_expense_summary(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            personnel_expenses=Section(total_amount=5_000),
            research_expenses=convert_political_expenses([make_transaction(700)], rules),
        ))
        sheet = build_document(report, schema).find("SYUUSHI07_13/SHEET")
        assert _text(sheet, "JINKENHI_GK") == "5000"
        assert _text(sheet, "KOUNETU_GK") is None
        assert _text(sheet, "KEIHI_SKEI_GK") == "5000"
        assert _text(sheet, "SOSIKI_GK") == "0"
        assert _text(sheet, "CYOUSA_GK") == "700"
        assert _text(sheet, "KATUDOU_SKEI_GK") == "700"
        assert _text(sheet, "GKEI_GK") == "5700"
        assert _text(sheet, "SOSIKI_KOUFU") is None

    def test_grant_expenditure(self, build_report, schema, rules):
        report = build_report(expense=ExpenseData(
            office_expenses=convert_regular_expenses([make_transaction(
                300_000,
                counterpart=make_party(name="本部", address="東京都"),
                is_grant_expenditure=True,
                transaction_date=date(2024, 4, 1),
            )], rules),
        ))
        sheet = build_document(report, schema).find("SYUUSHI07_16/SHEET")
        assert _text(sheet, "KINGAKU_GK") == "300000"
        row = sheet.find("ROW")
        assert _text(row, "SHISYUTU_KMK") == "事務所費"
        assert _text(row, "DT") == "R6/4/1"
        assert _text(row, "HONSIBU_NM") == "本部"
