"""
Fixtures and factories for the report module tests.

Provides:
- ``make_transaction`` / ``make_profile`` factory helpers
- ``InMemoryTransactionSource`` and ``InMemoryProfileRepository``
- ``schema`` / ``report_config`` / ``rules`` loaded from the bundled set
"""

from collections.abc import Sequence
from datetime import date

import pytest

from fund_config import get_report_schema
from fund_kernel.domain.clock import DeterministicClock
from fund_modules.report.config import ReportConfig
from fund_modules.report.models import (
    PartyInfo,
    ReportCategory,
    Transaction,
    TransactionType,
)
from fund_modules.report.profile import OrganizationReportProfile
from fund_modules.report.sources import TransactionFilters


_EXPENSE_PREFIX = "expense"


def make_transaction(
    amount=10_000,
    *,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    transaction_no: str = "1",
    transaction_date: date = date(2024, 6, 1),
    category_key: str | None = None,
    friendly_category: str | None = "事務用品",
    memo: str | None = None,
    counterpart: PartyInfo | None = None,
    donor: PartyInfo | None = None,
    is_grant_expenditure: bool = False,
    receipt_type: int | None = None,
) -> Transaction:
    """Build a transaction carrying ``amount`` on its natural side."""
    if transaction_type is TransactionType.EXPENSE:
        debit, credit = amount, 0
    else:
        debit, credit = 0, amount
    return Transaction(
        transaction_no=transaction_no,
        transaction_date=transaction_date,
        transaction_type=transaction_type,
        category_key=category_key or f"{transaction_type.value}_test",
        friendly_category=friendly_category,
        memo=memo,
        debit_amount=debit,
        credit_amount=credit,
        counterpart=counterpart,
        donor=donor,
        is_grant_expenditure=is_grant_expenditure,
        receipt_type=receipt_type,
    )


def make_income(amount=10_000, **kwargs) -> Transaction:
    return make_transaction(amount, transaction_type=TransactionType.INCOME, **kwargs)


def make_party(name="株式会社テスト", address="東京都港区芝公園4-2-8", occupation="") -> PartyInfo:
    return PartyInfo(name=name, address=address, occupation=occupation)


def make_profile_dict(**overrides) -> dict:
    """A complete, valid profile in the camelCase JSON shape."""
    data = {
        "id": "profile-1",
        "politicalOrganizationId": "org-1",
        "financialYear": 2024,
        "officialName": "テスト政治団体",
        "officialNameKana": "てすとせいじだんたい",
        "officeAddress": "東京都千代田区永田町1-7-1",
        "officeAddressBuilding": "テストビル3階",
        "details": {
            "representative": {"lastName": "山田", "firstName": "太郎"},
            "accountant": {"lastName": "鈴木", "firstName": "花子"},
            "contactPersons": [
                {"id": "c1", "lastName": "田中", "firstName": "一郎", "tel": "03-1234-5678"},
            ],
            "organizationType": "01",
            "activityArea": "1",
            "dietMemberRelation": {"type": "0"},
        },
    }
    data.update(overrides)
    return data


def make_profile(**overrides) -> OrganizationReportProfile:
    return OrganizationReportProfile.from_dict(make_profile_dict(**overrides))


class InMemoryTransactionSource:
    """TransactionSource backed by a dict of category -> transactions."""

    def __init__(
        self,
        transactions: dict[ReportCategory, Sequence[Transaction]] | None = None,
        failures: dict[ReportCategory, Exception] | None = None,
    ):
        self._transactions = transactions or {}
        self._failures = failures or {}
        self.calls: list[tuple[TransactionFilters, ReportCategory]] = []

    def find_transactions(
        self, filters: TransactionFilters, category: ReportCategory,
    ) -> Sequence[Transaction]:
        self.calls.append((filters, category))
        if category in self._failures:
            raise self._failures[category]
        return list(self._transactions.get(category, ()))


class InMemoryProfileRepository:
    """ProfileRepository over a dict keyed by (organization_id, year)."""

    def __init__(
        self,
        profiles: dict[tuple[str, int], OrganizationReportProfile] | None = None,
        slugs: dict[str, str] | None = None,
    ):
        self._profiles = profiles or {}
        self._slugs = slugs or {}

    def find_by_organization_and_year(
        self, organization_id: str, financial_year: int,
    ) -> OrganizationReportProfile | None:
        return self._profiles.get((organization_id, financial_year))

    def get_organization_slug(self, organization_id: str) -> str | None:
        return self._slugs.get(organization_id)


@pytest.fixture(scope="session")
def schema():
    return get_report_schema()


@pytest.fixture
def report_config(schema):
    return ReportConfig(schema=schema)


@pytest.fixture
def rules(report_config):
    return report_config.conversion_rules


@pytest.fixture
def clock():
    return DeterministicClock()
