"""
Collaborator protocols for report compilation.

Contract:
    TransactionSource.find_transactions() returns the transactions of one
    report category for one organization and year, already filtered and
    sorted by transaction date then transaction number.
    ProfileRepository returns the OrganizationReportProfile for a year.

Architecture: fund_modules/report. Interfaces only; persistence lives
behind them. Timeouts and retries belong to the implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from fund_modules.report.models import ReportCategory, Transaction
from fund_modules.report.profile import OrganizationReportProfile


@dataclass(frozen=True)
class TransactionFilters:
    """Scope of one compilation: a political organization and a financial year."""

    organization_id: str
    financial_year: int


@runtime_checkable
class TransactionSource(Protocol):
    """Protocol for fetching categorized ledger transactions."""

    def find_transactions(
        self, filters: TransactionFilters, category: ReportCategory,
    ) -> Sequence[Transaction]:
        """Transactions of ``category`` within ``filters``, in report order."""
        ...


@runtime_checkable
class ProfileRepository(Protocol):
    """Protocol for reading organization profiles."""

    def find_by_organization_and_year(
        self, organization_id: str, financial_year: int,
    ) -> OrganizationReportProfile | None:
        ...

    def get_organization_slug(self, organization_id: str) -> str | None:
        """URL-safe organization name used in output filenames."""
        ...
