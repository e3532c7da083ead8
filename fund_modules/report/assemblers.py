"""
Section assemblers -- fetch categorized transactions and convert them.

Responsibility:
    One assembler per report area (donations, income, expenses). Each
    issues its category fetches concurrently against the TransactionSource,
    waits for all of them, then runs the pure converters.

Architecture position:
    The only report component that performs I/O (through the injected
    source). Everything downstream is pure.

Failure modes:
    - Fail fast: the first fetch error cancels fetches not yet started and
      is re-raised unchanged. No partial section is ever returned.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from fund_kernel.logging_config import get_logger
from fund_modules.report.config import ReportConfig
from fund_modules.report.converters import (
    EXPENSE_CONVERTERS,
    INCOME_CONVERTERS,
    convert_personal_donations,
)
from fund_modules.report.models import (
    DONATION_CATEGORIES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    DonationData,
    ExpenseData,
    IncomeData,
    ReportCategory,
    Transaction,
)
from fund_modules.report.sources import TransactionFilters, TransactionSource

logger = get_logger("modules.report.assemblers")


def fetch_categories(
    source: TransactionSource,
    filters: TransactionFilters,
    categories: Sequence[ReportCategory],
    max_workers: int,
) -> dict[ReportCategory, Sequence[Transaction]]:
    """
    Fetch every category concurrently and join on all of them.

    The result is keyed by category; completion order is irrelevant.
    """
    results: dict[ReportCategory, Sequence[Transaction]] = {}
    with ThreadPoolExecutor(
        max_workers=min(max_workers, len(categories)) or 1,
        thread_name_prefix="report-fetch",
    ) as pool:
        futures: dict[Future, ReportCategory] = {
            pool.submit(source.find_transactions, filters, category): category
            for category in categories
        }
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            category = futures[future]
            error = future.exception()
            if error is not None:
                for other in pending:
                    other.cancel()
                logger.error("assembler_fetch_failed", extra={
                    "category": category.value,
                    "organization_id": filters.organization_id,
                    "financial_year": filters.financial_year,
                    "error": str(error),
                })
                raise error
            results[category] = future.result()

    logger.debug("assembler_fetch_completed", extra={
        "categories": [c.value for c in categories],
        "transaction_count": sum(len(txs) for txs in results.values()),
    })
    return results


class _Assembler:
    """Shared wiring: the source plus the compiler configuration."""

    categories: tuple[ReportCategory, ...] = ()

    def __init__(self, source: TransactionSource, config: ReportConfig):
        self._source = source
        self._config = config

    def _fetch(self, filters: TransactionFilters) -> dict[ReportCategory, Sequence[Transaction]]:
        return fetch_categories(
            self._source, filters, self.categories, self._config.max_fetch_workers,
        )


class DonationAssembler(_Assembler):
    """SYUUSHI07_07 寄附."""

    categories = DONATION_CATEGORIES

    def assemble(self, filters: TransactionFilters) -> DonationData:
        fetched = self._fetch(filters)
        rules = self._config.conversion_rules
        return DonationData(
            personal_donations=convert_personal_donations(
                fetched[ReportCategory.PERSONAL_DONATIONS], rules,
            ),
        )


class IncomeAssembler(_Assembler):
    """SYUUSHI07_03 .. 07_06 収入."""

    categories = INCOME_CATEGORIES

    def assemble(self, filters: TransactionFilters) -> IncomeData:
        fetched = self._fetch(filters)
        rules = self._config.conversion_rules
        return IncomeData(**{
            category.value: INCOME_CONVERTERS[category](fetched[category], rules)
            for category in self.categories
        })


class ExpenseAssembler(_Assembler):
    """人件費 plus SYUUSHI07_14 / 07_15 支出."""

    categories = EXPENSE_CATEGORIES

    def assemble(self, filters: TransactionFilters) -> ExpenseData:
        fetched = self._fetch(filters)
        rules = self._config.conversion_rules
        return ExpenseData(**{
            category.value: EXPENSE_CONVERTERS[category](fetched[category], rules)
            for category in self.categories
        })
