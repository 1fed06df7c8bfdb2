"""
Household Ledger Facade

This module ties the services together behind one object, HouseholdLedger,
which is what an API layer or a script talks to:

- Entries and transfers      -> LedgerService
- Monthly reports            -> MonthlyAggregator
- Loans                      -> LoanTracker
- Categories                 -> CategoryService
- Homes and members          -> HomeService

DESIGN DECISION: The facade owns no logic of its own. It shares one
storage, one audit logger and one translator across all services so that
units of work (home registration, installment payment) see a single store.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from homeledger.audit import AuditLogger
from homeledger.categories import CategoryService
from homeledger.config import LedgerSettings, get_ledger_settings
from homeledger.homes import HomeService
from homeledger.ledger import LedgerService
from homeledger.loans import LoanTracker
from homeledger.models import (
    Category,
    CategoryCreate,
    CategoryKind,
    CategoryUpdate,
    DefaultCategory,
    EntryCreate,
    EntryFilter,
    EntryUpdate,
    EntryView,
    Home,
    HomeMember,
    Language,
    LedgerEntry,
    LoanCreate,
    LoanUpdate,
    LoanView,
    Page,
)
from homeledger.models.summary import HomeSummary, HomeUserReport, UserSummary
from homeledger.reports import MonthlyAggregator
from homeledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
)
from homeledger.services.translation import GeminiTranslator, Translator


logger = structlog.get_logger(__name__)


class HouseholdLedger:
    """Single entry point to the ledger engine."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        translator: Optional[Translator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        settings = get_ledger_settings(settings)
        audit_logger = audit_logger or AuditLogger()

        self.storage = storage
        self.audit_logger = audit_logger
        self.categories = CategoryService(storage, translator, audit_logger, settings)
        self.homes = HomeService(storage, audit_logger, settings)
        self.ledger = LedgerService(storage, self.categories, audit_logger, settings)
        self.loans = LoanTracker(storage, self.categories, audit_logger)
        self.reports = MonthlyAggregator(storage, settings)

    # Entries

    async def create_entry(
        self,
        home_id: UUID,
        user_id: UUID,
        data: Union[EntryCreate, dict[str, Any]],
    ) -> LedgerEntry:
        return await self.ledger.create_entry(home_id, user_id, data)

    async def update_entry(
        self,
        entry_id: UUID,
        home_id: UUID,
        data: Union[EntryUpdate, dict[str, Any]],
    ) -> LedgerEntry:
        return await self.ledger.update_entry(entry_id, home_id, data)

    async def delete_entry(self, entry_id: UUID, home_id: UUID) -> None:
        await self.ledger.delete_entry(entry_id, home_id)

    async def get_entry(self, entry_id: UUID, home_id: UUID, viewer_id: UUID) -> EntryView:
        return await self.ledger.get_entry(entry_id, home_id, viewer_id)

    async def list_entries(
        self,
        viewer_id: UUID,
        entry_filter: Union[EntryFilter, dict[str, Any]],
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page[EntryView]:
        return await self.ledger.list_entries(viewer_id, entry_filter, page, limit)

    async def create_transfer(
        self,
        home_id: UUID,
        from_user_id: UUID,
        to_user_id: UUID,
        amount: Decimal,
        occurred_at: datetime,
        title: Optional[str] = None,
    ) -> LedgerEntry:
        return await self.ledger.create_transfer(
            home_id, from_user_id, to_user_id, amount, occurred_at, title
        )

    # Reports

    async def get_home_summary(self, home_id: UUID, month: int, year: int) -> HomeSummary:
        return await self.reports.get_home_summary(home_id, month, year)

    async def get_user_summary(
        self,
        home_id: UUID,
        user_id: UUID,
        month: int,
        year: int,
    ) -> UserSummary:
        return await self.reports.get_user_summary(home_id, user_id, month, year)

    async def get_all_user_summaries(self, home_id: UUID, month: int, year: int) -> HomeUserReport:
        return await self.reports.get_all_user_summaries(home_id, month, year)

    # Loans

    async def create_loan(self, user_id: UUID, data: Union[LoanCreate, dict[str, Any]]) -> LoanView:
        return await self.loans.create_loan(user_id, data)

    async def update_loan(
        self,
        loan_id: UUID,
        user_id: UUID,
        data: Union[LoanUpdate, dict[str, Any]],
    ) -> LoanView:
        return await self.loans.update_loan(loan_id, user_id, data)

    async def pay_installment(
        self,
        loan_id: UUID,
        user_id: UUID,
        home_id: UUID,
        count: int = 1,
    ) -> tuple[LoanView, LedgerEntry]:
        return await self.loans.pay_installment(loan_id, user_id, home_id, count)

    async def delete_loan(self, loan_id: UUID, user_id: UUID) -> None:
        await self.loans.delete_loan(loan_id, user_id)

    async def list_loans(self, user_id: UUID) -> list[LoanView]:
        return await self.loans.list_loans(user_id)

    async def get_loan(self, loan_id: UUID, user_id: UUID) -> LoanView:
        return await self.loans.get_loan(loan_id, user_id)

    # Categories

    async def create_category(
        self,
        home_id: UUID,
        data: Union[CategoryCreate, dict[str, Any]],
    ) -> Category:
        return await self.categories.create_category(home_id, data)

    async def update_category(
        self,
        category_id: UUID,
        home_id: UUID,
        data: Union[CategoryUpdate, dict[str, Any]],
    ) -> Category:
        return await self.categories.update_category(category_id, home_id, data)

    async def delete_category(self, category_id: UUID, home_id: UUID) -> None:
        await self.categories.delete_category(category_id, home_id)

    async def list_categories(
        self,
        home_id: UUID,
        kind: Optional[CategoryKind] = None,
        lang: Language = Language.TR,
    ) -> list[Category]:
        return await self.categories.list_categories(home_id, kind, lang)

    # Homes

    async def create_home(
        self,
        owner_name: str,
        owner_email: str,
        home_name: str,
        currency: Optional[str] = None,
        default_categories: Optional[list[DefaultCategory]] = None,
    ) -> tuple[Home, HomeMember]:
        return await self.homes.create_home(
            owner_name, owner_email, home_name, currency, default_categories
        )

    async def join_home(self, code: str, name: str, email: str) -> HomeMember:
        return await self.homes.join_home(code, name, email)

    async def list_members(self, home_id: UUID) -> list[HomeMember]:
        return await self.homes.list_members(home_id)


def create_ledger_components(
    storage: Optional[LedgerStorageInterface] = None,
    translator: Optional[Translator] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    use_gemini: bool = False,
) -> HouseholdLedger:
    """
    Factory function to create a wired HouseholdLedger.

    Args:
        storage: Ledger store. In-memory if None.
        translator: Category name translator.
        audit_storage: Audit store. In-memory if None.
        use_gemini: Build a GeminiTranslator when no translator is given.
                    If Gemini isn't configured, categories are stored
                    untranslated.
    """
    storage = storage or InMemoryLedgerStorage()
    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())

    if translator is None and use_gemini:
        try:
            translator = GeminiTranslator()
        except Exception as e:
            # Gemini not configured - continue without translation
            logger.warning("translator_unavailable", error=str(e))

    return HouseholdLedger(storage, translator=translator, audit_logger=audit_logger)
