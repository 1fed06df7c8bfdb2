"""
Monthly Aggregator

Read-only reports over one calendar month of a home's ledger.

DESIGN DECISION: Reports load the month's entries once and compute
everything in memory. They never write, take no locks, and never raise
for dangling category references: entries whose category was deleted
land in a single "unknown" bucket instead.

Transfers are excluded from every total here.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from homeledger.config import LedgerSettings, get_ledger_settings
from homeledger.errors import NotFoundError
from homeledger.models.category import Category
from homeledger.models.common import ZERO, percentage_of, round_money
from homeledger.models.home import HomeMember
from homeledger.models.ledger import EntryFilter, EntryKind, LedgerEntry
from homeledger.models.summary import (
    CategoryBreakdown,
    HomeSummary,
    HomeUserReport,
    UserSummary,
)
from homeledger.reports.splitter import (
    member_total_expense,
    shared_expenses,
    share_of_shared,
    sum_amounts,
)
from homeledger.services.storage import LedgerStorageInterface
from homeledger.validation import build_model


logger = structlog.get_logger(__name__)


class MonthlyAggregator:
    """Computes home and member summaries for a month."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        settings: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._settings = get_ledger_settings(settings)

    async def _month_entries(self, home_id: UUID, month: int, year: int) -> list[LedgerEntry]:
        entry_filter = build_model(EntryFilter, {
            "home_id": home_id,
            "month": month,
            "year": year,
        })
        entries = await self._storage.list_entries(entry_filter)
        return [e for e in entries if not e.is_transfer]

    async def _require_home(self, home_id: UUID) -> None:
        if await self._storage.get_home(home_id) is None:
            raise NotFoundError("Home not found")

    # -------------------------------------------------------------------------
    # Home summary
    # -------------------------------------------------------------------------

    def _breakdown(
        self,
        expenses: list[LedgerEntry],
        categories: dict[UUID, Category],
        total_expense: Decimal,
    ) -> list[CategoryBreakdown]:
        totals: dict[Optional[UUID], Decimal] = defaultdict(lambda: ZERO)
        for entry in expenses:
            key = entry.category_id if entry.category_id in categories else None
            totals[key] += entry.amount

        rows = []
        for category_id, total in totals.items():
            percentage = percentage_of(total, total_expense)
            if category_id is None:
                label = self._settings.unknown_category_label
                rows.append(CategoryBreakdown(
                    category_id=None,
                    name_tr=label,
                    name_en=label,
                    total=total,
                    percentage=percentage,
                    is_unknown=True,
                ))
                continue

            category = categories[category_id]
            rows.append(CategoryBreakdown(
                category_id=category.id,
                name_tr=category.name_tr,
                name_en=category.name_en,
                icon=category.icon,
                color=category.color,
                total=total,
                percentage=percentage,
            ))

        rows.sort(key=lambda r: (-r.total, r.name_en.casefold()))
        return rows

    async def get_home_summary(self, home_id: UUID, month: int, year: int) -> HomeSummary:
        """
        Income, expense and per-category breakdown for the whole home.

        Sums are not rounded; only percentages are.
        """
        await self._require_home(home_id)
        entries = await self._month_entries(home_id, month, year)

        income = [e for e in entries if e.kind == EntryKind.INCOME]
        expenses = [e for e in entries if e.kind == EntryKind.EXPENSE]
        total_income = sum_amounts(income)
        total_expense = sum_amounts(expenses)

        categories = {c.id: c for c in await self._storage.list_categories(home_id)}
        by_category = self._breakdown(expenses, categories, total_expense)

        unknown = [row for row in by_category if row.is_unknown]
        if unknown:
            logger.info(
                "summary_unknown_categories",
                home_id=str(home_id),
                month=month,
                year=year,
                total=str(unknown[0].total),
            )

        return HomeSummary(
            home_id=home_id,
            month=month,
            year=year,
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
            by_category=by_category,
        )

    # -------------------------------------------------------------------------
    # Member summaries
    # -------------------------------------------------------------------------

    def _user_summary(
        self,
        member: HomeMember,
        entries: list[LedgerEntry],
        card_ids: set[UUID],
        share: Decimal,
        month: int,
        year: int,
    ) -> UserSummary:
        own = [e for e in entries if e.created_by_id == member.id]

        total_income = sum_amounts(e for e in own if e.kind == EntryKind.INCOME)
        personal = sum_amounts(
            e for e in own if e.kind == EntryKind.EXPENSE and not e.is_shared
        )
        own_shared = sum_amounts(shared_expenses(own))
        card_debt = sum_amounts(
            e for e in entries
            if e.kind == EntryKind.EXPENSE and e.assigned_card_id in card_ids
        )
        total_expense = member_total_expense(personal, share)

        return UserSummary(
            user_id=member.id,
            month=month,
            year=year,
            total_income=total_income,
            personal_expense=personal,
            shared_expense_share=round_money(share),
            own_shared_expense=own_shared,
            credit_card_debt=card_debt,
            total_expense=round_money(total_expense),
            balance=round_money(total_income - total_expense),
        )

    async def _cards_by_member(self, members: list[HomeMember]) -> dict[UUID, set[UUID]]:
        cards = await self._storage.list_cards([m.id for m in members])
        owned: dict[UUID, set[UUID]] = defaultdict(set)
        for card in cards:
            owned[card.user_id].add(card.id)
        return owned

    async def get_user_summary(
        self,
        home_id: UUID,
        user_id: UUID,
        month: int,
        year: int,
    ) -> UserSummary:
        """
        One member's month.

        Raises:
            NotFoundError: If the user is not a member of the home
        """
        member = await self._storage.get_member(user_id)
        if member is None or member.home_id != home_id:
            raise NotFoundError("User not found in this home")

        entries = await self._month_entries(home_id, month, year)
        members = await self._storage.list_members(home_id)
        share = share_of_shared(sum_amounts(shared_expenses(entries)), len(members))
        cards = await self._cards_by_member([member])

        return self._user_summary(member, entries, cards[member.id], share, month, year)

    async def get_all_user_summaries(
        self,
        home_id: UUID,
        month: int,
        year: int,
    ) -> HomeUserReport:
        """Every member's summary from a single load of the month."""
        await self._require_home(home_id)
        entries = await self._month_entries(home_id, month, year)
        members = await self._storage.list_members(home_id)
        share = share_of_shared(sum_amounts(shared_expenses(entries)), len(members))
        cards = await self._cards_by_member(members)

        users = [
            self._user_summary(m, entries, cards[m.id], share, month, year)
            for m in members
        ]

        return HomeUserReport(
            home_id=home_id,
            month=month,
            year=year,
            member_count=len(members),
            users=users,
            total_shared_expense=sum((u.own_shared_expense for u in users), ZERO),
        )
