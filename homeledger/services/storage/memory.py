"""
In-Memory Storage Implementation

Keeps every record in process memory. Used by the test suite and by
callers that embed the engine without a database.

Transactions snapshot all tables on entry and restore the snapshot if
the block raises. Writes are serialised through one asyncio.Lock; a
write issued outside an explicit transaction runs in its own one-statement
unit so a concurrent rollback can never erase it.

Reads take no lock. A read from outside an open unit is served from that
unit's snapshot, so it sees the state before the unit or (once it
commits) after it, never a write that is later rolled back. The owning
task reads its own uncommitted writes.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID

from homeledger.models.audit import AuditEvent
from homeledger.models.category import Category, SystemCategory
from homeledger.models.home import CreditCard, Home, HomeMember
from homeledger.models.ledger import EntryFilter, LedgerEntry
from homeledger.models.loan import Loan
from homeledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


TABLES = ("homes", "members", "cards", "categories", "entries", "loans")


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    Dictionary-backed ledger storage.

    Models are copied on the way in and on the way out.
    """

    def __init__(self):
        self._homes: dict[UUID, Home] = {}
        self._members: dict[UUID, HomeMember] = {}
        self._cards: dict[UUID, CreditCard] = {}
        self._categories: dict[UUID, Category] = {}
        self._entries: dict[UUID, LedgerEntry] = {}
        self._loans: dict[UUID, Loan] = {}

        self._lock = asyncio.Lock()
        self._tx_owner: Optional[asyncio.Task] = None
        self._tx_snapshot: Optional[dict[str, dict]] = None

    # -------------------------------------------------------------------------
    # Units of work
    # -------------------------------------------------------------------------

    def _snapshot(self) -> dict[str, dict]:
        return {name: dict(getattr(self, f"_{name}")) for name in TABLES}

    def _restore(self, snapshot: dict[str, dict]) -> None:
        for name, table in snapshot.items():
            setattr(self, f"_{name}", table)

    def _visible(self, name: str) -> dict:
        """
        The table as the calling task may see it.

        While another task's unit is open, readers get the snapshot taken
        when it began, i.e. the last committed state.
        """
        if self._tx_snapshot is not None and self._tx_owner is not asyncio.current_task():
            return self._tx_snapshot[name]
        return getattr(self, f"_{name}")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        current = asyncio.current_task()
        if self._tx_owner is not None and self._tx_owner is current:
            # Nested block joins the outer unit
            yield
            return

        async with self._lock:
            self._tx_owner = current
            self._tx_snapshot = self._snapshot()
            try:
                yield
            except BaseException:
                self._restore(self._tx_snapshot)
                raise
            finally:
                self._tx_owner = None
                self._tx_snapshot = None

    # -------------------------------------------------------------------------
    # Homes, members, cards
    # -------------------------------------------------------------------------

    async def save_home(self, home: Home) -> Home:
        async with self.transaction():
            if home.id in self._homes:
                raise DuplicateError(f"Home already exists: {home.id}")
            if any(h.code == home.code for h in self._homes.values()):
                raise DuplicateError(f"Home code already in use: {home.code}")
            self._homes[home.id] = home.model_copy(deep=True)
        return home.model_copy(deep=True)

    async def update_home(self, home: Home) -> Home:
        async with self.transaction():
            if home.id not in self._homes:
                raise NotFoundError(f"Home not found: {home.id}")
            self._homes[home.id] = home.model_copy(deep=True)
        return home.model_copy(deep=True)

    async def get_home(self, home_id: UUID) -> Optional[Home]:
        home = self._visible("homes").get(home_id)
        return home.model_copy(deep=True) if home else None

    async def get_home_by_code(self, code: str) -> Optional[Home]:
        wanted = code.strip().upper()
        for home in self._visible("homes").values():
            if home.code == wanted:
                return home.model_copy(deep=True)
        return None

    async def save_member(self, member: HomeMember) -> HomeMember:
        async with self.transaction():
            if any(m.email == member.email for m in self._members.values()):
                raise DuplicateError(f"Email already registered: {member.email}")
            self._members[member.id] = member.model_copy(deep=True)
        return member.model_copy(deep=True)

    async def get_member(self, user_id: UUID) -> Optional[HomeMember]:
        member = self._visible("members").get(user_id)
        return member.model_copy(deep=True) if member else None

    async def get_member_by_email(self, email: str) -> Optional[HomeMember]:
        wanted = email.strip().lower()
        for member in self._visible("members").values():
            if member.email == wanted:
                return member.model_copy(deep=True)
        return None

    async def list_members(self, home_id: UUID) -> list[HomeMember]:
        members = [m for m in self._visible("members").values() if m.home_id == home_id]
        members.sort(key=lambda m: m.created_at)
        return [m.model_copy(deep=True) for m in members]

    async def save_card(self, card: CreditCard) -> CreditCard:
        async with self.transaction():
            self._cards[card.id] = card.model_copy(deep=True)
        return card.model_copy(deep=True)

    async def get_card(self, card_id: UUID) -> Optional[CreditCard]:
        card = self._visible("cards").get(card_id)
        return card.model_copy(deep=True) if card else None

    async def list_cards(self, user_ids: list[UUID]) -> list[CreditCard]:
        wanted = set(user_ids)
        return [
            c.model_copy(deep=True)
            for c in self._visible("cards").values()
            if c.user_id in wanted
        ]

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def save_category(self, category: Category) -> Category:
        async with self.transaction():
            self._categories[category.id] = category.model_copy(deep=True)
        return category.model_copy(deep=True)

    async def update_category(self, category: Category) -> Category:
        async with self.transaction():
            if category.id not in self._categories:
                raise NotFoundError(f"Category not found: {category.id}")
            self._categories[category.id] = category.model_copy(deep=True)
        return category.model_copy(deep=True)

    async def delete_category(self, category_id: UUID) -> bool:
        async with self.transaction():
            return self._categories.pop(category_id, None) is not None

    async def get_category(self, category_id: UUID) -> Optional[Category]:
        category = self._visible("categories").get(category_id)
        return category.model_copy(deep=True) if category else None

    async def list_categories(self, home_id: UUID) -> list[Category]:
        return [
            c.model_copy(deep=True)
            for c in self._visible("categories").values()
            if c.home_id == home_id
        ]

    async def find_system_category(
        self,
        home_id: UUID,
        key: SystemCategory,
    ) -> Optional[Category]:
        for category in self._visible("categories").values():
            if category.home_id == home_id and category.system_key == key:
                return category.model_copy(deep=True)
        return None

    # -------------------------------------------------------------------------
    # Ledger entries
    # -------------------------------------------------------------------------

    def _matches(self, entry: LedgerEntry, entry_filter: EntryFilter, window) -> bool:
        """Translate an EntryFilter into a predicate."""
        if entry.home_id != entry_filter.home_id:
            return False
        if entry_filter.kind is not None and entry.kind != entry_filter.kind:
            return False
        if entry_filter.category_id is not None and entry.category_id != entry_filter.category_id:
            return False
        if entry_filter.created_by_id is not None and entry.created_by_id != entry_filter.created_by_id:
            return False
        if entry_filter.is_shared is not None and entry.is_shared != entry_filter.is_shared:
            return False
        if entry_filter.card_ids is not None and entry.assigned_card_id not in entry_filter.card_ids:
            return False
        if window is not None:
            start, end = window
            if not start <= entry.occurred_at <= end:
                return False
        if entry_filter.visible_to is not None and entry.is_transfer:
            if not entry.involves(entry_filter.visible_to):
                return False
        return True

    def _select(self, entry_filter: EntryFilter) -> list[LedgerEntry]:
        window = entry_filter.window()
        selected = [
            e for e in self._visible("entries").values()
            if self._matches(e, entry_filter, window)
        ]
        selected.sort(key=lambda e: (e.occurred_at, e.created_at), reverse=True)
        return selected

    async def save_entry(self, entry: LedgerEntry) -> LedgerEntry:
        async with self.transaction():
            if entry.id in self._entries:
                raise DuplicateError(f"Entry already exists: {entry.id}")
            self._entries[entry.id] = entry.model_copy(deep=True)
        return entry.model_copy(deep=True)

    async def update_entry(self, entry: LedgerEntry) -> LedgerEntry:
        async with self.transaction():
            if entry.id not in self._entries:
                raise NotFoundError(f"Entry not found: {entry.id}")
            self._entries[entry.id] = entry.model_copy(deep=True)
        return entry.model_copy(deep=True)

    async def delete_entry(self, entry_id: UUID) -> bool:
        async with self.transaction():
            return self._entries.pop(entry_id, None) is not None

    async def get_entry(self, entry_id: UUID) -> Optional[LedgerEntry]:
        entry = self._visible("entries").get(entry_id)
        return entry.model_copy(deep=True) if entry else None

    async def list_entries(
        self,
        entry_filter: EntryFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[LedgerEntry]:
        selected = self._select(entry_filter)
        end = None if limit is None else offset + limit
        return [e.model_copy(deep=True) for e in selected[offset:end]]

    async def count_entries(self, entry_filter: EntryFilter) -> int:
        return len(self._select(entry_filter))

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    async def save_loan(self, loan: Loan) -> Loan:
        async with self.transaction():
            self._loans[loan.id] = loan.model_copy(deep=True)
        return loan.model_copy(deep=True)

    async def update_loan(self, loan: Loan) -> Loan:
        async with self.transaction():
            if loan.id not in self._loans:
                raise NotFoundError(f"Loan not found: {loan.id}")
            self._loans[loan.id] = loan.model_copy(deep=True)
        return loan.model_copy(deep=True)

    async def delete_loan(self, loan_id: UUID) -> bool:
        async with self.transaction():
            return self._loans.pop(loan_id, None) is not None

    async def get_loan(self, loan_id: UUID) -> Optional[Loan]:
        loan = self._visible("loans").get(loan_id)
        return loan.model_copy(deep=True) if loan else None

    async def list_loans(self, user_id: UUID) -> list[Loan]:
        loans = [l for l in self._visible("loans").values() if l.user_id == user_id]
        loans.sort(key=lambda l: l.created_at, reverse=True)
        return [l.model_copy(deep=True) for l in loans]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event.model_copy(deep=True))
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
