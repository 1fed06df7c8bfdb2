"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Put the ledger on any transactional document or row store
2. Use in-memory storage for testing and embedding
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Filtering is expressed with the typed EntryFilter; each adapter turns it
into its own query language.

Multi-step writes run inside transaction(): either every write in the
block is applied or none is.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional
from uuid import UUID

from homeledger.models.audit import AuditEvent
from homeledger.models.category import Category, SystemCategory
from homeledger.models.home import CreditCard, Home, HomeMember
from homeledger.models.ledger import EntryFilter, LedgerEntry
from homeledger.models.loan import Loan


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation must implement these methods.
    Reads return copies; mutating a returned model never changes storage.
    """

    # -------------------------------------------------------------------------
    # Units of work
    # -------------------------------------------------------------------------

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """
        Open an atomic unit of work.

        Usage:
            async with storage.transaction():
                await storage.update_loan(loan)
                await storage.save_entry(entry)

        If the block raises, every write made inside it is undone and the
        exception propagates. Nested blocks join the outer unit.
        """

    # -------------------------------------------------------------------------
    # Homes, members, cards
    # -------------------------------------------------------------------------

    @abstractmethod
    async def save_home(self, home: Home) -> Home:
        pass

    @abstractmethod
    async def update_home(self, home: Home) -> Home:
        """
        Replace a stored home.

        Raises:
            NotFoundError: If the home doesn't exist
        """
        pass

    @abstractmethod
    async def get_home(self, home_id: UUID) -> Optional[Home]:
        pass

    @abstractmethod
    async def get_home_by_code(self, code: str) -> Optional[Home]:
        """Find a home by its join code (case-insensitive)."""
        pass

    @abstractmethod
    async def save_member(self, member: HomeMember) -> HomeMember:
        """
        Save a new member.

        Raises:
            DuplicateError: If the e-mail is already registered
        """
        pass

    @abstractmethod
    async def get_member(self, user_id: UUID) -> Optional[HomeMember]:
        pass

    @abstractmethod
    async def get_member_by_email(self, email: str) -> Optional[HomeMember]:
        pass

    @abstractmethod
    async def list_members(self, home_id: UUID) -> list[HomeMember]:
        """Members of a home, oldest first."""
        pass

    @abstractmethod
    async def save_card(self, card: CreditCard) -> CreditCard:
        pass

    @abstractmethod
    async def get_card(self, card_id: UUID) -> Optional[CreditCard]:
        pass

    @abstractmethod
    async def list_cards(self, user_ids: list[UUID]) -> list[CreditCard]:
        """Cards owned by any of the given members."""
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def save_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    async def update_category(self, category: Category) -> Category:
        """
        Replace a stored category.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        pass

    @abstractmethod
    async def delete_category(self, category_id: UUID) -> bool:
        """
        Hard-delete a category. Entries that reference it are left alone.

        Returns:
            True if a category was deleted
        """
        pass

    @abstractmethod
    async def get_category(self, category_id: UUID) -> Optional[Category]:
        pass

    @abstractmethod
    async def list_categories(self, home_id: UUID) -> list[Category]:
        pass

    @abstractmethod
    async def find_system_category(
        self,
        home_id: UUID,
        key: SystemCategory,
    ) -> Optional[Category]:
        """Find the reserved category with this key in a home."""
        pass

    # -------------------------------------------------------------------------
    # Ledger entries
    # -------------------------------------------------------------------------

    @abstractmethod
    async def save_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Save a new ledger entry.

        Args:
            entry: The validated entry

        Returns:
            The stored entry

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Replace a stored entry.

        Raises:
            NotFoundError: If entry doesn't exist
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: UUID) -> bool:
        pass

    @abstractmethod
    async def get_entry(self, entry_id: UUID) -> Optional[LedgerEntry]:
        pass

    @abstractmethod
    async def list_entries(
        self,
        entry_filter: EntryFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """
        List entries matching a filter, newest first.

        Args:
            entry_filter: Typed filter (home, kind, category, period, visibility)
            offset: Number of results to skip
            limit: Maximum number of results (None for all)

        Returns:
            Matching entries ordered by occurred_at descending
        """
        pass

    @abstractmethod
    async def count_entries(self, entry_filter: EntryFilter) -> int:
        pass

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    @abstractmethod
    async def save_loan(self, loan: Loan) -> Loan:
        pass

    @abstractmethod
    async def update_loan(self, loan: Loan) -> Loan:
        """
        Replace a stored loan.

        Raises:
            NotFoundError: If the loan doesn't exist
        """
        pass

    @abstractmethod
    async def delete_loan(self, loan_id: UUID) -> bool:
        pass

    @abstractmethod
    async def get_loan(self, loan_id: UUID) -> Optional[Loan]:
        pass

    @abstractmethod
    async def list_loans(self, user_id: UUID) -> list[Loan]:
        """Loans of a member, newest first."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Events of one operation in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
