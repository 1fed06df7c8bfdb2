"""
Ledger Entry Models

These models define the strict schemas for every transaction in a home.

A LedgerEntry is income, an expense, or a transfer between two members.
A transfer is stored ONCE; how it looks (outgoing or incoming) depends on
who is reading it, and that is decided at read time by the transfer
resolver, never here.

DESIGN DECISION: Pydantic v2 models validate the per-entry invariants
(positive amount, transfer participants, expense-only flags). Invariants
that need other entities (category belongs to the home, participants are
members) are checked by the ledger service.
"""

import calendar
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class EntryKind(str, Enum):
    """Kinds of ledger entries."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class TransferDirection(str, Enum):
    """How a transfer appears to the member reading it."""
    OUTGOING = "OUTGOING"
    INCOMING = "INCOMING"


# =============================================================================
# PERIOD HELPERS
# =============================================================================

def month_window(month: int, year: int) -> tuple[datetime, datetime]:
    """
    Inclusive bounds of a calendar month.

    [first day 00:00:00, last day 23:59:59.999999], naive local time.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime.combine(date(year, month, 1), time.min),
        datetime.combine(date(year, month, last_day), time.max),
    )


def year_window(year: int) -> tuple[datetime, datetime]:
    return (
        datetime.combine(date(year, 1, 1), time.min),
        datetime.combine(date(year, 12, 31), time.max),
    )


def _promote_date(value):
    """Accept a bare date where a datetime is expected (midnight)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


# =============================================================================
# CORE ENTRY MODEL
# =============================================================================

class LedgerEntry(BaseModel):
    """
    A stored transaction.

    kind, home_id, created_by_id, from_user_id and to_user_id never change
    after creation. Everything else may be edited until the entry is
    deleted (hard delete, no undo).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(default_factory=uuid4)
    home_id: UUID
    created_by_id: UUID = Field(
        ...,
        description="Member who owns the entry (the sender for transfers)"
    )
    kind: EntryKind

    # Money
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in the home's currency"
    )
    occurred_at: datetime
    title: Optional[str] = Field(default=None, max_length=200)

    # Classification
    category_id: UUID
    assigned_card_id: Optional[UUID] = Field(
        default=None,
        description="Card the expense is charged to (expenses only)"
    )
    is_shared: bool = Field(
        default=False,
        description="Pooled household cost, split equally across members"
    )
    is_recurring: bool = False
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)

    # Transfer participants
    from_user_id: Optional[UUID] = None
    to_user_id: Optional[UUID] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def promote_occurred_at(cls, v):
        return _promote_date(v)

    @model_validator(mode="after")
    def validate_kind_fields(self) -> "LedgerEntry":
        """Fields that only make sense for some kinds of entry."""
        if self.kind == EntryKind.TRANSFER:
            if self.from_user_id is None or self.to_user_id is None:
                raise ValueError("Transfer requires both from_user_id and to_user_id")
            if self.from_user_id == self.to_user_id:
                raise ValueError("Cannot transfer to yourself")
        elif self.from_user_id is not None or self.to_user_id is not None:
            raise ValueError("Only transfers have from_user_id/to_user_id")

        if self.kind != EntryKind.EXPENSE:
            if self.is_shared:
                raise ValueError("Only expenses can be shared")
            if self.assigned_card_id is not None:
                raise ValueError("Only expenses can be assigned to a card")

        return self

    @property
    def is_transfer(self) -> bool:
        return self.kind == EntryKind.TRANSFER

    def involves(self, user_id: UUID) -> bool:
        """Is the member a participant of this transfer?"""
        return user_id in (self.from_user_id, self.to_user_id)


# =============================================================================
# INPUT MODELS
# =============================================================================

class EntryCreate(BaseModel):
    """Input for an income or expense entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    kind: EntryKind
    amount: Decimal = Field(..., gt=0)
    occurred_at: datetime
    title: Optional[str] = Field(default=None, max_length=200)
    category_id: UUID
    assigned_card_id: Optional[UUID] = None
    is_shared: bool = False
    is_recurring: bool = False
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def promote_occurred_at(cls, v):
        return _promote_date(v)


class EntryUpdate(BaseModel):
    """
    Partial update of an entry.

    Only the mutable fields exist here; kind and transfer participants
    cannot be changed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Optional[Decimal] = Field(default=None, gt=0)
    occurred_at: Optional[datetime] = None
    title: Optional[str] = Field(default=None, max_length=200)
    category_id: Optional[UUID] = None
    assigned_card_id: Optional[UUID] = None
    is_shared: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def promote_occurred_at(cls, v):
        return _promote_date(v)

    def changes(self) -> dict:
        """Fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class TransferCreate(BaseModel):
    """Input for a transfer between two members."""
    model_config = ConfigDict(str_strip_whitespace=True)

    to_user_id: UUID
    amount: Decimal = Field(..., gt=0)
    occurred_at: datetime
    title: Optional[str] = Field(default=None, max_length=200)

    @field_validator("occurred_at", mode="before")
    @classmethod
    def promote_occurred_at(cls, v):
        return _promote_date(v)


# =============================================================================
# QUERY MODELS
# =============================================================================

class EntryFilter(BaseModel):
    """
    Typed filter over ledger entries.

    Storage adapters translate this into their own query language.
    A month filter needs a year; a year alone selects the whole year.
    visible_to hides transfers the member is not part of.
    """

    home_id: UUID
    kind: Optional[EntryKind] = None
    category_id: Optional[UUID] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1970, le=9999)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    created_by_id: Optional[UUID] = None
    is_shared: Optional[bool] = None
    card_ids: Optional[list[UUID]] = None
    visible_to: Optional[UUID] = None

    @model_validator(mode="after")
    def validate_period(self) -> "EntryFilter":
        if self.month is not None and self.year is None:
            raise ValueError("A month filter requires a year")
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        return self

    def window(self) -> Optional[tuple[datetime, datetime]]:
        """Inclusive datetime bounds, or None for no date restriction."""
        if self.year is not None:
            if self.month is not None:
                start, end = month_window(self.month, self.year)
            else:
                start, end = year_window(self.year)
        elif self.date_from is None and self.date_to is None:
            return None
        else:
            start, end = datetime.min, datetime.max
        if self.date_from is not None:
            start = max(start, self.date_from)
        if self.date_to is not None:
            end = min(end, self.date_to)
        return start, end


# =============================================================================
# READ MODELS
# =============================================================================

class EntryView(BaseModel):
    """An entry as a specific member sees it."""

    entry: LedgerEntry
    direction: Optional[TransferDirection] = None
    counterparty_id: Optional[UUID] = None
    counterparty_name: Optional[str] = None
    display_title: Optional[str] = None
    signed_amount: Decimal = Field(
        ...,
        description="Positive for money in, negative for money out"
    )
