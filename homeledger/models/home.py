"""
Home, Member and Card Models

The roster a ledger engine reads: who belongs to a home, and which cards
each member owns. Shared-expense splitting counts members; card debt
follows card ownership.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Currency(str, Enum):
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"


class Home(BaseModel):
    """A household."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    code: str = Field(
        ...,
        min_length=4,
        max_length=12,
        description="Join code handed to other members"
    )
    name: str = Field(..., min_length=1, max_length=100)
    currency: Currency = Currency.TRY
    owner_id: Optional[UUID] = Field(
        default=None,
        description="Set in the same unit of work that creates the home"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.upper()


class HomeMember(BaseModel):
    """A user belonging to a home."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    home_id: UUID
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


def first_day_of_month() -> date:
    return date.today().replace(day=1)


class CreditCard(BaseModel):
    """A card owned by one member; expenses assigned to it are that member's debt."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str = Field(..., min_length=1, max_length=100)
    billing_date: date = Field(
        default_factory=first_day_of_month,
        description="Statement date"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
