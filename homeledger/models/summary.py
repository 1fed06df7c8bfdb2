"""
Report Models

Outputs of the monthly aggregator. Nothing here is ever persisted.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CategoryBreakdown(BaseModel):
    """Expense total of one category within a month."""

    category_id: Optional[UUID] = Field(
        default=None,
        description="None for the bucket of entries whose category was deleted"
    )
    name_tr: str
    name_en: str
    icon: Optional[str] = None
    color: Optional[str] = None
    total: Decimal
    percentage: Decimal = Field(
        ...,
        description="Share of the month's total expense, 2 decimals"
    )
    is_unknown: bool = False


class HomeSummary(BaseModel):
    """Home-wide totals for a month. Sums are raw; only percentages are rounded."""

    home_id: UUID
    month: int
    year: int
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    by_category: list[CategoryBreakdown] = Field(default_factory=list)


class UserSummary(BaseModel):
    """
    One member's month.

    shared_expense_share is the member's equal part of ALL shared expenses
    in the home. own_shared_expense is what the member entered as shared;
    it is reported only and does not feed the share.
    """

    user_id: UUID
    month: int
    year: int
    total_income: Decimal
    personal_expense: Decimal
    shared_expense_share: Decimal
    own_shared_expense: Decimal
    credit_card_debt: Decimal
    total_expense: Decimal
    balance: Decimal


class HomeUserReport(BaseModel):
    """All members' summaries for a month, computed in one pass."""

    home_id: UUID
    month: int
    year: int
    member_count: int
    users: list[UserSummary] = Field(default_factory=list)
    total_shared_expense: Decimal = Field(
        ...,
        description="Sum of each member's own shared entries"
    )
