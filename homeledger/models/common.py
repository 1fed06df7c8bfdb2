"""
Shared value types: money rounding, validation issues, pagination.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal) -> Decimal:
    """
    Round a money amount to 2 decimals, half away from zero.

    Only called at output boundaries; intermediate sums and shares stay
    unrounded.
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    """100 * part / whole rounded to 2 decimals, 0 when whole is 0."""
    if whole == 0:
        return round_money(ZERO)
    return round_money(Decimal(100) * part / whole)


def round_half_up_int(value: Decimal) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'not_allowed')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class Page(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T] = Field(default_factory=list)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    @classmethod
    def build(cls, items: list[T], page: int, limit: int, total: int) -> "Page[T]":
        return cls(
            items=items,
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )
