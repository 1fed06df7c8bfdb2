"""
Shared-Expense Splitter

Every member pays an equal part of ALL shared expenses in the home,
whoever entered them and whoever took part. Nothing is rounded here;
callers round once at output.
"""

from decimal import Decimal
from typing import Iterable

from homeledger.models.common import ZERO
from homeledger.models.ledger import EntryKind, LedgerEntry


def effective_member_count(member_count: int) -> int:
    """A home with no members still divides by 1."""
    return member_count if member_count > 0 else 1


def share_of_shared(total_shared: Decimal, member_count: int) -> Decimal:
    """Each member's equal share of the shared total."""
    return Decimal(total_shared) / effective_member_count(member_count)


def member_total_expense(personal_expense: Decimal, share: Decimal) -> Decimal:
    return personal_expense + share


def sum_amounts(entries: Iterable[LedgerEntry]) -> Decimal:
    return sum((e.amount for e in entries), ZERO)


def shared_expenses(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    """The shared EXPENSE entries among `entries`."""
    return [e for e in entries if e.kind == EntryKind.EXPENSE and e.is_shared]


def split_shared(entries: Iterable[LedgerEntry], member_count: int) -> Decimal:
    """Equal share of the shared expenses among `entries`."""
    return share_of_shared(sum_amounts(shared_expenses(entries)), member_count)
