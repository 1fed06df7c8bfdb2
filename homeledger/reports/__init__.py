"""Reports package."""

from homeledger.reports.aggregator import MonthlyAggregator
from homeledger.reports.splitter import (
    member_total_expense,
    share_of_shared,
    split_shared,
)

__all__ = [
    "MonthlyAggregator",
    "member_total_expense",
    "share_of_shared",
    "split_shared",
]
