"""Loans package."""

from homeledger.loans.tracker import LoanTracker

__all__ = ["LoanTracker"]
