"""
Household Ledger - Source Package

The financial core of a shared-household budget tracker: members of a
home log income, expenses and transfers, split shared costs, follow
credit-card debt and loan repayments, and read monthly reports.

DESIGN PRINCIPLES:
1. Summaries are derived, never stored
2. Fail early, fail visibly (except for dangling references in reports)
3. Multi-step writes are all-or-nothing
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Ledger Team"
