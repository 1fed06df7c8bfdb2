"""
Data Models Package

This package contains all Pydantic models used in the Household Ledger.
All data flowing through the engine must conform to these schemas.
"""

from homeledger.models.common import (
    Page,
    ValidationIssue,
    percentage_of,
    round_money,
)
from homeledger.models.ledger import (
    EntryCreate,
    EntryFilter,
    EntryKind,
    EntryUpdate,
    EntryView,
    LedgerEntry,
    TransferCreate,
    TransferDirection,
    month_window,
)
from homeledger.models.category import (
    Category,
    CategoryCreate,
    CategoryKind,
    CategoryUpdate,
    DefaultCategory,
    Language,
    SystemCategory,
)
from homeledger.models.loan import (
    Loan,
    LoanCreate,
    LoanStatus,
    LoanUpdate,
    LoanView,
    derive_loan_view,
)
from homeledger.models.home import (
    CreditCard,
    Currency,
    Home,
    HomeMember,
)
from homeledger.models.summary import (
    CategoryBreakdown,
    HomeSummary,
    HomeUserReport,
    UserSummary,
)
from homeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Common
    "Page",
    "ValidationIssue",
    "percentage_of",
    "round_money",
    # Ledger models
    "EntryCreate",
    "EntryFilter",
    "EntryKind",
    "EntryUpdate",
    "EntryView",
    "LedgerEntry",
    "TransferCreate",
    "TransferDirection",
    "month_window",
    # Category models
    "Category",
    "CategoryCreate",
    "CategoryKind",
    "CategoryUpdate",
    "DefaultCategory",
    "Language",
    "SystemCategory",
    # Loan models
    "Loan",
    "LoanCreate",
    "LoanStatus",
    "LoanUpdate",
    "LoanView",
    "derive_loan_view",
    # Home models
    "CreditCard",
    "Currency",
    "Home",
    "HomeMember",
    # Report models
    "CategoryBreakdown",
    "HomeSummary",
    "HomeUserReport",
    "UserSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
