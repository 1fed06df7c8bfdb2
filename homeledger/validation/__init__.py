"""Validation package."""

from homeledger.validation.validator import (
    LedgerValidator,
    build_model,
    ensure_member_of,
    positive_count,
    raise_for_errors,
)

__all__ = [
    "LedgerValidator",
    "build_model",
    "ensure_member_of",
    "positive_count",
    "raise_for_errors",
]
