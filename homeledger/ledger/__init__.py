"""Ledger package."""

from homeledger.ledger.entries import LedgerService
from homeledger.ledger.transfers import TransferViewResolver

__all__ = ["LedgerService", "TransferViewResolver"]
