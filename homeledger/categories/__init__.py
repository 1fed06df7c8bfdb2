"""Categories package."""

from homeledger.categories.service import CategoryService

__all__ = ["CategoryService"]
