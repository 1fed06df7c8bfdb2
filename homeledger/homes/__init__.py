"""Homes package."""

from homeledger.homes.service import HomeService

__all__ = ["HomeService"]
