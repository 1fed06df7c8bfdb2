"""
Category Models

Categories are per home and bilingual: every category carries its name in
Turkish and English. A category is either user-defined, seeded from the
default table when the home was created, or one of the reserved system
categories (transfers, loan payments) created on first use.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from homeledger.models.ledger import EntryKind


HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
NAME_MAX_LENGTH = 100


class Language(str, Enum):
    """Languages a category name is kept in."""
    TR = "tr"
    EN = "en"

    @property
    def other(self) -> "Language":
        return Language.EN if self is Language.TR else Language.TR


class CategoryKind(str, Enum):
    """Which entries a category may be used for."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    BOTH = "BOTH"

    def accepts(self, kind: EntryKind) -> bool:
        """Can an entry of this kind be filed under the category?"""
        if self is CategoryKind.BOTH:
            return True
        return self.value == kind.value


class SystemCategory(str, Enum):
    """Reserved categories created lazily per home."""
    TRANSFER = "transfer"
    LOAN_PAYMENT = "loan_payment"


class DefaultCategory(BaseModel):
    """One row of the default category table seeded into new homes."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name_tr: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    name_en: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    icon: str = Field(..., min_length=1)
    color: str = Field(..., pattern=HEX_COLOR_PATTERN)
    kind: CategoryKind


class Category(BaseModel):
    """A stored category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    home_id: Optional[UUID] = Field(
        default=None,
        description="Owning home (None only for global defaults)"
    )
    name_tr: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    name_en: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    icon: str = Field(..., min_length=1)
    color: str = Field(..., pattern=HEX_COLOR_PATTERN)
    kind: CategoryKind
    is_default: bool = False
    system_key: Optional[SystemCategory] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def name(self, lang: Language) -> str:
        return self.name_tr if lang is Language.TR else self.name_en

    def has_name(self, name: str) -> bool:
        """Does the name clash with this category in either language?"""
        wanted = name.strip().casefold()
        return wanted in (self.name_tr.casefold(), self.name_en.casefold())


class CategoryCreate(BaseModel):
    """Input for creating a category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    lang: Language = Language.TR
    icon: str = Field(..., min_length=1)
    color: str = Field(..., pattern=HEX_COLOR_PATTERN)
    kind: CategoryKind


class CategoryUpdate(BaseModel):
    """Partial update of a category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    lang: Language = Language.TR
    icon: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    kind: Optional[CategoryKind] = None
