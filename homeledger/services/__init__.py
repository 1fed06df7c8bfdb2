"""Services package."""

from homeledger.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from homeledger.services.translation import (
    GeminiTranslator,
    TranslationError,
    Translator,
    translate_category_name,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
    "LedgerStorageInterface",
    "NotFoundError",
    "StorageError",
    # Translation services
    "GeminiTranslator",
    "TranslationError",
    "Translator",
    "translate_category_name",
]
