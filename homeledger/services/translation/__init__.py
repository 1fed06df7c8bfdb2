"""Translation services package."""

from homeledger.services.translation.translator import (
    GeminiTranslator,
    TranslatedName,
    TranslationError,
    Translator,
    translate_category_name,
)

__all__ = [
    "GeminiTranslator",
    "TranslatedName",
    "TranslationError",
    "Translator",
    "translate_category_name",
]
