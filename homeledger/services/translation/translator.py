"""
Category Name Translation

Category names are stored in Turkish and English. When a member types a
name in one language, the other one is produced by a Translator.

DESIGN DECISION: Translation is an injected capability. The engine only
knows the Translator interface; GeminiTranslator is one implementation.
A failing translator never fails a category write: the original text is
stored for both languages instead.
"""

from abc import ABC, abstractmethod
from typing import Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel
from tenacity import retry, stop_after_attempt, wait_exponential

from homeledger.config import GeminiSettings, get_settings
from homeledger.models.category import NAME_MAX_LENGTH, Language


logger = structlog.get_logger(__name__)


class TranslationError(Exception):
    """The translator could not produce a translation."""
    pass


class Translator(ABC):
    """Text translation capability."""

    @abstractmethod
    async def translate(self, text: str, from_lang: Language, to_lang: Language) -> str:
        """
        Translate a short text.

        Raises:
            TranslationError: If no translation could be produced
        """
        pass


class GeminiTranslator(Translator):
    """
    Translator backed by a Gemini model.

    The model is asked for the translated text only; anything empty or
    multi-line is treated as a failure.
    """

    LANGUAGE_NAMES = {
        Language.TR: "Turkish",
        Language.EN: "English",
    }

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def _build_prompt(self, text: str, from_lang: Language, to_lang: Language) -> str:
        return f"""Translate the name of a household budget category.

From: {self.LANGUAGE_NAMES[from_lang]}
To: {self.LANGUAGE_NAMES[to_lang]}
Name: {text}

Respond with ONLY the translated name, no quotes, no explanation.
If the name is a brand or has no translation, repeat it unchanged."""

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _generate(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return response.text

    async def translate(self, text: str, from_lang: Language, to_lang: Language) -> str:
        if from_lang == to_lang:
            return text

        try:
            raw = await self._generate(self._build_prompt(text, from_lang, to_lang))
        except Exception as e:
            raise TranslationError(f"Gemini translation failed: {e}") from e

        translated = (raw or "").strip().strip('"').strip()
        if not translated or "\n" in translated:
            raise TranslationError(f"Unusable translation response: {raw!r}")
        return translated


class TranslatedName(BaseModel):
    """Both language versions of a category name."""

    name_tr: str
    name_en: str
    fallback_error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.fallback_error is not None


async def translate_category_name(
    translator: Optional[Translator],
    name: str,
    lang: Language,
) -> TranslatedName:
    """
    Produce the Turkish and English names from a name typed in `lang`.

    If the translator is missing or fails, the original name is used for
    both languages and fallback_error says why. A result that can't be
    stored as a name counts as a failure.
    """
    other = lang.other
    error: Optional[str] = None

    if translator is None:
        translated = name
        error = "No translator configured"
    else:
        try:
            translated = await translator.translate(name, lang, other)
        except Exception as e:
            translated = name
            error = str(e) or e.__class__.__name__
        else:
            translated = (translated or "").strip()
            if not translated or "\n" in translated or len(translated) > NAME_MAX_LENGTH:
                error = f"Unusable translation: {translated[:40]!r}"
                translated = name

    if error is not None:
        logger.warning(
            "translation_fallback",
            text=name,
            from_lang=lang.value,
            to_lang=other.value,
            error=error,
        )

    if lang is Language.TR:
        return TranslatedName(name_tr=name, name_en=translated, fallback_error=error)
    return TranslatedName(name_tr=translated, name_en=name, fallback_error=error)
