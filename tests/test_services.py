"""
Tests for the ambient services: settings, audit logging, translation.

No real API calls: the Gemini model is replaced with a stub object.
"""

import pytest
from uuid import uuid4

from homeledger.audit import AuditLogger
from homeledger.config import AppSettings, GeminiSettings, LedgerSettings, get_settings, validate_all_settings
from homeledger.models import Language
from homeledger.models.audit import AuditEventBuilder, AuditEventType
from homeledger.services.storage import AuditStorageInterface, InMemoryAuditStorage
from homeledger.services.translation import (
    GeminiTranslator,
    TranslationError,
    Translator,
    translate_category_name,
)


class TestSettings:
    """Tests for configuration."""

    def test_ledger_defaults(self):
        settings = LedgerSettings()
        assert settings.default_page_size == 20
        assert settings.default_currency == "TRY"
        assert settings.loan_payment_category_name_en == "Loan Payment"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LEDGER_DEFAULT_PAGE_SIZE", "50")
        assert LedgerSettings().default_page_size == 50

    def test_rejects_unknown_currency(self):
        with pytest.raises(ValueError):
            LedgerSettings(default_currency="GBP")

    def test_log_level_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="loud")

    def test_validate_all_settings_reports_missing_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        get_settings.cache_clear()
        try:
            results = validate_all_settings()
        finally:
            get_settings.cache_clear()
        assert results["ledger"] is True
        assert results["gemini"] is False
        assert "gemini_error" in results


class BrokenAuditStorage(AuditStorageInterface):
    """Audit store that is always down."""

    async def append_event(self, event):
        raise RuntimeError("audit store unavailable")

    async def get_events_by_correlation_id(self, correlation_id):
        return []

    async def get_events_by_entity(self, entity_type, entity_id):
        return []

    async def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for audit logging."""

    def test_persists_event(self, run):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        event = AuditEventBuilder.entry_deleted(uuid4(), uuid4())

        assert run(logger.log(event)) is True
        assert run(storage.get_recent_events()) == [event]

    def test_storage_failure_never_raises(self, run):
        logger = AuditLogger(BrokenAuditStorage())
        event = AuditEventBuilder.entry_deleted(uuid4(), uuid4())
        assert run(logger.log(event)) is False

    def test_local_only(self, run):
        assert run(AuditLogger().log(AuditEventBuilder.entry_deleted(uuid4(), uuid4()))) is True

    def test_events_by_correlation(self, run):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = uuid4()
        run(logger.log_consistency_failure("pay_installment", "boom", correlation_id=correlation_id))

        events = run(storage.get_events_by_correlation_id(correlation_id))
        assert [e.event_type for e in events] == [AuditEventType.CONSISTENCY_FAILURE]


class TestTranslateCategoryName:
    """Tests for the fallback helper."""

    def test_translated(self, run, translator):
        names = run(translate_category_name(translator, "Kira", Language.TR))
        assert (names.name_tr, names.name_en) == ("Kira", "Rent")
        assert not names.used_fallback

    def test_failure_falls_back(self, run, failing_translator):
        names = run(translate_category_name(failing_translator, "Kira", Language.TR))
        assert (names.name_tr, names.name_en) == ("Kira", "Kira")
        assert names.used_fallback

    def test_no_translator(self, run):
        names = run(translate_category_name(None, "Rent", Language.EN))
        assert names.name_tr == "Rent"
        assert names.used_fallback

    @pytest.mark.parametrize("answer", ["A" * 150, "   ", "Rent\nmeaning monthly payment"])
    def test_unusable_answer_falls_back(self, run, answer):
        names = run(translate_category_name(FixedTranslator(answer), "Kira", Language.TR))
        assert (names.name_tr, names.name_en) == ("Kira", "Kira")
        assert names.fallback_error.startswith("Unusable translation")

    def test_answer_at_limit_kept(self, run):
        names = run(translate_category_name(FixedTranslator("B" * 100), "Kira", Language.TR))
        assert names.name_en == "B" * 100
        assert not names.used_fallback


class FixedTranslator(Translator):
    """Always gives the same answer."""

    def __init__(self, answer):
        self.answer = answer

    async def translate(self, text, from_lang, to_lang):
        return self.answer


class StubResponse:
    def __init__(self, text):
        self.text = text


class StubModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text):
        self.text = text
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        return StubResponse(self.text)


class TestGeminiTranslator:
    """Tests for the Gemini-backed translator with the model stubbed out."""

    def make(self, text):
        translator = GeminiTranslator(GeminiSettings(api_key="test-key"))
        translator._model = StubModel(text)
        return translator

    def test_translates(self, run):
        translator = self.make(' "Rent" \n')
        assert run(translator.translate("Kira", Language.TR, Language.EN)) == "Rent"
        assert "From: Turkish" in translator._model.prompts[0]
        assert "Name: Kira" in translator._model.prompts[0]

    def test_same_language_short_circuits(self, run):
        translator = self.make("unused")
        assert run(translator.translate("Kira", Language.TR, Language.TR)) == "Kira"
        assert translator._model.prompts == []

    def test_multiline_response_rejected(self, run):
        translator = self.make("Rent\nThis means the monthly payment")
        with pytest.raises(TranslationError):
            run(translator.translate("Kira", Language.TR, Language.EN))

    def test_empty_response_rejected(self, run):
        translator = self.make("   ")
        with pytest.raises(TranslationError):
            run(translator.translate("Kira", Language.TR, Language.EN))
