"""
Shared fixtures.

Services are async; tests drive them through the `run` fixture, which
runs a coroutine to completion on a fresh event loop. Nothing here talks
to Gemini: translation goes through in-process fakes.
"""

import asyncio
from types import SimpleNamespace

import pytest

from homeledger.audit import AuditLogger
from homeledger.config import LedgerSettings
from homeledger.models import Language
from homeledger.orchestrator import HouseholdLedger
from homeledger.services.storage import InMemoryAuditStorage, InMemoryLedgerStorage
from homeledger.services.translation import TranslationError, Translator


class FakeTranslator(Translator):
    """Dictionary-backed translator. Unknown words come back unchanged."""

    WORDS = {
        "Kira": "Rent",
        "Market": "Groceries",
        "Kitap": "Books",
        "Books": "Kitap",
        "Pets": "Evcil Hayvan",
    }

    def __init__(self):
        self.calls = []

    async def translate(self, text: str, from_lang: Language, to_lang: Language) -> str:
        self.calls.append((text, from_lang, to_lang))
        return self.WORDS.get(text, text)


class FailingTranslator(Translator):
    """Translator whose backend is always down."""

    async def translate(self, text: str, from_lang: Language, to_lang: Language) -> str:
        raise TranslationError("service unavailable")


@pytest.fixture
def run():
    loop = asyncio.new_event_loop()
    yield loop.run_until_complete
    loop.close()


@pytest.fixture
def settings():
    return LedgerSettings()


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def ledger(storage, audit_storage, translator, settings):
    return HouseholdLedger(
        storage,
        translator=translator,
        audit_logger=AuditLogger(audit_storage),
        settings=settings,
    )


@pytest.fixture
def household(ledger, run):
    """A home with its owner (Ayşe) and a second member (Mehmet)."""
    home, owner = run(ledger.create_home("Ayşe", "ayse@example.com", "Ev"))
    member = run(ledger.join_home(home.code, "Mehmet", "mehmet@example.com"))
    return SimpleNamespace(home=home, owner=owner, member=member)


@pytest.fixture
def category_named(ledger, run):
    """Look a category up by its English name."""
    def find(home_id, name_en):
        categories = run(ledger.list_categories(home_id))
        return next(c for c in categories if c.name_en == name_en)
    return find


@pytest.fixture
def failing_translator():
    return FailingTranslator()
