"""Tests for home registration and membership."""

import pytest
from uuid import uuid4

from homeledger.audit import AuditLogger
from homeledger.config import LedgerSettings
from homeledger.config.categories import DEFAULT_CATEGORIES
from homeledger.errors import ConflictError, ConsistencyError, NotFoundError, ValidationError
from homeledger.models import CategoryKind, Currency, DefaultCategory
from homeledger.models.audit import AuditEventType
from homeledger.orchestrator import HouseholdLedger
from homeledger.services.storage import InMemoryLedgerStorage


class TestCreateHome:
    """Tests for registering a home with its owner."""

    def test_owner_assigned(self, ledger, run, household):
        assert household.home.owner_id == household.owner.id
        assert household.owner.home_id == household.home.id
        assert household.home.currency == Currency.TRY

    def test_code_format(self, household, settings):
        code = household.home.code
        assert len(code) == settings.home_code_length
        assert set(code) <= set(settings.home_code_chars)

    def test_default_categories_seeded(self, ledger, run, household):
        categories = run(ledger.list_categories(household.home.id))
        assert len(categories) == len(DEFAULT_CATEGORIES)
        assert all(c.is_default for c in categories)

    def test_custom_category_table(self, ledger, run):
        table = [DefaultCategory(name_tr="Kira", name_en="Rent", icon="home", color="#E57373",
                                 kind=CategoryKind.EXPENSE)]
        home, _ = run(ledger.create_home("Ayşe", "ayse@example.com", "Ev", default_categories=table))
        categories = run(ledger.list_categories(home.id))
        assert [c.name_en for c in categories] == ["Rent"]

    def test_owner_card_created(self, ledger, run, household):
        cards = run(ledger.homes.list_cards(household.owner.id))
        assert [c.name for c in cards] == ["Ayşe Kredi Kartı"]

    def test_currency(self, ledger, run):
        home, _ = run(ledger.create_home("Ayşe", "ayse@example.com", "Ev", currency="EUR"))
        assert home.currency == Currency.EUR

    def test_invalid_email(self, ledger, run):
        with pytest.raises(ValidationError):
            run(ledger.create_home("Ayşe", "not-an-email", "Ev"))

    def test_duplicate_email(self, ledger, run, household):
        with pytest.raises(ConflictError):
            run(ledger.create_home("Başka", "AYSE@example.com", "Başka Ev"))

    def test_audited(self, ledger, run, audit_storage, household):
        events = run(audit_storage.get_events_by_entity("home", household.home.id))
        assert events[0].event_type == AuditEventType.HOME_CREATED


class FailingCardStorage(InMemoryLedgerStorage):
    """Store whose card writes always fail."""

    async def save_card(self, card):
        raise RuntimeError("connection lost")


class TestRegistrationAtomicity:
    """Home, categories and owner are stored together or not at all."""

    def test_failure_leaves_nothing(self, run, translator, audit_storage):
        storage = FailingCardStorage()
        ledger = HouseholdLedger(storage, translator=translator, audit_logger=AuditLogger(audit_storage))

        with pytest.raises(ConsistencyError):
            run(ledger.create_home("Ayşe", "ayse@example.com", "Ev"))

        assert run(storage.get_member_by_email("ayse@example.com")) is None
        assert storage._homes == {}
        assert storage._categories == {}

    def test_code_space_exhausted(self, run, storage, translator, audit_storage):
        """Test a one-letter alphabet: the second home can't get a code."""
        settings = LedgerSettings(home_code_chars="A", home_code_length=4)
        ledger = HouseholdLedger(
            storage,
            translator=translator,
            audit_logger=AuditLogger(audit_storage),
            settings=settings,
        )
        run(ledger.create_home("Ayşe", "ayse@example.com", "Ev", default_categories=[]))

        with pytest.raises(ConsistencyError):
            run(ledger.create_home("Can", "can@example.com", "Öbür Ev", default_categories=[]))

        assert run(storage.get_member_by_email("can@example.com")) is None
        errors = [
            e for e in run(audit_storage.get_recent_events())
            if e.event_type == AuditEventType.SYSTEM_ERROR
        ]
        assert len(errors) == 1
        assert errors[0].details["code_length"] == 4


class TestJoinHome:
    """Tests for joining by code."""

    def test_join(self, ledger, run, household):
        members = run(ledger.list_members(household.home.id))
        assert [m.name for m in members] == ["Ayşe", "Mehmet"]
        cards = run(ledger.homes.list_cards(household.member.id))
        assert cards[0].name == "Mehmet Kredi Kartı"

    def test_code_case_insensitive(self, ledger, run, household):
        member = run(ledger.join_home(household.home.code.lower(), "Can", "can@example.com"))
        assert member.home_id == household.home.id

    def test_unknown_code(self, ledger, run, household):
        with pytest.raises(NotFoundError):
            run(ledger.join_home("ZZZZZZZZ", "Can", "can@example.com"))

    def test_duplicate_email(self, ledger, run, household):
        with pytest.raises(ConflictError):
            run(ledger.join_home(household.home.code, "Mehmet 2", "mehmet@example.com"))


class TestMembersAndCards:

    def test_list_members_unknown_home(self, ledger, run):
        with pytest.raises(NotFoundError):
            run(ledger.list_members(uuid4()))

    def test_add_card(self, ledger, run, household):
        card = run(ledger.homes.add_card(household.owner.id, "Bonus"))
        cards = run(ledger.homes.list_cards(household.owner.id))
        assert card.id in [c.id for c in cards]
        assert len(cards) == 2

    def test_add_card_unknown_user(self, ledger, run):
        with pytest.raises(NotFoundError):
            run(ledger.homes.add_card(uuid4(), "Bonus"))
