"""
Tests for Household Ledger models

Test strategy:
1. Unit tests for models and pure helpers (this file)
2. Service tests against the in-memory store (other test modules)
3. No real API calls in tests (fake translators)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from homeledger.models import (
    Category,
    CategoryKind,
    EntryFilter,
    EntryKind,
    EntryUpdate,
    HomeMember,
    Language,
    LedgerEntry,
    Loan,
    LoanStatus,
    Page,
    derive_loan_view,
    month_window,
    percentage_of,
    round_money,
)
from homeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from homeledger.models.loan import installment_title


def make_entry(**overrides):
    data = {
        "home_id": uuid4(),
        "created_by_id": uuid4(),
        "kind": EntryKind.EXPENSE,
        "amount": Decimal("100"),
        "occurred_at": datetime(2024, 3, 10, 12, 0),
        "category_id": uuid4(),
    }
    data.update(overrides)
    return LedgerEntry(**data)


def make_loan(**overrides):
    data = {
        "user_id": uuid4(),
        "name": "Car",
        "principal_amount": Decimal("1000"),
        "total_amount": Decimal("1200"),
        "monthly_payment": Decimal("100"),
        "total_installments": 12,
        "paid_installments": 10,
        "start_date": date(2024, 1, 15),
    }
    data.update(overrides)
    return Loan(**data)


class TestLedgerEntry:
    """Tests for per-entry invariants."""

    def test_expense_creation(self):
        """Test a plain expense."""
        entry = make_entry(title="  Market  ", is_shared=True)
        assert entry.title == "Market"
        assert entry.is_shared
        assert not entry.is_transfer

    def test_rejects_non_positive_amount(self):
        """Test that amounts must be positive."""
        with pytest.raises(ValueError):
            make_entry(amount=Decimal("0"))
        with pytest.raises(ValueError):
            make_entry(amount=Decimal("-5"))

    def test_bare_date_promoted_to_midnight(self):
        """Test that a date becomes a datetime at 00:00."""
        entry = make_entry(occurred_at=date(2024, 3, 10))
        assert entry.occurred_at == datetime(2024, 3, 10, 0, 0)

    def test_transfer_requires_participants(self):
        """Test that transfers need both sides."""
        with pytest.raises(ValueError, match="both from_user_id and to_user_id"):
            make_entry(kind=EntryKind.TRANSFER, from_user_id=uuid4())

    def test_transfer_rejects_self(self):
        """Test that a member cannot transfer to themselves."""
        user = uuid4()
        with pytest.raises(ValueError, match="yourself"):
            make_entry(kind=EntryKind.TRANSFER, from_user_id=user, to_user_id=user)

    def test_only_transfers_have_participants(self):
        """Test that income/expense can't carry participants."""
        with pytest.raises(ValueError, match="Only transfers"):
            make_entry(to_user_id=uuid4())

    def test_only_expenses_are_shared(self):
        """Test that income can't be shared or put on a card."""
        with pytest.raises(ValueError, match="Only expenses can be shared"):
            make_entry(kind=EntryKind.INCOME, is_shared=True)
        with pytest.raises(ValueError, match="assigned to a card"):
            make_entry(kind=EntryKind.INCOME, assigned_card_id=uuid4())

    def test_involves(self):
        """Test transfer participation."""
        a, b = uuid4(), uuid4()
        entry = make_entry(kind=EntryKind.TRANSFER, from_user_id=a, to_user_id=b)
        assert entry.involves(a)
        assert entry.involves(b)
        assert not entry.involves(uuid4())

    def test_update_rejects_immutable_fields(self):
        """Test that kind can't be sent in an update."""
        with pytest.raises(ValueError):
            EntryUpdate(kind=EntryKind.INCOME)

    def test_update_changes_only_sent_fields(self):
        """Test that changes() reports what the caller sent."""
        update = EntryUpdate(amount=Decimal("5"), title=None)
        assert update.changes() == {"amount": Decimal("5"), "title": None}


class TestPeriods:
    """Tests for month windows and filters."""

    def test_month_window_bounds(self):
        """Test inclusive bounds of a leap February."""
        start, end = month_window(2, 2024)
        assert start == datetime(2024, 2, 1, 0, 0)
        assert end == datetime(2024, 2, 29, 23, 59, 59, 999999)

    def test_month_window_rejects_bad_month(self):
        """Test month range."""
        with pytest.raises(ValueError):
            month_window(13, 2024)

    def test_filter_month_requires_year(self):
        """Test that a month filter needs a year."""
        with pytest.raises(ValueError, match="requires a year"):
            EntryFilter(home_id=uuid4(), month=3)

    def test_filter_window_combines_dates(self):
        """Test that date_from narrows a month window."""
        entry_filter = EntryFilter(
            home_id=uuid4(),
            month=3,
            year=2024,
            date_from=datetime(2024, 3, 15),
        )
        start, end = entry_filter.window()
        assert start == datetime(2024, 3, 15)
        assert end == datetime(2024, 3, 31, 23, 59, 59, 999999)

    def test_filter_without_dates_has_no_window(self):
        assert EntryFilter(home_id=uuid4()).window() is None


class TestLoanView:
    """Tests for derived loan fields."""

    def test_derived_fields(self):
        """Test 12 installments of 100 with 10 paid."""
        view = derive_loan_view(make_loan())
        assert view.status == LoanStatus.ACTIVE
        assert view.remaining_installments == 2
        assert view.remaining_amount == Decimal("200")
        assert view.paid_amount == Decimal("1000")
        assert view.progress_percentage == 83
        assert view.next_payment_date == date(2024, 11, 15)
        assert view.end_date == date(2024, 12, 15)

    def test_complete_loan_has_no_next_payment(self):
        """Test a fully paid loan."""
        view = derive_loan_view(make_loan(paid_installments=12))
        assert view.status == LoanStatus.COMPLETE
        assert view.next_payment_date is None
        assert view.progress_percentage == 100

    def test_progress_rounds_half_up(self):
        """Test 1 of 8 = 12.5% -> 13."""
        view = derive_loan_view(make_loan(total_installments=8, paid_installments=1))
        assert view.progress_percentage == 13

    def test_month_end_clamps(self):
        """Test Jan 31 + 1 month lands on the last day of February."""
        view = derive_loan_view(make_loan(
            start_date=date(2024, 1, 31),
            total_installments=3,
            paid_installments=1,
        ))
        assert view.next_payment_date == date(2024, 2, 29)

    def test_rejects_overpaid_loan(self):
        """Test that paid can't exceed total."""
        with pytest.raises(ValueError, match="cannot exceed"):
            make_loan(paid_installments=13)

    def test_installment_title(self):
        assert installment_title("Car", 11, 11) == "Car - Installment 11"
        assert installment_title("Car", 3, 5) == "Car - Installment 3-5"


class TestCategoryModels:
    """Tests for bilingual categories."""

    def test_has_name_checks_both_languages(self):
        """Test case-insensitive clash detection."""
        category = Category(
            name_tr="Kira",
            name_en="Rent",
            icon="home",
            color="#E57373",
            kind=CategoryKind.EXPENSE,
        )
        assert category.has_name("kira")
        assert category.has_name(" RENT ")
        assert not category.has_name("Market")
        assert category.name(Language.EN) == "Rent"

    def test_kind_accepts(self):
        assert CategoryKind.BOTH.accepts(EntryKind.INCOME)
        assert CategoryKind.EXPENSE.accepts(EntryKind.EXPENSE)
        assert not CategoryKind.INCOME.accepts(EntryKind.EXPENSE)

    def test_rejects_bad_color(self):
        with pytest.raises(ValueError):
            Category(name_tr="A", name_en="A", icon="x", color="red", kind=CategoryKind.EXPENSE)

    def test_language_other(self):
        assert Language.TR.other is Language.EN
        assert Language.EN.other is Language.TR


class TestCommon:
    """Tests for rounding and pagination helpers."""

    def test_round_money_half_up(self):
        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("33.333")) == Decimal("33.33")

    def test_percentage_of_zero_whole(self):
        assert percentage_of(Decimal("10"), Decimal("0")) == Decimal("0.00")

    def test_page_build(self):
        page = Page[int].build([1, 2], page=1, limit=2, total=5)
        assert page.total_pages == 3

    def test_member_email_normalized(self):
        member = HomeMember(home_id=uuid4(), name="Ayşe", email=" Ayse@Example.COM ")
        assert member.email == "ayse@example.com"


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            description="Test event",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.LOAN_CREATED,
            description="Loan created",
            entity_id=uuid4(),
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "loan_created"
        assert "event_id" in log_dict

    def test_builder_installment_paid(self):
        """Test the installment event carries the range."""
        correlation_id = uuid4()
        event = AuditEventBuilder.installment_paid(
            loan_id=uuid4(),
            entry_id=uuid4(),
            user_id=uuid4(),
            first=3,
            last=5,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.INSTALLMENT_PAID
        assert event.correlation_id == correlation_id
        assert event.details["first_installment"] == 3
        assert event.details["last_installment"] == 5

    def test_builder_translation_fallback_is_warning(self):
        event = AuditEventBuilder.translation_fallback("Kira", "tr", "en", "down")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "down"
