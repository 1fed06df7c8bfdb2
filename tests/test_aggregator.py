"""
Tests for monthly reports.

The household fixture has two members: the owner (Ayşe) and Mehmet.
All entries below fall in March 2024.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from homeledger.errors import NotFoundError
from homeledger.models import EntryKind


MARCH = datetime(2024, 3, 10, 12, 0)


@pytest.fixture
def categories(household, category_named):
    home_id = household.home.id
    return {
        name: category_named(home_id, name)
        for name in ("Rent", "Groceries", "Salary", "Health")
    }


@pytest.fixture
def add(ledger, run, household):
    def add_entry(user, kind, amount, category, **extra):
        data = {
            "kind": kind,
            "amount": Decimal(amount),
            "occurred_at": extra.pop("occurred_at", MARCH),
            "category_id": category.id,
            **extra,
        }
        return run(ledger.create_entry(household.home.id, user.id, data))
    return add_entry


class TestHomeSummary:
    """Tests for the home-wide summary."""

    def test_totals_and_breakdown(self, ledger, run, household, categories, add):
        """Test income, expense and per-category totals."""
        add(household.owner, EntryKind.INCOME, "1000", categories["Salary"])
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)
        add(household.member, EntryKind.EXPENSE, "60", categories["Groceries"])
        add(household.member, EntryKind.EXPENSE, "40", categories["Groceries"])

        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        assert summary.total_income == Decimal("1000")
        assert summary.total_expense == Decimal("200")
        assert summary.balance == Decimal("800")
        assert [row.name_en for row in summary.by_category] == ["Groceries", "Rent"]
        assert summary.by_category[0].total == Decimal("100")
        assert summary.by_category[0].percentage == Decimal("50.00")

    def test_breakdown_sums_to_total(self, ledger, run, household, categories, add):
        """Test that category totals add up to the month's expense."""
        add(household.owner, EntryKind.EXPENSE, "33.33", categories["Rent"])
        add(household.owner, EntryKind.EXPENSE, "12.10", categories["Health"])
        add(household.member, EntryKind.EXPENSE, "7.05", categories["Groceries"])

        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        assert sum(row.total for row in summary.by_category) == summary.total_expense

    def test_deleted_category_goes_to_unknown_bucket(self, ledger, run, household, categories, add, settings):
        """Test that a dangling category degrades instead of failing."""
        custom = run(ledger.create_category(household.home.id, {
            "name": "Kitap",
            "icon": "book",
            "color": "#123456",
            "kind": "EXPENSE",
        }))
        add(household.owner, EntryKind.EXPENSE, "25", custom)
        add(household.owner, EntryKind.EXPENSE, "75", categories["Rent"])
        run(ledger.delete_category(custom.id, household.home.id))

        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        unknown = [row for row in summary.by_category if row.is_unknown]
        assert len(unknown) == 1
        assert unknown[0].category_id is None
        assert unknown[0].total == Decimal("25")
        assert unknown[0].name_en == settings.unknown_category_label
        assert sum(row.total for row in summary.by_category) == summary.total_expense

    def test_month_boundaries(self, ledger, run, household, categories, add):
        """Test that the last instant of the month counts and the next month doesn't."""
        add(household.owner, EntryKind.EXPENSE, "10", categories["Rent"],
            occurred_at=datetime(2024, 3, 31, 23, 59, 59))
        add(household.owner, EntryKind.EXPENSE, "20", categories["Rent"],
            occurred_at=datetime(2024, 4, 1, 0, 0))
        add(household.owner, EntryKind.EXPENSE, "40", categories["Rent"],
            occurred_at=datetime(2024, 2, 29, 23, 59))

        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        assert summary.total_expense == Decimal("10")

    def test_transfers_excluded(self, ledger, run, household, categories, add):
        """Test that transfers never count as income or expense."""
        add(household.owner, EntryKind.EXPENSE, "50", categories["Rent"])
        run(ledger.create_transfer(
            household.home.id, household.owner.id, household.member.id,
            Decimal("500"), MARCH,
        ))

        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        assert summary.total_income == Decimal("0")
        assert summary.total_expense == Decimal("50")

    def test_empty_month(self, ledger, run, household):
        summary = run(ledger.get_home_summary(household.home.id, 1, 2020))
        assert summary.total_expense == Decimal("0")
        assert summary.by_category == []

    def test_idempotent(self, ledger, run, household, categories, add):
        """Test that repeated reads give the same result."""
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)
        first = run(ledger.get_home_summary(household.home.id, 3, 2024))
        second = run(ledger.get_home_summary(household.home.id, 3, 2024))
        assert first == second


class TestUserSummary:
    """Tests for per-member summaries."""

    def test_shared_expense_split_equally(self, ledger, run, household, categories, add):
        """Test shared 100 by A -> share 50 for A and B."""
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)

        owner = run(ledger.get_user_summary(household.home.id, household.owner.id, 3, 2024))
        member = run(ledger.get_user_summary(household.home.id, household.member.id, 3, 2024))

        assert owner.shared_expense_share == Decimal("50.00")
        assert member.shared_expense_share == Decimal("50.00")
        assert member.total_expense == Decimal("50.00")
        assert member.balance == Decimal("-50.00")
        assert owner.own_shared_expense == Decimal("100")
        assert member.own_shared_expense == Decimal("0")

    def test_personal_and_income(self, ledger, run, household, categories, add):
        """Test personal expenses and income are the creator's."""
        add(household.owner, EntryKind.INCOME, "1000", categories["Salary"])
        add(household.owner, EntryKind.EXPENSE, "30", categories["Groceries"])
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)

        summary = run(ledger.get_user_summary(household.home.id, household.owner.id, 3, 2024))

        assert summary.total_income == Decimal("1000")
        assert summary.personal_expense == Decimal("30")
        assert summary.total_expense == Decimal("80.00")
        assert summary.balance == Decimal("920.00")

    def test_share_rounded_at_output(self, ledger, run, household, categories, add):
        """Test that 100 / 3 members is reported as 33.33."""
        run(ledger.join_home(household.home.code, "Can", "can@example.com"))
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)

        summary = run(ledger.get_user_summary(household.home.id, household.member.id, 3, 2024))

        assert summary.shared_expense_share == Decimal("33.33")
        assert summary.total_expense == Decimal("33.33")

    def test_credit_card_debt_follows_card_owner(self, ledger, run, household, categories, add):
        """Test that an expense on Mehmet's card is Mehmet's debt, whoever entered it."""
        cards = run(ledger.homes.list_cards(household.member.id))
        add(household.owner, EntryKind.EXPENSE, "70", categories["Groceries"],
            assigned_card_id=cards[0].id)

        owner = run(ledger.get_user_summary(household.home.id, household.owner.id, 3, 2024))
        member = run(ledger.get_user_summary(household.home.id, household.member.id, 3, 2024))

        assert member.credit_card_debt == Decimal("70")
        assert owner.credit_card_debt == Decimal("0")
        assert owner.personal_expense == Decimal("70")

    def test_non_member_rejected(self, ledger, run, household):
        """Test that a user outside the home is not found."""
        other_home, stranger = run(ledger.create_home("Zeynep", "zeynep@example.com", "Diğer Ev"))
        with pytest.raises(NotFoundError):
            run(ledger.get_user_summary(household.home.id, stranger.id, 3, 2024))


class TestAllUserSummaries:
    """Tests for the one-pass report of every member."""

    def test_report(self, ledger, run, household, categories, add):
        """Test per-member rows and the per-creator shared total."""
        add(household.owner, EntryKind.INCOME, "1000", categories["Salary"])
        add(household.member, EntryKind.INCOME, "500", categories["Salary"])
        add(household.owner, EntryKind.EXPENSE, "100", categories["Rent"], is_shared=True)
        add(household.member, EntryKind.EXPENSE, "60", categories["Groceries"], is_shared=True)

        report = run(ledger.get_all_user_summaries(household.home.id, 3, 2024))
        summary = run(ledger.get_home_summary(household.home.id, 3, 2024))

        assert report.member_count == 2
        assert len(report.users) == 2
        assert report.total_shared_expense == Decimal("160")
        assert sum(u.total_income for u in report.users) == summary.total_income
        assert sum(u.shared_expense_share for u in report.users) == Decimal("160.00")
        assert all(u.shared_expense_share == Decimal("80.00") for u in report.users)

    def test_matches_single_user_summary(self, ledger, run, household, categories, add):
        """Test the report agrees with get_user_summary."""
        add(household.owner, EntryKind.EXPENSE, "90", categories["Rent"], is_shared=True)

        report = run(ledger.get_all_user_summaries(household.home.id, 3, 2024))
        single = run(ledger.get_user_summary(household.home.id, household.member.id, 3, 2024))

        by_user = {u.user_id: u for u in report.users}
        assert by_user[household.member.id] == single
