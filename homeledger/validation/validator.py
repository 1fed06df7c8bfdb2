"""
Ledger Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION (pydantic):
- Types, required fields, positive amounts
- Per-entry invariants (transfer participants, expense-only flags)

STAGE 2 - SEMANTIC VALIDATION (needs storage):
- Category exists, belongs to the home and accepts the entry kind
- Assigned card belongs to a member of the home
- Loan figures are consistent

Stage 2 collects ValidationIssues. Errors block the write; warnings are
logged and the write proceeds. Dangling references raise NotFoundError
straight away, since there is nothing a caller can fix in the payload.

IMPORTANT: Validation NEVER silently fixes issues and runs before any
mutation.
"""

from decimal import Decimal
from typing import Any, Optional, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from homeledger.errors import NotFoundError, ValidationError
from homeledger.models.category import Category, SystemCategory
from homeledger.models.common import ValidationIssue
from homeledger.models.ledger import EntryKind, LedgerEntry
from homeledger.models.loan import Loan
from homeledger.services.storage import LedgerStorageInterface


ModelT = TypeVar("ModelT", bound=BaseModel)

logger = structlog.get_logger(__name__)


def build_model(model_cls: type[ModelT], data: Any) -> ModelT:
    """
    Stage 1: build a model, turning pydantic errors into a ValidationError.
    """
    try:
        if isinstance(data, model_cls):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def raise_for_errors(issues: list[ValidationIssue]) -> None:
    """Raise if any issue is an error; log the warnings."""
    for issue in issues:
        if issue.severity == "warning":
            logger.warning(
                "validation_warning",
                field=issue.field,
                issue_type=issue.issue_type,
                message=issue.message,
            )
    if any(issue.severity == "error" for issue in issues):
        raise ValidationError.from_issues(issues)


class LedgerValidator:
    """
    Semantic checks for entries and loans.

    Stage 1 is done by the models themselves (see build_model).
    """

    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage

    async def check_category(self, entry: LedgerEntry) -> tuple[Category, list[ValidationIssue]]:
        """
        The entry's category must exist in the entry's home and accept its kind.

        Raises:
            NotFoundError: If the category doesn't exist in this home
        """
        issues = []

        category = await self._storage.get_category(entry.category_id)
        if category is None or category.home_id != entry.home_id:
            raise NotFoundError("Category not found")

        if entry.kind == EntryKind.TRANSFER:
            if category.system_key != SystemCategory.TRANSFER:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="not_allowed",
                    message="Transfers must use the Transfer category",
                ))
        elif category.system_key == SystemCategory.TRANSFER:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="not_allowed",
                message="The Transfer category is reserved for transfers",
                suggested_fix="Pick an income or expense category",
            ))
        elif not category.kind.accepts(entry.kind):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="kind_mismatch",
                message=(
                    f"Category '{category.name_en}' is for {category.kind.value.lower()}, "
                    f"not {entry.kind.value.lower()}"
                ),
                suggested_fix="Pick a category of the matching kind",
            ))

        return category, issues

    async def check_card(self, entry: LedgerEntry) -> None:
        """
        An assigned card must belong to a member of the entry's home.

        Raises:
            NotFoundError: If the card is unknown or owned outside the home
        """
        if entry.assigned_card_id is None:
            return

        card = await self._storage.get_card(entry.assigned_card_id)
        if card is None:
            raise NotFoundError("Credit card not found")

        owner = await self._storage.get_member(card.user_id)
        if owner is None or owner.home_id != entry.home_id:
            raise NotFoundError("Credit card not found")

    async def validate_entry(self, entry: LedgerEntry) -> Category:
        """
        Run the semantic checks for an entry about to be written.

        Returns:
            The entry's category

        Raises:
            NotFoundError: For dangling category/card references
            ValidationError: For semantic errors
        """
        category, issues = await self.check_category(entry)
        await self.check_card(entry)

        if entry.recurring_day is not None and not entry.is_recurring:
            issues.append(ValidationIssue(
                field="recurring_day",
                issue_type="inconsistent",
                message="recurring_day is set but the entry is not recurring",
                severity="warning",
            ))

        raise_for_errors(issues)
        return category

    def validate_loan(self, loan: Loan) -> list[ValidationIssue]:
        """
        Check loan figures.

        paid_installments > total_installments is an error (the model
        already refuses it; this catches merged partial updates).
        Figures that don't add up are only warnings: members often
        round their monthly payment.
        """
        issues = []

        if loan.paid_installments > loan.total_installments:
            issues.append(ValidationIssue(
                field="paid_installments",
                issue_type="out_of_range",
                message="Paid installments cannot exceed total installments",
            ))

        if loan.total_amount < loan.principal_amount:
            issues.append(ValidationIssue(
                field="total_amount",
                issue_type="inconsistent",
                message="Total amount is less than the principal",
                severity="warning",
                suggested_fix="Total amount should include interest",
            ))

        scheduled = loan.monthly_payment * loan.total_installments
        # Allow 5% tolerance for rounding
        tolerance = loan.total_amount * Decimal("0.05")
        if abs(scheduled - loan.total_amount) > tolerance:
            issues.append(ValidationIssue(
                field="monthly_payment",
                issue_type="inconsistent",
                message=(
                    f"Monthly payment x installments ({scheduled}) doesn't match "
                    f"total amount ({loan.total_amount})"
                ),
                severity="warning",
            ))

        raise_for_errors(issues)
        return issues


def ensure_member_of(member, home_id: UUID, what: str = "User") -> None:
    """Raise NotFoundError unless the member exists and belongs to the home."""
    if member is None or member.home_id != home_id:
        raise NotFoundError(f"{what} not found")


def positive_count(count: Optional[int], field: str = "count") -> int:
    if count is None or count < 1:
        raise ValidationError(
            f"{field}: must be at least 1",
            [ValidationIssue(field=field, issue_type="out_of_range", message="Must be at least 1")],
        )
    return count
