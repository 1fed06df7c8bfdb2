"""
Loan Lifecycle Tracker

A loan is ACTIVE while paid_installments < total_installments and
COMPLETE once they are equal. Paying never goes past the total; only an
explicit edit can move a complete loan back to active.

CRITICAL: Paying installments is ONE unit of work:
1. The counter is incremented
2. An EXPENSE entry for the payment is recorded in the Loan Payment category

Either both happen or neither does. Unexpected failures inside the unit
are rolled back and surface as ConsistencyError.
"""

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from homeledger.audit import AuditLogger, create_correlation_id
from homeledger.categories import CategoryService
from homeledger.errors import ConflictError, ConsistencyError, LedgerError, NotFoundError, ValidationError
from homeledger.models.audit import AuditEventBuilder
from homeledger.models.category import SystemCategory
from homeledger.models.common import ValidationIssue
from homeledger.models.ledger import EntryKind, LedgerEntry
from homeledger.models.loan import (
    Loan,
    LoanCreate,
    LoanUpdate,
    LoanView,
    derive_loan_view,
    installment_title,
)
from homeledger.services.storage import LedgerStorageInterface
from homeledger.validation import (
    LedgerValidator,
    build_model,
    ensure_member_of,
    positive_count,
)


logger = structlog.get_logger(__name__)


class LoanTracker:
    """Loan CRUD and installment payments. Every read returns a LoanView."""

    def __init__(
        self,
        storage: LedgerStorageInterface,
        category_service: CategoryService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._categories = category_service
        self._audit = audit_logger or AuditLogger()
        self._validator = LedgerValidator(storage)

    async def _get_owned(self, loan_id: UUID, user_id: UUID) -> Loan:
        loan = await self._storage.get_loan(loan_id)
        if loan is None or loan.user_id != user_id:
            raise NotFoundError("Loan not found")
        return loan

    async def _ensure_unique_name(
        self,
        user_id: UUID,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        wanted = name.strip().casefold()
        for loan in await self._storage.list_loans(user_id):
            if loan.id != exclude_id and loan.name.casefold() == wanted:
                raise ConflictError(f"A loan named '{name}' already exists")

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def create_loan(
        self,
        user_id: UUID,
        data: Union[LoanCreate, dict[str, Any]],
    ) -> LoanView:
        """
        Register a loan for a member.

        Raises:
            ValidationError: Malformed figures or paid > total
            NotFoundError: Unknown user
            ConflictError: The member already has a loan with this name
        """
        data = build_model(LoanCreate, data)
        if await self._storage.get_member(user_id) is None:
            raise NotFoundError("User not found")

        loan = build_model(Loan, {**data.model_dump(), "user_id": user_id})
        self._validator.validate_loan(loan)

        async with self._storage.transaction():
            await self._ensure_unique_name(user_id, loan.name)
            loan = await self._storage.save_loan(loan)
        await self._audit.log(AuditEventBuilder.loan_created(loan.id, user_id, loan.name))
        return derive_loan_view(loan)

    async def update_loan(
        self,
        loan_id: UUID,
        user_id: UUID,
        data: Union[LoanUpdate, dict[str, Any]],
    ) -> LoanView:
        """Partial update; paid <= total is checked on the merged loan."""
        data = build_model(LoanUpdate, data)
        changes = data.changes()

        async with self._storage.transaction():
            loan = await self._get_owned(loan_id, user_id)
            updated = build_model(Loan, {
                **loan.model_dump(),
                **changes,
                "updated_at": datetime.utcnow(),
            })
            self._validator.validate_loan(updated)
            if "name" in changes:
                await self._ensure_unique_name(user_id, updated.name, exclude_id=loan_id)

            updated = await self._storage.update_loan(updated)
        await self._audit.log(AuditEventBuilder.loan_updated(loan_id, user_id, sorted(changes)))
        return derive_loan_view(updated)

    async def delete_loan(self, loan_id: UUID, user_id: UUID) -> None:
        """Delete a loan. Payment expenses already recorded stay in the ledger."""
        await self._get_owned(loan_id, user_id)
        await self._storage.delete_loan(loan_id)
        await self._audit.log(AuditEventBuilder.loan_deleted(loan_id, user_id))

    async def get_loan(self, loan_id: UUID, user_id: UUID) -> LoanView:
        return derive_loan_view(await self._get_owned(loan_id, user_id))

    async def list_loans(self, user_id: UUID) -> list[LoanView]:
        """A member's loans, newest first."""
        return [derive_loan_view(loan) for loan in await self._storage.list_loans(user_id)]

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    async def pay_installment(
        self,
        loan_id: UUID,
        user_id: UUID,
        home_id: UUID,
        count: int = 1,
    ) -> tuple[LoanView, LedgerEntry]:
        """
        Pay `count` installments and record the payment as an expense.

        Returns:
            The updated loan view and the expense entry created

        Raises:
            ValidationError: count < 1, or more installments than remain
            NotFoundError: Unknown loan, or payer outside the home
            ConsistencyError: The unit failed part way and was rolled back
        """
        count = positive_count(count)
        ensure_member_of(await self._storage.get_member(user_id), home_id)
        correlation_id = create_correlation_id()

        try:
            async with self._storage.transaction():
                loan = await self._get_owned(loan_id, user_id)
                remaining = loan.total_installments - loan.paid_installments
                if count > remaining:
                    raise ValidationError(
                        f"Only {remaining} installment(s) remaining",
                        [ValidationIssue(
                            field="count",
                            issue_type="out_of_range",
                            message=f"Cannot pay {count}, only {remaining} remaining",
                        )],
                    )

                first = loan.paid_installments + 1
                last = loan.paid_installments + count

                category = await self._categories.get_or_create_system_category(
                    home_id, SystemCategory.LOAN_PAYMENT
                )

                loan = await self._storage.update_loan(build_model(Loan, {
                    **loan.model_dump(),
                    "paid_installments": last,
                    "updated_at": datetime.utcnow(),
                }))

                entry = await self._storage.save_entry(LedgerEntry(
                    home_id=home_id,
                    created_by_id=user_id,
                    kind=EntryKind.EXPENSE,
                    amount=loan.monthly_payment * count,
                    occurred_at=datetime.now(),
                    title=installment_title(loan.name, first, last),
                    category_id=category.id,
                ))
        except LedgerError:
            raise
        except Exception as e:
            logger.error(
                "installment_payment_failed",
                loan_id=str(loan_id),
                correlation_id=str(correlation_id),
                error=str(e),
            )
            await self._audit.log_consistency_failure(
                operation="pay_installment",
                error_message=str(e),
                entity_id=loan_id,
                correlation_id=correlation_id,
            )
            raise ConsistencyError(f"Installment payment failed: {e}") from e

        await self._audit.log(AuditEventBuilder.installment_paid(
            loan_id=loan_id,
            entry_id=entry.id,
            user_id=user_id,
            first=first,
            last=last,
            correlation_id=correlation_id,
        ))
        return derive_loan_view(loan), entry
