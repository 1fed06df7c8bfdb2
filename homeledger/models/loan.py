"""
Loan Models

A Loan stores only what the member entered plus the installment counter.
Everything else (remaining amount, progress, next due date, ...) is
derived on every read by derive_loan_view(), so the derived figures can
never drift from the stored state.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator

from homeledger.models.common import round_half_up_int


class LoanStatus(str, Enum):
    """Loan repayment state."""
    ACTIVE = "ACTIVE"       # paid_installments < total_installments
    COMPLETE = "COMPLETE"   # paid_installments == total_installments


class Loan(BaseModel):
    """
    A stored loan.

    INVARIANT: 0 <= paid_installments <= total_installments.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    name: str = Field(..., min_length=1, max_length=100)

    principal_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount originally borrowed"
    )
    total_amount: Decimal = Field(
        ...,
        gt=0,
        description="Principal plus interest"
    )
    monthly_payment: Decimal = Field(..., gt=0)
    total_installments: int = Field(..., ge=1)
    paid_installments: int = Field(default=0, ge=0)
    start_date: date = Field(
        ...,
        description="Month of the first installment"
    )
    interest_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual interest rate (informational)"
    )
    notes: Optional[str] = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def validate_installments(self) -> "Loan":
        if self.paid_installments > self.total_installments:
            raise ValueError("Paid installments cannot exceed total installments")
        return self


class LoanCreate(BaseModel):
    """Input for creating a loan."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    principal_amount: Decimal = Field(..., gt=0)
    total_amount: Decimal = Field(..., gt=0)
    monthly_payment: Decimal = Field(..., gt=0)
    total_installments: int = Field(..., ge=1)
    paid_installments: int = Field(default=0, ge=0)
    start_date: date
    interest_rate: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)


class LoanUpdate(BaseModel):
    """Partial update of a loan."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    principal_amount: Optional[Decimal] = Field(default=None, gt=0)
    total_amount: Optional[Decimal] = Field(default=None, gt=0)
    monthly_payment: Optional[Decimal] = Field(default=None, gt=0)
    total_installments: Optional[int] = Field(default=None, ge=1)
    paid_installments: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    interest_rate: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class LoanView(BaseModel):
    """A loan with its derived fields, as returned by every read path."""

    loan: Loan
    status: LoanStatus
    remaining_installments: int
    remaining_amount: Decimal
    paid_amount: Decimal
    progress_percentage: int
    end_date: date
    next_payment_date: Optional[date] = None


def derive_loan_view(loan: Loan) -> LoanView:
    """
    Compute the derived loan fields.

    - remaining_installments = total - paid
    - remaining_amount = monthly_payment * remaining_installments
    - paid_amount = monthly_payment * paid
    - progress_percentage = round(100 * paid / total), halves rounded up
    - end_date = start_date + (total - 1) months
    - next_payment_date = start_date + paid months, None once fully paid

    Month arithmetic clamps to the end of shorter months (Jan 31 + 1 month
    is Feb 28/29).
    """
    remaining = loan.total_installments - loan.paid_installments
    is_complete = remaining <= 0

    progress = round_half_up_int(
        Decimal(100) * loan.paid_installments / loan.total_installments
    )

    return LoanView(
        loan=loan,
        status=LoanStatus.COMPLETE if is_complete else LoanStatus.ACTIVE,
        remaining_installments=remaining,
        remaining_amount=loan.monthly_payment * remaining,
        paid_amount=loan.monthly_payment * loan.paid_installments,
        progress_percentage=progress,
        end_date=loan.start_date + relativedelta(months=loan.total_installments - 1),
        next_payment_date=(
            None if is_complete
            else loan.start_date + relativedelta(months=loan.paid_installments)
        ),
    )


def installment_title(loan_name: str, first: int, last: int) -> str:
    """Title of the expense recorded for installments first..last (1-based)."""
    if first == last:
        return f"{loan_name} - Installment {first}"
    return f"{loan_name} - Installment {first}-{last}"
