"""Client contracts for the hosted loan backend.

The backend owns the money-moving routines as stored procedures. This
module describes how they are called, and validates requests before
they leave the process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from coop_loans.exceptions import BackendError, ValidationError
from coop_loans.models import InterestPayment, Loan, RepaymentStatus
from coop_loans.schedule.interest import CENT, add_months, as_date, to_decimal

EXTENSION_MULTIPLIERS = (1, 2, 3, 4)


@dataclass(frozen=True)
class ProcedureResult:
    """Outcome reported by a stored procedure."""

    success: bool
    error: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProcedureResult":
        """Map a procedure's JSON result.

        Procedures that return nothing succeeded.
        """
        if payload is None:
            return cls(success=True)
        if isinstance(payload, dict):
            return cls(success=bool(payload.get("success")), error=payload.get("error"))
        raise BackendError(f"Unexpected procedure result: {payload!r}")

    def raise_for_error(self, default: str = "Procedure failed") -> None:
        """Raise BackendError if the procedure reported failure."""
        if not self.success:
            raise BackendError(self.error or default)


@dataclass(frozen=True)
class ExtensionPreview:
    """What a loan would look like after an extension."""

    extension_months: int
    new_tenure: int
    new_installment_count: int
    new_installment_amount: Decimal
    new_due_date: date


class LoanBackend(ABC):
    """Data-fetch layer and stored-procedure calls."""

    @abstractmethod
    def fetch_active_loans(self) -> list[Loan]:
        """Active or disbursed loans with nested records."""

    @abstractmethod
    def fetch_member_loans(self, member_id: str) -> list[Loan]:
        """All loans of a member with nested records."""

    @abstractmethod
    def fetch_interest_payments(self) -> list[InterestPayment]:
        """All interest payments, newest first."""

    @abstractmethod
    def record_repayment_redistributed(
        self, loan_id: str, amount: Decimal, notes: str, created_by: str
    ) -> ProcedureResult:
        """Record a repayment spread across outstanding installments."""

    @abstractmethod
    def extend_loan(self, loan_id: str, extension_months: int) -> ProcedureResult:
        """Extend tenure and recompute the installment schedule."""

    @abstractmethod
    def update_loan_tenure(self, loan_id: str, tenure: int) -> None:
        """Overwrite a loan's tenure."""


def validate_repayment_amount(
    amount: Decimal | float | str,
    remaining: Decimal | float | None = None,
) -> Decimal:
    """Check a repayment amount against the loan's remaining balance.

    Without ``remaining`` only positivity is checked.

    Returns
    -------
    Decimal
        The amount as Decimal.

    Raises
    ------
    ValidationError
        If the amount is not a positive number or exceeds ``remaining``.
    """
    try:
        value = to_decimal(amount)
    except ArithmeticError as e:
        raise ValidationError("Please enter a valid payment amount") from e

    if not value.is_finite() or value <= 0:
        raise ValidationError("Please enter a valid payment amount")

    if remaining is None:
        return value

    remaining = to_decimal(remaining)
    if value > remaining:
        raise ValidationError(
            f"Payment cannot exceed the total remaining balance of ₦{remaining:,}"
        )
    return value


def extension_options(interval: int | None) -> list[int]:
    """Extension lengths offered for a loan: multiples of its interval."""
    step = interval if interval and interval > 0 else 1
    return [m * step for m in EXTENSION_MULTIPLIERS]


def validate_extension(extension_months: int, interval: int | None) -> int:
    """Ensure ``extension_months`` is one of the offered options."""
    if extension_months not in extension_options(interval):
        raise ValidationError(
            f"Extension must be one of {extension_options(interval)} months, got {extension_months}"
        )
    return extension_months


def validate_tenure(tenure: Any) -> int:
    """Parse a tenure into a positive integer number of months."""
    try:
        value = int(tenure)
    except (TypeError, ValueError) as e:
        raise ValidationError("Tenure must be a positive number.") from e
    if value <= 0:
        raise ValidationError("Tenure must be a positive number.")
    return value


def preview_extension(loan: Loan, extension_months: int, now: date | datetime) -> ExtensionPreview:
    """Preview the effect of extending ``loan`` by ``extension_months``.

    The remaining balance is spread evenly over the unpaid installments
    plus the ones the extension adds.
    """
    validate_extension(extension_months, loan.interval)
    interval = loan.interval if loan.interval and loan.interval > 0 else 1

    remaining = to_decimal(loan.loan_amount) - to_decimal(loan.amount_paid)
    unpaid = sum(1 for r in loan.repayments if r.status != RepaymentStatus.PAID)
    count = unpaid + extension_months // interval
    amount = (remaining / count).quantize(CENT, rounding=ROUND_HALF_UP)

    current_due = as_date(loan.due_date) if loan.due_date else as_date(now)
    return ExtensionPreview(
        extension_months=extension_months,
        new_tenure=(loan.tenure or 0) + extension_months,
        new_installment_count=count,
        new_installment_amount=amount,
        new_due_date=add_months(current_due, extension_months),
    )
