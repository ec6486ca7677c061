"""Loan models for the cooperative society."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from coop_loans.models.enums import LoanState, RepaymentStatus


@dataclass
class Disbursement:
    """Release of loan funds to a member."""

    disbursement_id: str
    loan_id: str
    disbursement_amount: Decimal
    method: str
    bank_account: str
    disbursed_by: str
    created_at: datetime
    disbursed_by_name: str | None = None
    notes: str | None = None


@dataclass
class InterestPayment:
    """Payment discharging one obligation month of loan interest."""

    payment_id: str
    loan_id: str
    payment_for_month: date  # Only year and month are significant
    amount_paid: Decimal
    created_at: datetime
    payment_date: date | None = None
    payment_method: str | None = None
    notes: str | None = None
    created_by_name: str | None = None


@dataclass
class Repayment:
    """Principal installment of a loan."""

    repayment_id: str
    loan_id: str
    installment_number: int
    due_date: date
    amount_due: Decimal
    amount_paid: Decimal = Decimal("0")
    status: RepaymentStatus = RepaymentStatus.PENDING
    paid_at: datetime | None = None
    created_at: datetime | None = None
    notes: str | None = None


@dataclass
class Loan:
    """Monetary advance to a member.

    ``interest_rate`` is a percentage charged monthly on the principal
    (simple interest, not amortizing).
    """

    loan_id: str
    member_id: str
    loan_amount: Decimal
    interest_rate: Decimal  # Percent per month (e.g., 5 for 5%)
    tenure: int  # Months
    created_at: datetime | None
    state: LoanState = LoanState.PENDING
    disbursements: list[Disbursement] = field(default_factory=list)
    interest_payments: list[InterestPayment] = field(default_factory=list)
    repayments: list[Repayment] = field(default_factory=list)
    interval: int = 1  # Months between principal installments
    amount_paid: Decimal = Decimal("0")
    due_date: date | None = None
    is_extended: bool = False
    purpose: str = ""
    collateral_type: str = ""
    collateral_value: Decimal = Decimal("0")
    third_party_name: str = ""
    third_party_number: str = ""

    @property
    def disbursed_at(self) -> datetime | None:
        """Timestamp the schedule is anchored on.

        The first disbursement supersedes the application timestamp.
        """
        if self.disbursements:
            return self.disbursements[0].created_at
        return self.created_at
