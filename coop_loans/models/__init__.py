"""Domain models for cooperative society loans."""

from coop_loans.models.enums import (
    CLOSED_STATES,
    OUTSTANDING_STATES,
    LoanState,
    MemberStatus,
    PaymentMethod,
    RepaymentStatus,
)
from coop_loans.models.loan import Disbursement, InterestPayment, Loan, Repayment
from coop_loans.models.member import Member

__all__ = [
    "CLOSED_STATES",
    "Disbursement",
    "InterestPayment",
    "Loan",
    "LoanState",
    "Member",
    "MemberStatus",
    "OUTSTANDING_STATES",
    "PaymentMethod",
    "Repayment",
    "RepaymentStatus",
]
