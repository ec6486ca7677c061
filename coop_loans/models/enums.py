"""Enumeration types for cooperative loan entities."""

from enum import Enum


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class LoanState(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    DISBURSED = "disbursed"
    PAID = "paid"
    REPAID = "repaid"


class RepaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    CASH = "Cash"
    MOBILE_MONEY = "Mobile Money"
    POS = "POS"


# States in which a loan accrues monthly interest.
OUTSTANDING_STATES = frozenset({LoanState.ACTIVE, LoanState.DISBURSED})

# States in which a loan is settled.
CLOSED_STATES = frozenset({LoanState.PAID, LoanState.REPAID})
