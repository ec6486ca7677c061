"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable

import pytest

from coop_loans.models import (
    Disbursement,
    InterestPayment,
    Loan,
    LoanState,
    Member,
    MemberStatus,
)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_member() -> Member:
    """Sample member."""
    return Member(
        id="mem-uuid-001",
        member_id="MEM-00001",
        name="Ada Obi",
        full_name="Ada Chioma Obi",
        phone="+2348000000001",
        email="ada@example.com",
        location="Enugu",
        status=MemberStatus.ACTIVE,
        account_number="0123456789",
        bank_name="First Bank",
    )


@pytest.fixture
def make_loan(sample_member: Member) -> Callable[..., Loan]:
    """Factory for loans with round-number defaults.

    ``disbursed_at`` adds a single disbursement record.
    """

    def _make(
        loan_id: str = "loan-001",
        tenure: int = 3,
        created_at: datetime | None = datetime(2024, 1, 10, 9, 0),
        disbursed_at: datetime | None = None,
        loan_amount: Decimal = Decimal("100000"),
        interest_rate: Decimal = Decimal("5"),
        state: LoanState = LoanState.ACTIVE,
        member_id: str | None = None,
    ) -> Loan:
        loan = Loan(
            loan_id=loan_id,
            member_id=member_id or sample_member.id,
            loan_amount=loan_amount,
            interest_rate=interest_rate,
            tenure=tenure,
            created_at=created_at,
            state=state,
        )
        if disbursed_at is not None:
            loan.disbursements.append(
                Disbursement(
                    disbursement_id=f"dis-{loan_id}",
                    loan_id=loan_id,
                    disbursement_amount=loan_amount,
                    method="Bank Transfer",
                    bank_account="0123456789",
                    disbursed_by="admin-001",
                    created_at=disbursed_at,
                )
            )
        return loan

    return _make


@pytest.fixture
def make_payment() -> Callable[..., InterestPayment]:
    """Factory for interest payments."""

    def _make(
        payment_for_month: date,
        loan_id: str = "loan-001",
        amount_paid: Decimal = Decimal("5000"),
        payment_id: str | None = None,
        created_at: datetime | None = None,
    ) -> InterestPayment:
        return InterestPayment(
            payment_id=payment_id or f"pay-{loan_id}-{payment_for_month:%Y-%m}",
            loan_id=loan_id,
            payment_for_month=payment_for_month,
            amount_paid=amount_paid,
            payment_date=payment_for_month,
            payment_method="Cash",
            created_at=created_at or datetime.combine(payment_for_month, datetime.min.time()),
        )

    return _make


@pytest.fixture
def disbursed_loan(make_loan: Callable[..., Loan]) -> Loan:
    """Loan disbursed 2024-01-15 with a three month tenure."""
    return make_loan(disbursed_at=datetime(2024, 1, 15, 14, 30))
