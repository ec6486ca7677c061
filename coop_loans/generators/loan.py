"""Loan and interest payment generators."""

import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from coop_loans.generators.base import BaseGenerator
from coop_loans.models import (
    CLOSED_STATES,
    OUTSTANDING_STATES,
    Disbursement,
    InterestPayment,
    Loan,
    LoanState,
    PaymentMethod,
)
from coop_loans.schedule.interest import as_date, calculation_limit, monthly_interest, obligation_months


class LoanGenerator(BaseGenerator):
    """Generate synthetic loans, disbursed where the state requires it."""

    TENURES = [3, 6, 9, 12, 18, 24]
    INTEREST_RATES = [Decimal("2"), Decimal("3"), Decimal("5"), Decimal("10")]
    PURPOSES = ["Business expansion", "School fees", "Farming inputs", "Rent", "Medical bills"]
    COLLATERAL_TYPES = ["Vehicle", "Land", "Savings", "Guarantor"]

    def generate(
        self,
        member_id: str,
        state: LoanState = LoanState.ACTIVE,
        created_at: datetime | None = None,
    ) -> Loan:
        """Generate a loan for a member.

        Parameters
        ----------
        member_id : str
            Storage id of the borrowing member.
        state : LoanState
            Lifecycle state. Disbursed, active and closed loans get one
            disbursement a few days after the application.
        created_at : datetime | None
            Application timestamp (default: within the last year).

        Returns
        -------
        Loan
            Generated loan.
        """
        if created_at is None:
            created_at = datetime.now() - timedelta(days=random.randint(30, 365))

        amount = Decimal(random.randint(5, 200) * 10000)
        tenure = random.choice(self.TENURES)

        loan = Loan(
            loan_id=self.fake.uuid4(),
            member_id=member_id,
            loan_amount=amount,
            interest_rate=random.choice(self.INTEREST_RATES),
            tenure=tenure,
            created_at=created_at,
            state=state,
            purpose=random.choice(self.PURPOSES),
            collateral_type=random.choice(self.COLLATERAL_TYPES),
            collateral_value=amount * Decimal(random.choice(["1.2", "1.5", "2"])),
            third_party_name=self.fake.name(),
            third_party_number=self.fake.phone_number(),
        )

        if state in OUTSTANDING_STATES or state in CLOSED_STATES:
            disbursed_at = created_at + timedelta(days=random.randint(1, 7))
            loan.disbursements.append(
                Disbursement(
                    disbursement_id=self.fake.uuid4(),
                    loan_id=loan.loan_id,
                    disbursement_amount=amount,
                    method=random.choice([PaymentMethod.BANK_TRANSFER.value, PaymentMethod.CASH.value]),
                    bank_account=f"{random.randint(0, 9999999999):010d}",
                    disbursed_by=self.fake.uuid4(),
                    disbursed_by_name=self.fake.name(),
                    created_at=disbursed_at,
                )
            )
            loan.due_date = (disbursed_at + timedelta(days=30 * (tenure + 1))).date()

        return loan


class InterestPaymentGenerator(BaseGenerator):
    """Generate interest payments against a loan's obligation months."""

    def generate_for_loan(
        self,
        loan: Loan,
        now: date | datetime,
        paid_rate: float = 0.8,
    ) -> list[InterestPayment]:
        """Pay each due obligation month with probability ``paid_rate``.

        Parameters
        ----------
        loan : Loan
            Loan whose schedule is paid against.
        now : date | datetime
            Reference instant; months after the one-month-ahead cap are
            never paid.
        paid_rate : float
            Probability that a due month is paid (0.0 to 1.0).

        Returns
        -------
        list[InterestPayment]
            At most one payment per obligation month.
        """
        limit = calculation_limit(loan, now)
        if limit is None:
            return []

        today = as_date(now)
        amount = monthly_interest(loan)
        payments = []
        for month in obligation_months(loan, limit):
            if random.random() >= paid_rate:
                continue

            paid_on = min(month + timedelta(days=random.randint(0, 27)), today)
            payments.append(
                InterestPayment(
                    payment_id=self.fake.uuid4(),
                    loan_id=loan.loan_id,
                    payment_for_month=month,
                    amount_paid=amount,
                    payment_date=paid_on,
                    payment_method=random.choice(list(PaymentMethod)).value,
                    created_at=datetime.combine(paid_on, time(hour=random.randint(8, 17))),
                    created_by_name=self.fake.name(),
                )
            )
        return payments
