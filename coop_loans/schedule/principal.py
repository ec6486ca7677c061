"""Principal installment schedule for cooperative loans.

Principal falls due in equal monthly installments starting one month
after disbursement, on the disbursement day of the month.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from coop_loans.models import Loan
from coop_loans.schedule.interest import CENT, add_months, as_date, monthly_interest, to_decimal

# Shortfalls at or below this amount are rounding noise, not missed installments.
MISSED_REPAYMENT_TOLERANCE = Decimal("1")


@dataclass(frozen=True)
class LoanProgress:
    """Repayment progress of a single loan."""

    loan_id: str
    tenure: int
    repaid: Decimal
    remaining: Decimal
    progress: float  # Percent of principal repaid
    next_due_date: date | None
    monthly_principal: Decimal
    monthly_interest: Decimal


def first_due_date(loan: Loan) -> date | None:
    """One month after disbursement, keeping the day of month."""
    basis = loan.disbursed_at
    if basis is None:
        return None
    return add_months(as_date(basis), 1)


def monthly_principal(loan: Loan) -> Decimal:
    """Principal owed per installment."""
    if not loan.tenure or loan.tenure <= 0:
        return Decimal("0")
    return (to_decimal(loan.loan_amount) / loan.tenure).quantize(CENT, rounding=ROUND_HALF_UP)


def installments_due(loan: Loan, now: date | datetime) -> int:
    """Number of installment dates strictly before ``now``, capped at tenure."""
    first = first_due_date(loan)
    if first is None or not loan.tenure or loan.tenure <= 0:
        return 0

    today = as_date(now)
    count = 0
    while count < loan.tenure and add_months(first, count) < today:
        count += 1
    return count


def next_due_date(loan: Loan, now: date | datetime) -> date | None:
    """First installment date on or after ``now``.

    Once every installment has passed, the date one step past the last
    installment is returned.
    """
    first = first_due_date(loan)
    if first is None:
        return None
    return add_months(first, installments_due(loan, now))


def total_repaid(loan: Loan) -> Decimal:
    """Sum of principal repaid across the loan's installments."""
    return sum((to_decimal(r.amount_paid or 0) for r in loan.repayments), Decimal("0"))


def missed_repayment(
    loan: Loan,
    now: date | datetime,
    tolerance: Decimal = MISSED_REPAYMENT_TOLERANCE,
) -> Decimal:
    """Principal that should have been repaid by ``now`` but was not."""
    if not loan.tenure or loan.tenure <= 0:
        return Decimal("0")

    per_installment = to_decimal(loan.loan_amount) / loan.tenure
    expected = (per_installment * installments_due(loan, now)).quantize(CENT, rounding=ROUND_HALF_UP)
    shortfall = expected - total_repaid(loan)
    if shortfall > tolerance:
        return shortfall
    return Decimal("0")


def loan_progress(loan: Loan, now: date | datetime) -> LoanProgress:
    """Repayment progress snapshot as of ``now``."""
    amount = to_decimal(loan.loan_amount)
    repaid = total_repaid(loan)
    progress = float(repaid / amount * 100) if amount > 0 else 0.0

    return LoanProgress(
        loan_id=loan.loan_id,
        tenure=loan.tenure or 0,
        repaid=repaid,
        remaining=max(Decimal("0"), amount - repaid),
        progress=progress,
        next_due_date=next_due_date(loan, now),
        monthly_principal=monthly_principal(loan),
        monthly_interest=monthly_interest(loan),
    )
