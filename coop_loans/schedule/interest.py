"""Monthly interest-due schedule for cooperative loans.

Interest is charged monthly on the principal. The first charge falls in
the calendar month after funds are released, and a loan of tenure ``T``
owes exactly ``T`` obligation months::

    disbursed 2024-01-15, tenure 3
    effective start   2024-02-01
    obligation months Feb, Mar, Apr 2024
    end date          2024-05-01

Every function takes ``now`` explicitly and never reads the clock, so
results are deterministic for a given ``(loan, payments, now)``.

Malformed loans (non-positive tenure, no creation or disbursement
timestamp) produce empty schedules instead of raising.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Iterator

from dateutil.relativedelta import relativedelta

from coop_loans.exceptions import InvalidLoanInputError
from coop_loans.models import InterestPayment, Loan

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ObligationMonth:
    """An unpaid monthly interest obligation."""

    month: date  # First day of the calendar month
    overdue: bool


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_instant(value: date | datetime) -> datetime:
    """Timezone-aware instant for ordering mixed dates and timestamps.

    Naive timestamps are taken as UTC and bare dates as UTC midnight.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def month_start(value: date | datetime) -> date:
    """First day of the calendar month containing ``value``."""
    return as_date(value).replace(day=1)


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    return value + relativedelta(months=months)


def to_decimal(value: Decimal | float | int) -> Decimal:
    """Convert a numeric amount to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class LoanTerms:
    """Schedule anchors derived from a loan."""

    loan_id: str
    start: date
    end: date
    tenure: int

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanTerms":
        """Derive schedule anchors.

        Raises
        ------
        InvalidLoanInputError
            If tenure is not positive or the loan has no start-date basis.
        """
        if loan.tenure is None or loan.tenure <= 0:
            raise InvalidLoanInputError(
                f"Loan {loan.loan_id} has non-positive tenure {loan.tenure!r}"
            )

        basis = loan.disbursed_at
        if basis is None:
            raise InvalidLoanInputError(
                f"Loan {loan.loan_id} has no disbursement or creation timestamp"
            )

        start = month_start(add_months(as_date(basis), 1))
        return cls(
            loan_id=loan.loan_id,
            start=start,
            end=add_months(start, loan.tenure),
            tenure=loan.tenure,
        )

    def months(self, limit: date | None = None) -> Iterator[date]:
        """Yield obligation month starts strictly before ``limit``.

        The sequence never runs past the loan end date.
        """
        stop = self.end if limit is None else min(limit, self.end)
        current = self.start
        while current < stop:
            yield current
            current = add_months(current, 1)


def loan_terms(loan: Loan) -> LoanTerms | None:
    """Schedule anchors, or ``None`` for a loan that cannot be scheduled."""
    try:
        return LoanTerms.from_loan(loan)
    except InvalidLoanInputError as e:
        logger.debug("No interest schedule: %s", e)
        return None


def disbursement_basis(loan: Loan) -> datetime | None:
    """First disbursement timestamp, falling back to the creation timestamp."""
    return loan.disbursed_at


def effective_start_date(loan: Loan) -> date | None:
    """Month start of the first obligation month."""
    terms = loan_terms(loan)
    return terms.start if terms else None


def loan_end_date(loan: Loan) -> date | None:
    """Effective start date plus tenure months."""
    terms = loan_terms(loan)
    return terms.end if terms else None


def calculation_limit(loan: Loan, now: date | datetime) -> date | None:
    """Exclusive upper bound for due months as of ``now``.

    The earlier of the loan end date and the start of the month after
    ``now``, so the upcoming month is included but nothing beyond it.
    """
    terms = loan_terms(loan)
    if terms is None:
        return None
    return min(terms.end, add_months(month_start(now), 1))


def obligation_months(loan: Loan, limit: date | None = None) -> list[date]:
    """Obligation month starts from the effective start, before ``limit``.

    Without ``limit`` the full schedule up to the loan end date is returned.
    """
    terms = loan_terms(loan)
    if terms is None:
        return []
    return list(terms.months(limit))


def paid_month_keys(payments: Iterable[InterestPayment], loan_id: str | None = None) -> set[tuple[int, int]]:
    """``(year, month)`` pairs discharged by ``payments``.

    When ``loan_id`` is given, payments for other loans are ignored.
    """
    keys = set()
    for payment in payments:
        if loan_id is not None and payment.loan_id != loan_id:
            continue
        if payment.payment_for_month is None:
            continue
        keys.add((payment.payment_for_month.year, payment.payment_for_month.month))
    return keys


def is_month_paid(month: date, payments: Iterable[InterestPayment]) -> bool:
    """Whether any payment falls in the same calendar month and year."""
    return (month.year, month.month) in paid_month_keys(payments)


def is_overdue(month: date, now: date | datetime) -> bool:
    """Whether ``month`` starts before the current calendar month."""
    return month_start(month) < month_start(now)


def partition_obligation_months(
    loan: Loan,
    payments: Iterable[InterestPayment] | None,
    now: date | datetime,
) -> tuple[list[date], list[date]]:
    """Split due months (up to the calculation limit) into paid and unpaid."""
    terms = loan_terms(loan)
    if terms is None:
        return [], []

    paid_keys = paid_month_keys(_payments_for(loan, payments), loan.loan_id)
    limit = min(terms.end, add_months(month_start(now), 1))

    paid: list[date] = []
    unpaid: list[date] = []
    for month in terms.months(limit):
        if (month.year, month.month) in paid_keys:
            paid.append(month)
        else:
            unpaid.append(month)
    return paid, unpaid


def compute_unpaid_obligation_months(
    loan: Loan,
    payments: Iterable[InterestPayment] | None,
    now: date | datetime,
) -> list[ObligationMonth]:
    """Unpaid obligation months due as of ``now``.

    Parameters
    ----------
    loan : Loan
        Loan to schedule.
    payments : Iterable[InterestPayment] | None
        Recorded interest payments. ``None`` uses ``loan.interest_payments``.
    now : date | datetime
        Reference instant; only its calendar date matters.

    Returns
    -------
    list[ObligationMonth]
        Unpaid months in ascending order, each flagged overdue when it
        precedes the current month. Empty for loans that cannot be
        scheduled.
    """
    _, unpaid = partition_obligation_months(loan, payments, now)
    return [ObligationMonth(month=m, overdue=is_overdue(m, now)) for m in unpaid]


def compute_payable_months(
    loan: Loan,
    payments: Iterable[InterestPayment] | None = None,
) -> list[date]:
    """Every unpaid obligation month up to the loan end date.

    Unlike the due schedule this ignores the one-month-ahead cap, so
    future months within the loan's lifetime can be pre-paid.
    """
    terms = loan_terms(loan)
    if terms is None:
        return []
    paid_keys = paid_month_keys(_payments_for(loan, payments), loan.loan_id)
    return [m for m in terms.months() if (m.year, m.month) not in paid_keys]


def monthly_interest(loan: Loan) -> Decimal:
    """Interest owed per obligation month, rounded to the cent."""
    amount = to_decimal(loan.loan_amount) * to_decimal(loan.interest_rate) / 100
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def pending_interest(
    loan: Loan,
    payments: Iterable[InterestPayment] | None,
    now: date | datetime,
) -> Decimal:
    """Total interest of unpaid months due as of ``now``."""
    unpaid = compute_unpaid_obligation_months(loan, payments, now)
    return monthly_interest(loan) * len(unpaid)


def _payments_for(loan: Loan, payments: Iterable[InterestPayment] | None) -> Iterable[InterestPayment]:
    return loan.interest_payments if payments is None else payments
