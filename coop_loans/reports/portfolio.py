"""Loan status distribution for the portfolio dashboard."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from coop_loans.models import CLOSED_STATES, OUTSTANDING_STATES, Loan, LoanState
from coop_loans.schedule.interest import as_date, compute_unpaid_obligation_months


@dataclass
class StatusDistribution:
    """Loan counts per dashboard bucket."""

    active: int = 0
    overdue: int = 0
    pending: int = 0
    closed: int = 0

    def as_chart_data(self) -> list[dict[str, int | str]]:
        """Name/value pairs in the order the status chart draws them."""
        return [
            {"name": "Active", "value": self.active},
            {"name": "Overdue", "value": self.overdue},
            {"name": "Pending", "value": self.pending},
            {"name": "Closed", "value": self.closed},
        ]


def loan_display_status(loan: Loan, now: date | datetime) -> str:
    """Status label for the loan list.

    An unsettled loan past its due date shows as ``overdue``.
    """
    if loan.state not in CLOSED_STATES and loan.due_date is not None:
        if as_date(now) > as_date(loan.due_date):
            return "overdue"
    return loan.state.value


def has_overdue_interest(loan: Loan, now: date | datetime) -> bool:
    """Whether any unpaid interest month precedes the current month."""
    return any(m.overdue for m in compute_unpaid_obligation_months(loan, None, now))


def status_distribution(loans: Iterable[Loan], now: date | datetime) -> StatusDistribution:
    """Bucket loans for the status chart. Rejected loans are left out."""
    dist = StatusDistribution()
    for loan in loans:
        if loan.state in OUTSTANDING_STATES:
            if has_overdue_interest(loan, now):
                dist.overdue += 1
            else:
                dist.active += 1
        elif loan.state in (LoanState.PENDING, LoanState.APPROVED):
            dist.pending += 1
        elif loan.state in CLOSED_STATES:
            dist.closed += 1
    return dist
