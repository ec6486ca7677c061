"""Tests for the loan status distribution."""

from datetime import date

from coop_loans.models import LoanState
from coop_loans.reports.portfolio import (
    StatusDistribution,
    has_overdue_interest,
    loan_display_status,
    status_distribution,
)


class TestLoanDisplayStatus:
    """Tests for loan_display_status."""

    def test_past_due_date_is_overdue(self, disbursed_loan) -> None:
        disbursed_loan.due_date = date(2024, 5, 15)

        assert loan_display_status(disbursed_loan, date(2024, 5, 16)) == "overdue"
        assert loan_display_status(disbursed_loan, date(2024, 5, 15)) == "active"

    def test_closed_loan_never_overdue(self, make_loan) -> None:
        loan = make_loan(state=LoanState.REPAID)
        loan.due_date = date(2024, 5, 15)

        assert loan_display_status(loan, date(2025, 1, 1)) == "repaid"

    def test_without_due_date(self, make_loan) -> None:
        assert loan_display_status(make_loan(state=LoanState.PENDING), date(2025, 1, 1)) == "pending"


class TestStatusDistribution:
    """Tests for status_distribution."""

    def test_buckets(self, make_loan, make_payment) -> None:
        overdue = make_loan(loan_id="l-overdue")
        current = make_loan(loan_id="l-current", state=LoanState.DISBURSED)
        current.interest_payments.append(make_payment(date(2024, 2, 1), loan_id="l-current"))
        loans = [
            overdue,
            current,
            make_loan(loan_id="l-pending", state=LoanState.PENDING),
            make_loan(loan_id="l-approved", state=LoanState.APPROVED),
            make_loan(loan_id="l-paid", state=LoanState.PAID),
            make_loan(loan_id="l-rejected", state=LoanState.REJECTED),
        ]

        dist = status_distribution(loans, date(2024, 3, 10))

        assert dist == StatusDistribution(active=1, overdue=1, pending=2, closed=1)

    def test_has_overdue_interest(self, disbursed_loan) -> None:
        assert not has_overdue_interest(disbursed_loan, date(2024, 2, 10))
        assert has_overdue_interest(disbursed_loan, date(2024, 3, 1))

    def test_chart_data(self) -> None:
        data = StatusDistribution(active=3, overdue=1, pending=0, closed=2).as_chart_data()

        assert data == [
            {"name": "Active", "value": 3},
            {"name": "Overdue", "value": 1},
            {"name": "Pending", "value": 0},
            {"name": "Closed", "value": 2},
        ]
