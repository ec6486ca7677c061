"""Tests for the monthly interest-due schedule."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from coop_loans.exceptions import InvalidLoanInputError
from coop_loans.models import Disbursement
from coop_loans.schedule.interest import (
    LoanTerms,
    ObligationMonth,
    add_months,
    calculation_limit,
    compute_payable_months,
    compute_unpaid_obligation_months,
    effective_start_date,
    is_month_paid,
    is_overdue,
    loan_end_date,
    monthly_interest,
    obligation_months,
    partition_obligation_months,
    pending_interest,
)


class TestScheduleAnchors:
    """Tests for effective start, end date and calculation limit."""

    def test_disbursement_supersedes_creation(self, disbursed_loan) -> None:
        assert effective_start_date(disbursed_loan) == date(2024, 2, 1)
        assert loan_end_date(disbursed_loan) == date(2024, 5, 1)

    def test_creation_date_without_disbursement(self, make_loan) -> None:
        loan = make_loan(tenure=1, created_at=datetime(2024, 6, 1))

        assert effective_start_date(loan) == date(2024, 7, 1)
        assert loan_end_date(loan) == date(2024, 8, 1)
        assert obligation_months(loan) == [date(2024, 7, 1)]

    def test_first_disbursement_is_used(self, make_loan) -> None:
        loan = make_loan(disbursed_at=datetime(2024, 3, 5))
        loan.disbursements.append(
            Disbursement(
                disbursement_id="dis-2",
                loan_id=loan.loan_id,
                disbursement_amount=Decimal("1"),
                method="Cash",
                bank_account="",
                disbursed_by="admin",
                created_at=datetime(2024, 9, 5),
            )
        )

        assert effective_start_date(loan) == date(2024, 4, 1)

    def test_month_end_disbursement_clamps(self, make_loan) -> None:
        loan = make_loan(disbursed_at=datetime(2024, 1, 31))

        assert effective_start_date(loan) == date(2024, 2, 1)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_calculation_limit_caps_one_month_ahead(self, disbursed_loan) -> None:
        assert calculation_limit(disbursed_loan, date(2024, 2, 20)) == date(2024, 3, 1)

    def test_calculation_limit_caps_at_loan_end(self, disbursed_loan) -> None:
        assert calculation_limit(disbursed_loan, date(2025, 1, 1)) == date(2024, 5, 1)

    def test_accepts_datetime_now(self, disbursed_loan) -> None:
        assert calculation_limit(disbursed_loan, datetime(2024, 2, 29, 23, 59)) == date(2024, 3, 1)

    def test_loan_terms_raise_for_invalid_input(self, make_loan) -> None:
        with pytest.raises(InvalidLoanInputError):
            LoanTerms.from_loan(make_loan(tenure=0))

        with pytest.raises(InvalidLoanInputError):
            LoanTerms.from_loan(make_loan(created_at=None))


class TestUnpaidObligationMonths:
    """Tests for compute_unpaid_obligation_months."""

    def test_one_payment_mid_loan(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, 2, 10))]

        result = compute_unpaid_obligation_months(disbursed_loan, payments, date(2024, 4, 15))

        assert result == [
            ObligationMonth(month=date(2024, 3, 1), overdue=True),
            ObligationMonth(month=date(2024, 4, 1), overdue=False),
        ]

    def test_full_tenure_after_end_date(self, make_loan) -> None:
        loan = make_loan(tenure=7, disbursed_at=datetime(2023, 11, 20))
        end = loan_end_date(loan)

        result = compute_unpaid_obligation_months(loan, [], end)

        assert len(result) == 7
        assert len(compute_unpaid_obligation_months(loan, [], date(2030, 1, 1))) == 7

    def test_all_overdue_at_end_date(self, disbursed_loan) -> None:
        result = compute_unpaid_obligation_months(disbursed_loan, [], date(2024, 5, 1))

        assert [m.overdue for m in result] == [True, True, True]

    def test_before_first_obligation_month(self, disbursed_loan) -> None:
        assert compute_unpaid_obligation_months(disbursed_loan, [], date(2024, 1, 20)) == []

    def test_current_month_is_not_overdue(self, disbursed_loan) -> None:
        result = compute_unpaid_obligation_months(disbursed_loan, [], date(2024, 2, 1))

        assert result == [ObligationMonth(month=date(2024, 2, 1), overdue=False)]

    def test_zero_tenure_is_empty(self, make_loan, make_payment) -> None:
        loan = make_loan(tenure=0)
        payments = [make_payment(date(2024, 2, 1))]

        assert compute_unpaid_obligation_months(loan, payments, date(2024, 6, 1)) == []
        assert compute_unpaid_obligation_months(loan, [], date(2030, 1, 1)) == []

    def test_negative_tenure_is_empty(self, make_loan) -> None:
        assert compute_unpaid_obligation_months(make_loan(tenure=-2), [], date(2024, 6, 1)) == []

    def test_missing_start_basis_is_empty(self, make_loan) -> None:
        loan = make_loan(created_at=None)

        assert compute_unpaid_obligation_months(loan, [], date(2024, 6, 1)) == []
        assert compute_payable_months(loan, []) == []

    def test_payment_matched_by_calendar_month_only(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, 3, 31))]

        result = compute_unpaid_obligation_months(disbursed_loan, payments, date(2024, 5, 1))

        assert [m.month for m in result] == [date(2024, 2, 1), date(2024, 4, 1)]

    def test_same_month_other_year_does_not_count(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2023, 2, 1))]

        result = compute_unpaid_obligation_months(disbursed_loan, payments, date(2024, 5, 1))

        assert len(result) == 3

    def test_payments_for_other_loans_ignored(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, 2, 1), loan_id="loan-999")]

        result = compute_unpaid_obligation_months(disbursed_loan, payments, date(2024, 5, 1))

        assert len(result) == 3

    def test_duplicate_payments_tolerated(self, disbursed_loan, make_payment) -> None:
        payments = [
            make_payment(date(2024, 2, 1), payment_id="a"),
            make_payment(date(2024, 2, 15), payment_id="b"),
        ]

        result = compute_unpaid_obligation_months(disbursed_loan, payments, date(2024, 5, 1))

        assert [m.month for m in result] == [date(2024, 3, 1), date(2024, 4, 1)]

    def test_none_payments_uses_nested_records(self, disbursed_loan, make_payment) -> None:
        disbursed_loan.interest_payments.append(make_payment(date(2024, 2, 1)))

        result = compute_unpaid_obligation_months(disbursed_loan, None, date(2024, 5, 1))

        assert [m.month for m in result] == [date(2024, 3, 1), date(2024, 4, 1)]

    def test_idempotent(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, 3, 1))]
        now = datetime(2024, 4, 15, 12, 0)

        first = compute_unpaid_obligation_months(disbursed_loan, payments, now)
        second = compute_unpaid_obligation_months(disbursed_loan, payments, now)

        assert first == second


class TestPartition:
    """Tests for the paid/unpaid split."""

    def test_paid_and_unpaid_are_disjoint(self, make_loan, make_payment) -> None:
        loan = make_loan(tenure=12, disbursed_at=datetime(2024, 1, 3))
        payments = [make_payment(date(2024, m, 5)) for m in (2, 4, 5, 9)]

        paid, unpaid = partition_obligation_months(loan, payments, date(2024, 10, 10))

        assert not set(paid) & set(unpaid)
        assert sorted(paid + unpaid) == obligation_months(loan, date(2024, 11, 1))
        assert paid == [date(2024, 2, 1), date(2024, 4, 1), date(2024, 5, 1), date(2024, 9, 1)]

    def test_invalid_loan_partition_is_empty(self, make_loan) -> None:
        assert partition_obligation_months(make_loan(tenure=0), [], date(2024, 5, 1)) == ([], [])


class TestPayableMonths:
    """Tests for compute_payable_months."""

    def test_ignores_one_month_ahead_cap(self, make_loan, make_payment) -> None:
        loan = make_loan(tenure=6, disbursed_at=datetime(2024, 1, 15))
        payments = [make_payment(date(2024, 3, 1))]

        result = compute_payable_months(loan, payments)

        assert result == [
            date(2024, 2, 1),
            date(2024, 4, 1),
            date(2024, 5, 1),
            date(2024, 6, 1),
            date(2024, 7, 1),
        ]

    def test_fully_paid_loan(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, m, 1)) for m in (2, 3, 4)]

        assert compute_payable_months(disbursed_loan, payments) == []


class TestPredicates:
    """Tests for paid and overdue predicates."""

    def test_is_month_paid(self, make_payment) -> None:
        payments = [make_payment(date(2024, 2, 28))]

        assert is_month_paid(date(2024, 2, 1), payments)
        assert not is_month_paid(date(2024, 3, 1), payments)

    def test_is_overdue(self) -> None:
        assert is_overdue(date(2024, 3, 1), date(2024, 4, 1))
        assert not is_overdue(date(2024, 4, 1), date(2024, 4, 30))
        assert not is_overdue(date(2024, 5, 1), date(2024, 4, 30))


class TestInterestAmounts:
    """Tests for monthly and pending interest."""

    def test_monthly_interest(self, make_loan) -> None:
        loan = make_loan(loan_amount=Decimal("200000"), interest_rate=Decimal("5"))

        assert monthly_interest(loan) == Decimal("10000.00")

    def test_monthly_interest_rounds_to_cent(self, make_loan) -> None:
        loan = make_loan(loan_amount=Decimal("1000"), interest_rate=Decimal("3.3333"))

        assert monthly_interest(loan) == Decimal("33.33")

    def test_monthly_interest_accepts_floats(self, make_loan) -> None:
        loan = make_loan(loan_amount=50000.0, interest_rate=2.5)

        assert monthly_interest(loan) == Decimal("1250.00")

    def test_pending_interest(self, disbursed_loan, make_payment) -> None:
        payments = [make_payment(date(2024, 2, 1))]

        assert pending_interest(disbursed_loan, payments, date(2024, 4, 15)) == Decimal("10000.00")

    def test_pending_interest_invalid_loan(self, make_loan) -> None:
        assert pending_interest(make_loan(tenure=0), [], date(2024, 4, 15)) == Decimal("0")
