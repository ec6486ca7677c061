"""Loan registry with referential integrity."""

from dataclasses import dataclass, field
from datetime import datetime

from coop_loans.exceptions import DuplicatePaymentError, ReferentialIntegrityError
from coop_loans.models import (
    OUTSTANDING_STATES,
    Disbursement,
    InterestPayment,
    Loan,
    Member,
    Repayment,
)
from coop_loans.schedule.interest import as_instant


@dataclass
class LoanRegistry:
    """In-memory store for members, loans and their payment records.

    Child records are attached to the owning loan's nested lists, mirroring
    the shape the backend returns for loans fetched with their relations.
    """

    # Primary entities
    members: dict[str, Member] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)

    # Records
    disbursements: list[Disbursement] = field(default_factory=list)
    interest_payments: list[InterestPayment] = field(default_factory=list)
    repayments: list[Repayment] = field(default_factory=list)

    # Relationship indexes
    _member_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_paid_months: dict[str, set[tuple[int, int]]] = field(default_factory=dict)

    def add_member(self, member: Member) -> None:
        """Add a member to the registry."""
        self.members[member.id] = member
        self._member_loans.setdefault(member.id, [])

    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the registry.

        Records already nested on the loan are indexed as well. Nothing is
        stored if they hold two payments for one month.
        """
        if loan.member_id not in self.members:
            raise ReferentialIntegrityError(f"Member {loan.member_id} not found")

        paid: set[tuple[int, int]] = set()
        for payment in loan.interest_payments:
            _check_new_month(paid, payment)
            paid.add(_month_key(payment))

        self.loans[loan.loan_id] = loan
        self._member_loans[loan.member_id].append(loan.loan_id)
        self._loan_paid_months[loan.loan_id] = paid
        self.disbursements.extend(loan.disbursements)
        self.interest_payments.extend(loan.interest_payments)
        self.repayments.extend(loan.repayments)

    def add_disbursement(self, disbursement: Disbursement) -> None:
        """Add a disbursement to its loan."""
        loan = self._require_loan(disbursement.loan_id)
        if disbursement.created_at is None:
            disbursement.created_at = datetime.now()
        self.disbursements.append(disbursement)
        loan.disbursements.append(disbursement)

    def add_interest_payment(self, payment: InterestPayment) -> None:
        """Add an interest payment to its loan.

        Raises
        ------
        DuplicatePaymentError
            If the loan already has a payment for the same calendar month.
        """
        loan = self._require_loan(payment.loan_id)
        self._index_payment(payment)
        if payment.created_at is None:
            payment.created_at = datetime.now()
        self.interest_payments.append(payment)
        loan.interest_payments.append(payment)

    def add_repayment(self, repayment: Repayment) -> None:
        """Add a principal repayment to its loan."""
        loan = self._require_loan(repayment.loan_id)
        if repayment.created_at is None:
            repayment.created_at = datetime.now()
        self.repayments.append(repayment)
        loan.repayments.append(repayment)

    # Query methods
    def get_member(self, member_id: str) -> Member | None:
        """Get a member by storage id."""
        return self.members.get(member_id)

    def get_member_loans(self, member_id: str) -> list[Loan]:
        """Get all loans for a member."""
        loan_ids = self._member_loans.get(member_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_loan_interest_payments(self, loan_id: str) -> list[InterestPayment]:
        """Get all interest payments for a loan."""
        loan = self.loans.get(loan_id)
        return list(loan.interest_payments) if loan else []

    def get_active_loans(self) -> list[Loan]:
        """Get loans that accrue interest (active or disbursed)."""
        return [loan for loan in self.loans.values() if loan.state in OUTSTANDING_STATES]

    def all_interest_payments(self) -> list[InterestPayment]:
        """Get every interest payment, newest first."""
        return sorted(self.interest_payments, key=lambda p: as_instant(p.created_at), reverse=True)

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "members": len(self.members),
            "loans": len(self.loans),
            "disbursements": len(self.disbursements),
            "interest_payments": len(self.interest_payments),
            "repayments": len(self.repayments),
        }

    def _require_loan(self, loan_id: str) -> Loan:
        loan = self.loans.get(loan_id)
        if loan is None:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found")
        return loan

    def _index_payment(self, payment: InterestPayment) -> None:
        paid = self._loan_paid_months[payment.loan_id]
        _check_new_month(paid, payment)
        paid.add(_month_key(payment))


def _month_key(payment: InterestPayment) -> tuple[int, int]:
    return (payment.payment_for_month.year, payment.payment_for_month.month)


def _check_new_month(paid: set[tuple[int, int]], payment: InterestPayment) -> None:
    if _month_key(payment) in paid:
        raise DuplicatePaymentError(
            f"Loan {payment.loan_id} already has an interest payment for "
            f"{payment.payment_for_month:%Y-%m}"
        )
