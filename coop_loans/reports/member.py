"""Member profile summary: balances, dues and recent activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from coop_loans.models import OUTSTANDING_STATES, Loan, Member
from coop_loans.schedule.interest import as_instant, pending_interest, to_decimal
from coop_loans.schedule.principal import (
    MISSED_REPAYMENT_TOLERANCE,
    LoanProgress,
    loan_progress,
    missed_repayment,
    total_repaid,
)

MISSED_REPAYMENT_WARNING_THRESHOLD = Decimal("100")


@dataclass(frozen=True)
class ActivityEntry:
    """One line of a member's recent activity feed."""

    activity_id: str
    title: str
    date: date | datetime
    amount: Decimal
    money_in: bool


@dataclass
class MemberLoanSummary:
    member_id: str
    member_name: str
    active_loan_amount: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    pending_interest: Decimal = Decimal("0")
    missed_repayment: Decimal = Decimal("0")
    total_interest_paid: Decimal = Decimal("0")
    loans: list[LoanProgress] = field(default_factory=list)
    recent_activity: list[ActivityEntry] = field(default_factory=list)


def summarize_member(
    member: Member,
    loans: Iterable[Loan],
    now: date | datetime,
    tolerance: Decimal = MISSED_REPAYMENT_TOLERANCE,
) -> MemberLoanSummary:
    """Summarize a member's loans as of ``now``.

    Balances and dues cover active or disbursed loans only; interest paid
    and the activity feed cover every loan of the member.
    """
    loans = list(loans)
    summary = MemberLoanSummary(member_id=member.member_id, member_name=member.display_name)

    repaid = Decimal("0")
    for loan in loans:
        if loan.state not in OUTSTANDING_STATES:
            continue
        summary.active_loan_amount += to_decimal(loan.loan_amount)
        repaid += total_repaid(loan)
        summary.pending_interest += pending_interest(loan, None, now)
        summary.missed_repayment += missed_repayment(loan, now, tolerance)
        summary.loans.append(loan_progress(loan, now))

    summary.current_balance = max(Decimal("0"), summary.active_loan_amount - repaid)
    summary.total_interest_paid = sum(
        (to_decimal(p.amount_paid) for loan in loans for p in loan.interest_payments),
        Decimal("0"),
    )
    summary.recent_activity = recent_activity(loans)
    return summary


def recent_activity(loans: Iterable[Loan], limit: int | None = None) -> list[ActivityEntry]:
    """Interest payments, repayments and disbursements, newest first."""
    entries: list[ActivityEntry] = []
    for loan in loans:
        for p in loan.interest_payments:
            entries.append(
                ActivityEntry(
                    activity_id=f"int-{p.payment_id}",
                    title="Interest Payment",
                    date=p.payment_date or p.created_at,
                    amount=to_decimal(p.amount_paid),
                    money_in=True,
                )
            )
        for r in loan.repayments:
            entries.append(
                ActivityEntry(
                    activity_id=f"rep-{r.repayment_id}",
                    title="Loan Repayment",
                    date=r.paid_at or r.created_at,
                    amount=to_decimal(r.amount_paid),
                    money_in=True,
                )
            )
        for d in loan.disbursements:
            entries.append(
                ActivityEntry(
                    activity_id=f"dis-{d.disbursement_id}",
                    title="Loan Disbursement",
                    date=d.created_at,
                    amount=to_decimal(d.disbursement_amount),
                    money_in=False,
                )
            )

    entries = [e for e in entries if e.date is not None]
    entries.sort(key=lambda e: as_instant(e.date), reverse=True)
    return entries[:limit] if limit is not None else entries


def follow_up_warning(
    summary: MemberLoanSummary,
    currency: str = "₦",
    threshold: Decimal = MISSED_REPAYMENT_WARNING_THRESHOLD,
) -> str | None:
    """Collection reminder for the member profile footer, if one is due."""
    has_interest = summary.pending_interest > 0
    has_missed = summary.missed_repayment > threshold

    interest = f"{currency}{summary.pending_interest:,}"
    missed = f"{currency}{summary.missed_repayment:,}"

    if has_interest and has_missed:
        return (
            f"This member has pending interest fees ({interest}) and missed loan "
            f"installments ({missed}). Please follow up."
        )
    if has_interest:
        return f"This member has pending interest fee payment(s) of {interest}. Please follow up."
    if has_missed:
        return f"This member has missed loan installment(s) of {missed}. Please follow up."
    return None
