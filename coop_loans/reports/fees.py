"""Interest fee list: paid, pending and overdue monthly fees."""

from __future__ import annotations

import calendar
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from coop_loans.models import OUTSTANDING_STATES, InterestPayment, Loan, Member
from coop_loans.exceptions import ValidationError
from coop_loans.schedule.interest import (
    as_instant,
    compute_unpaid_obligation_months,
    monthly_interest,
    to_decimal,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class FeeStatus(str, Enum):
    ACTIVE = "active"  # Paid
    PENDING = "pending"
    OVERDUE = "overdue"


@dataclass
class FeeRecord:
    """One row of the fee list.

    Paid rows come from interest payments; pending and overdue rows are
    virtual, one per unpaid obligation month, with id ``{loan_id}-{YYYY-MM}``.
    """

    record_id: str
    loan_id: str
    member_name: str
    member_id: str
    month: date
    amount: Decimal
    status: FeeStatus
    member_avatar: str | None = None
    pay_date: date | None = None
    method: str | None = None
    created_at: datetime | None = None


@dataclass
class FeeStats:
    """Counters shown above the fee list."""

    paid: int = 0
    pending: int = 0
    overdue: int = 0
    total_collected: Decimal = Decimal("0")


@dataclass
class FeeReport:
    """Fee records, newest first, with their counters."""

    records: list[FeeRecord] = field(default_factory=list)
    stats: FeeStats = field(default_factory=FeeStats)


@dataclass
class Page:
    """A page of fee records."""

    items: list[FeeRecord]
    page: int
    per_page: int
    total_items: int
    total_pages: int


def build_fee_records(
    payments: Iterable[InterestPayment],
    loans: Iterable[Loan],
    members: Mapping[str, Member],
    now: date | datetime,
) -> FeeReport:
    """Build the fee list as of ``now``.

    Parameters
    ----------
    payments : Iterable[InterestPayment]
        All recorded interest payments.
    loans : Iterable[Loan]
        Loans the payments refer to. Only active or disbursed loans
        contribute pending and overdue rows.
    members : Mapping[str, Member]
        Members keyed by storage id.
    now : date | datetime
        Reference instant.

    Returns
    -------
    FeeReport
        Records sorted newest first and their counters.
    """
    loans_by_id = {loan.loan_id: loan for loan in loans}
    payments_by_loan: dict[str, list[InterestPayment]] = defaultdict(list)
    report = FeeReport()

    for payment in payments:
        loan = loans_by_id.get(payment.loan_id)
        member = members.get(loan.member_id) if loan else None
        if member is None:
            logger.debug("Skipping payment %s without loan or member", payment.payment_id)
            continue

        payments_by_loan[payment.loan_id].append(payment)
        report.records.append(
            FeeRecord(
                record_id=payment.payment_id,
                loan_id=payment.loan_id,
                member_name=member.display_name,
                member_id=member.member_id or "N/A",
                member_avatar=member.avatar_url,
                month=payment.payment_for_month,
                amount=to_decimal(payment.amount_paid),
                status=FeeStatus.ACTIVE,
                pay_date=payment.payment_date,
                method=payment.payment_method,
                created_at=payment.created_at,
            )
        )
        report.stats.paid += 1
        report.stats.total_collected += to_decimal(payment.amount_paid)

    for loan in loans_by_id.values():
        if loan.state not in OUTSTANDING_STATES:
            continue
        member = members.get(loan.member_id)
        if member is None:
            continue

        amount = monthly_interest(loan)
        for due in compute_unpaid_obligation_months(loan, payments_by_loan[loan.loan_id], now):
            status = FeeStatus.OVERDUE if due.overdue else FeeStatus.PENDING
            if due.overdue:
                report.stats.overdue += 1
            else:
                report.stats.pending += 1

            report.records.append(
                FeeRecord(
                    record_id=f"{loan.loan_id}-{due.month:%Y-%m}",
                    loan_id=loan.loan_id,
                    member_name=member.display_name,
                    member_id=member.member_id or "N/A",
                    member_avatar=member.avatar_url,
                    month=due.month,
                    amount=amount,
                    status=status,
                )
            )

    report.records.sort(key=_sort_key, reverse=True)
    logger.info(
        "Built fee list: %d paid, %d pending, %d overdue",
        report.stats.paid,
        report.stats.pending,
        report.stats.overdue,
    )
    return report


def filter_fee_records(
    records: Iterable[FeeRecord],
    search: str = "",
    status: str = "all",
    month: str = "all",
) -> list[FeeRecord]:
    """Filter fee records the way the fee list screen does.

    ``search`` matches member name or member id case-insensitively,
    ``status`` is a FeeStatus value, and ``month`` a full English month
    name such as ``"March"``.
    """
    needle = search.lower()
    result = []
    for record in records:
        if needle and needle not in record.member_name.lower() and needle not in record.member_id.lower():
            continue
        if status != "all" and record.status.value != status:
            continue
        if month != "all" and calendar.month_name[record.month.month] != month:
            continue
        result.append(record)
    return result


def paginate(records: list[FeeRecord], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page:
    """Slice ``records`` into a page, clamping ``page`` into range."""
    if per_page <= 0:
        raise ValidationError(f"Page size must be positive, got {per_page}")
    total_pages = max(1, math.ceil(len(records) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=records[start : start + per_page],
        page=page,
        per_page=per_page,
        total_items=len(records),
        total_pages=total_pages,
    )


def _sort_key(record: FeeRecord) -> datetime:
    return as_instant(record.created_at if record.created_at is not None else record.month)
