"""Read-side reports built on the loan schedules."""

from coop_loans.reports.fees import (
    FeeRecord,
    FeeReport,
    FeeStats,
    FeeStatus,
    Page,
    build_fee_records,
    filter_fee_records,
    paginate,
)
from coop_loans.reports.member import (
    ActivityEntry,
    MemberLoanSummary,
    follow_up_warning,
    recent_activity,
    summarize_member,
)
from coop_loans.reports.portfolio import StatusDistribution, loan_display_status, status_distribution

__all__ = [
    "ActivityEntry",
    "FeeRecord",
    "FeeReport",
    "FeeStats",
    "FeeStatus",
    "MemberLoanSummary",
    "Page",
    "StatusDistribution",
    "build_fee_records",
    "filter_fee_records",
    "follow_up_warning",
    "loan_display_status",
    "paginate",
    "recent_activity",
    "status_distribution",
    "summarize_member",
]
