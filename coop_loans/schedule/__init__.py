"""Interest and principal schedules derived from loan records."""

from coop_loans.schedule.interest import (
    LoanTerms,
    ObligationMonth,
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
from coop_loans.schedule.principal import (
    LoanProgress,
    installments_due,
    loan_progress,
    missed_repayment,
    monthly_principal,
    next_due_date,
)

__all__ = [
    "LoanProgress",
    "LoanTerms",
    "ObligationMonth",
    "calculation_limit",
    "compute_payable_months",
    "compute_unpaid_obligation_months",
    "effective_start_date",
    "installments_due",
    "is_month_paid",
    "is_overdue",
    "loan_end_date",
    "loan_progress",
    "missed_repayment",
    "monthly_interest",
    "monthly_principal",
    "next_due_date",
    "obligation_months",
    "partition_obligation_months",
    "pending_interest",
]
