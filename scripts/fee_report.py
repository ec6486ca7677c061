#!/usr/bin/env python3
"""Build the interest fee report for a synthetic loan portfolio.

Generates members, loans and interest payments, then writes the fee
list, member summaries and the loan status distribution as JSON files.

Usage::

    python scripts/fee_report.py --members 20 --as-of 2024-06-15 --output local/
"""

import argparse
import logging
import random
from datetime import date, datetime, timedelta
from decimal import Decimal

from coop_loans.config import CoopLoansConfig
from coop_loans.generators import InterestPaymentGenerator, LoanGenerator, MemberGenerator
from coop_loans.logging import setup_logging
from coop_loans.models import CLOSED_STATES, OUTSTANDING_STATES, LoanState
from coop_loans.reports import (
    build_fee_records,
    filter_fee_records,
    follow_up_warning,
    paginate,
    status_distribution,
    summarize_member,
)
from coop_loans.sinks import ConsoleSink, JsonFileSink
from coop_loans.store import LoanRegistry

logger = logging.getLogger(__name__)

STATE_WEIGHTS = {
    LoanState.ACTIVE: 0.55,
    LoanState.DISBURSED: 0.15,
    LoanState.PENDING: 0.10,
    LoanState.PAID: 0.15,
    LoanState.REJECTED: 0.05,
}


def build_portfolio(num_members: int, now: datetime, seed: int | None) -> LoanRegistry:
    """Generate a registry of members with loans and interest payments."""
    registry = LoanRegistry()
    member_gen = MemberGenerator(seed=seed)
    loan_gen = LoanGenerator(seed=seed)
    payment_gen = InterestPaymentGenerator(seed=seed)

    for member in member_gen.generate_batch(num_members):
        registry.add_member(member)

        for _ in range(random.randint(1, 2)):
            state = random.choices(list(STATE_WEIGHTS), weights=list(STATE_WEIGHTS.values()), k=1)[0]
            created_at = now - timedelta(days=random.randint(30, 365))
            loan = loan_gen.generate(member.id, state=state, created_at=created_at)
            registry.add_loan(loan)
            if loan.state not in OUTSTANDING_STATES and loan.state not in CLOSED_STATES:
                continue
            for payment in payment_gen.generate_for_loan(loan, now):
                registry.add_interest_payment(payment)

    logger.info("Generated portfolio: %s", registry.summary())
    return registry


def main() -> None:
    config = CoopLoansConfig.from_env()

    parser = argparse.ArgumentParser(description="Build the interest fee report")
    parser.add_argument("--members", type=int, default=20, help="Number of members")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="Report date (YYYY-MM-DD)")
    parser.add_argument("--seed", type=int, default=config.seed, help="Random seed")
    parser.add_argument("--output", default=str(config.output.json_output_dir), help="Output directory")
    parser.add_argument("--status", default="all", help="Fee status filter (active, pending, overdue)")
    parser.add_argument("--console", action="store_true", help="Also print the first page to stdout")
    parser.add_argument("--log-level", default=config.log_level)
    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.seed is not None:
        random.seed(args.seed)
    now = datetime.combine(args.as_of, datetime.min.time()) if args.as_of else datetime.now()

    registry = build_portfolio(args.members, now, args.seed)
    loans = list(registry.loans.values())

    report = build_fee_records(registry.all_interest_payments(), loans, registry.members, now)
    records = filter_fee_records(report.records, status=args.status)

    summaries = []
    for member in registry.members.values():
        summary = summarize_member(
            member,
            registry.get_member_loans(member.id),
            now,
            tolerance=Decimal(config.schedule.missed_repayment_tolerance),
        )
        warning = follow_up_warning(
            summary,
            currency=config.schedule.currency_symbol,
            threshold=Decimal(config.schedule.warning_threshold),
        )
        if warning:
            logger.warning("%s: %s", summary.member_name, warning)
        summaries.append(summary)

    sink = JsonFileSink(args.output, pretty=config.output.pretty_json)
    sink.write_batch("fee_records", records)
    sink.write_batch("fee_stats", [report.stats])
    sink.write_batch("member_summaries", summaries)
    sink.write_batch("loan_status", status_distribution(loans, now).as_chart_data())
    sink.close()

    if args.console:
        page = paginate(records, page=1, per_page=config.schedule.page_size)
        console = ConsoleSink(max_records=config.schedule.page_size)
        console.write_batch(f"fee_records page {page.page}/{page.total_pages}", page.items)
        console.close()


if __name__ == "__main__":
    main()
