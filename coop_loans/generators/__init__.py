"""Synthetic data generators for demos and tests."""

from coop_loans.generators.loan import InterestPaymentGenerator, LoanGenerator
from coop_loans.generators.member import MemberGenerator

__all__ = [
    "InterestPaymentGenerator",
    "LoanGenerator",
    "MemberGenerator",
]
