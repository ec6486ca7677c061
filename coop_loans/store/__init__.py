"""In-memory data stores for maintaining entity relationships."""

from coop_loans.store.registry import LoanRegistry

__all__ = ["LoanRegistry"]
