"""Client contracts for the hosted loan backend."""

from coop_loans.backend.base import (
    ExtensionPreview,
    LoanBackend,
    ProcedureResult,
    extension_options,
    preview_extension,
    validate_extension,
    validate_repayment_amount,
    validate_tenure,
)
from coop_loans.backend.postgres import PostgresBackend

__all__ = [
    "ExtensionPreview",
    "LoanBackend",
    "PostgresBackend",
    "ProcedureResult",
    "extension_options",
    "preview_extension",
    "validate_extension",
    "validate_repayment_amount",
    "validate_tenure",
]
