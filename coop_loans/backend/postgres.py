"""PostgreSQL implementation of the loan backend."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import psycopg
from psycopg.rows import dict_row

from coop_loans.backend.base import (
    LoanBackend,
    ProcedureResult,
    validate_extension,
    validate_repayment_amount,
    validate_tenure,
)
from coop_loans.config import BackendConfig
from coop_loans.exceptions import BackendError, EntityNotFoundError
from coop_loans.logging import get_loan_logger
from coop_loans.models import (
    Disbursement,
    InterestPayment,
    Loan,
    LoanState,
    Repayment,
    RepaymentStatus,
)

logger = logging.getLogger(__name__)

LOAN_COLUMNS = (
    "id, member_id, loan_amount, interest_rate, tenure, created_at, state, "
    "\"interval\", amount_paid, due_date, is_extended, purpose, collateral_type, "
    "collateral_value, third_party_name, third_party_number"
)

DISBURSEMENT_SQL = (
    "SELECT id, loan_id, disbursement_amount, method, bank_account, disbursed_by, "
    "disbursed_by_name, notes, created_at FROM disbursements "
    "WHERE loan_id = ANY(%s) ORDER BY created_at"
)

INTEREST_PAYMENT_COLUMNS = (
    "id, loan_id, payment_for_month, amount_paid, payment_date, payment_method, "
    "created_at, notes, created_by_name"
)

REPAYMENT_SQL = (
    "SELECT id, loan_id, installment_number, due_date, amount_due, amount_paid, "
    "status, paid_at, created_at, notes FROM repayments "
    "WHERE loan_id = ANY(%s) ORDER BY installment_number"
)


class PostgresBackend(LoanBackend):
    """Loan backend over a psycopg connection.

    Stored procedures are invoked with named arguments and their JSON
    result is mapped to ``ProcedureResult``. Driver errors surface as
    ``BackendError``.
    """

    def __init__(self, config: BackendConfig | str) -> None:
        """Connect to the backend.

        Parameters
        ----------
        config : BackendConfig | str
            Connection settings or a PostgreSQL connection string.
        """
        if isinstance(config, str):
            self.conn = psycopg.connect(config)
        else:
            self.conn = psycopg.connect(config.connection_string, connect_timeout=config.connect_timeout)

    def __enter__(self) -> "PostgresBackend":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()

    # Reads
    def fetch_active_loans(self) -> list[Loan]:
        """Active or disbursed loans with nested records."""
        rows = self._query(
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE state IN ('active', 'disbursed')",
        )
        return self._assemble(rows)

    def fetch_member_loans(self, member_id: str) -> list[Loan]:
        """All loans of a member with nested records."""
        rows = self._query(f"SELECT {LOAN_COLUMNS} FROM loans WHERE member_id = %s", (member_id,))
        return self._assemble(rows)

    def fetch_interest_payments(self) -> list[InterestPayment]:
        """All interest payments, newest first."""
        rows = self._query(
            f"SELECT {INTEREST_PAYMENT_COLUMNS} FROM interest_payments ORDER BY created_at DESC",
        )
        return [_interest_payment(row) for row in rows]

    # Stored procedures
    def record_repayment_redistributed(
        self,
        loan_id: str,
        amount: Decimal,
        notes: str,
        created_by: str,
        remaining: Decimal | None = None,
    ) -> ProcedureResult:
        """Record a repayment; the backend spreads it across installments.

        When ``remaining`` is given the amount may not exceed it.
        """
        amount = validate_repayment_amount(amount, remaining)
        return self._call(
            "record_repayment_redistributed",
            loan_id,
            "SELECT record_repayment_redistributed("
            "p_loan_id => %s, p_amount => %s, p_notes => %s, p_created_by => %s) AS result",
            (loan_id, amount, notes or "", created_by),
            amount=amount,
        )

    def extend_loan(self, loan_id: str, extension_months: int, interval: int | None = None) -> ProcedureResult:
        """Extend a loan; the backend recomputes its installments."""
        validate_extension(extension_months, interval)
        return self._call(
            "extend_loan",
            loan_id,
            "SELECT extend_loan(p_loan_id => %s, p_extension_months => %s) AS result",
            (loan_id, extension_months),
            extension_months=extension_months,
        )

    def update_loan_tenure(self, loan_id: str, tenure: int) -> None:
        """Overwrite a loan's tenure."""
        tenure = validate_tenure(tenure)
        try:
            with self.conn.cursor() as cur:
                cur.execute("UPDATE loans SET tenure = %s WHERE id = %s RETURNING id", (tenure, loan_id))
                row = cur.fetchone()
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise BackendError(f"Failed to update loan tenure: {e}") from e

        if row is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        get_loan_logger(__name__, loan_id=loan_id).info("Loan tenure updated to %d months", tenure)

    def _call(self, procedure: str, loan_id: str, sql: str, params: tuple, **context: Any) -> ProcedureResult:
        log = get_loan_logger(__name__, loan_id=loan_id, procedure=procedure, **context)
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, params)
                row = cur.fetchone()
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            log.error("Procedure failed: %s", e)
            raise BackendError(f"{procedure} failed: {e}") from e

        result = ProcedureResult.from_payload(row["result"] if row else None)
        if result.success:
            log.info("Procedure succeeded")
        else:
            log.warning("Procedure reported failure: %s", result.error)
        return result

    def _query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, params)
                return list(cur.fetchall())
        except psycopg.Error as e:
            self.conn.rollback()
            raise BackendError(f"Query failed: {e}") from e

    def _assemble(self, rows: list[dict[str, Any]]) -> list[Loan]:
        loans = {str(row["id"]): _loan(row) for row in rows}
        if not loans:
            return []

        ids = list(loans)
        for row in self._query(DISBURSEMENT_SQL, (ids,)):
            loans[str(row["loan_id"])].disbursements.append(_disbursement(row))
        for row in self._query(
            f"SELECT {INTEREST_PAYMENT_COLUMNS} FROM interest_payments WHERE loan_id = ANY(%s)",
            (ids,),
        ):
            loans[str(row["loan_id"])].interest_payments.append(_interest_payment(row))
        for row in self._query(REPAYMENT_SQL, (ids,)):
            loans[str(row["loan_id"])].repayments.append(_repayment(row))

        logger.debug("Fetched %d loans", len(loans))
        return list(loans.values())


def _loan(row: dict[str, Any]) -> Loan:
    return Loan(
        loan_id=str(row["id"]),
        member_id=str(row["member_id"]),
        loan_amount=Decimal(str(row["loan_amount"])),
        interest_rate=Decimal(str(row["interest_rate"])),
        tenure=row["tenure"] or 0,
        created_at=row["created_at"],
        state=LoanState(row["state"]),
        interval=row.get("interval") or 1,
        amount_paid=Decimal(str(row.get("amount_paid") or 0)),
        due_date=row.get("due_date"),
        is_extended=bool(row.get("is_extended")),
        purpose=row.get("purpose") or "",
        collateral_type=row.get("collateral_type") or "",
        collateral_value=Decimal(str(row.get("collateral_value") or 0)),
        third_party_name=row.get("third_party_name") or "",
        third_party_number=row.get("third_party_number") or "",
    )


def _disbursement(row: dict[str, Any]) -> Disbursement:
    return Disbursement(
        disbursement_id=str(row["id"]),
        loan_id=str(row["loan_id"]),
        disbursement_amount=Decimal(str(row["disbursement_amount"])),
        method=row["method"],
        bank_account=row["bank_account"],
        disbursed_by=str(row["disbursed_by"]),
        disbursed_by_name=row.get("disbursed_by_name"),
        notes=row.get("notes"),
        created_at=row["created_at"],
    )


def _interest_payment(row: dict[str, Any]) -> InterestPayment:
    return InterestPayment(
        payment_id=str(row["id"]),
        loan_id=str(row["loan_id"]),
        payment_for_month=row["payment_for_month"],
        amount_paid=Decimal(str(row["amount_paid"])),
        payment_date=row.get("payment_date"),
        payment_method=row.get("payment_method"),
        created_at=row["created_at"],
        notes=row.get("notes"),
        created_by_name=row.get("created_by_name"),
    )


def _repayment(row: dict[str, Any]) -> Repayment:
    return Repayment(
        repayment_id=str(row["id"]),
        loan_id=str(row["loan_id"]),
        installment_number=row["installment_number"],
        due_date=row["due_date"],
        amount_due=Decimal(str(row["amount_due"])),
        amount_paid=Decimal(str(row.get("amount_paid") or 0)),
        status=RepaymentStatus(row.get("status") or "pending"),
        paid_at=row.get("paid_at"),
        created_at=row.get("created_at"),
        notes=row.get("notes"),
    )
