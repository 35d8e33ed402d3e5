# Overview: Service-layer operations for code sequences; encapsulates business logic and database work.

"""
Code Generator - sequential, unique codes per series

Codes are prefix + zero-padded counter: "TXN000001", "P000042".

CONCURRENCY: the counter lives in its own code_sequences row and is bumped
with a single UPDATE ... SET next_number = next_number + 1 inside the
caller's atomic unit. The row write lock is held until the unit commits,
so two concurrent creations can never compute the same number, and a
rolled-back creation also rolls back its number (no gaps).

BOOTSTRAP: the first allocation for a series seeds the counter from the
highest code already stored in the labelled table, so databases that
predate the counter keep counting from their last code.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, update

from ..extensions import db
from ..models import CodeSequence, Patient, Transaction

CODE_PAD = 6


@dataclass(frozen=True)
class CodeSeries:
    name: str
    prefix: str
    column: object  # mapped column holding the issued codes


TRANSACTIONS = CodeSeries("transactions", "TXN", Transaction.transaction_code)
PATIENTS = CodeSeries("patients", "P", Patient.patient_code)

SERIES = {s.name: s for s in (TRANSACTIONS, PATIENTS)}


def format_code(prefix: str, number: int, pad: int = CODE_PAD) -> str:
    return f"{prefix}{number:0{pad}d}"


def parse_code(code: str | None, prefix: str) -> int | None:
    """Numeric suffix of a code from this series, or None when it does not belong to it."""
    if not code or not code.startswith(prefix):
        return None
    suffix = code[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def highest_existing_number(series: CodeSeries) -> int:
    """
    Largest numeric suffix among stored codes of the series (0 when none).

    Codes are fixed width, so the lexicographic max is the numeric max.
    """
    prefix = series.prefix
    last_code = (
        db.session.query(func.max(series.column))
        .filter(series.column.like(f"{prefix}%"))
        .scalar()
    )
    return parse_code(last_code, prefix) or 0


def _bump(series_name: str) -> int | None:
    stmt = (
        update(CodeSequence)
        .where(CodeSequence.series == series_name)
        .values(next_number=CodeSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        return None
    current = (
        db.session.query(CodeSequence.next_number)
        .filter_by(series=series_name)
        .scalar()
    )
    return current - 1


def next_number(series_name: str) -> int:
    """
    Atomically allocate the next number of a series.

    Must run inside an atomic unit: the allocation commits or rolls back
    with the row it labels. A concurrent first-time seed of the same series
    fails on the unique constraint and surfaces as ConflictError.
    """
    if series_name not in SERIES:
        raise ValueError(f"unknown code series: {series_name}")

    number = _bump(series_name)
    if number is not None:
        return number

    number = highest_existing_number(SERIES[series_name]) + 1
    db.session.add(CodeSequence(series=series_name, next_number=number + 1))
    db.session.flush()
    return number


def next_code(series_name: str, prefix: str | None = None, pad: int = CODE_PAD) -> str:
    """Allocate and format the next code, e.g. next_code("transactions") -> "TXN000001"."""
    number = next_number(series_name)
    return format_code(prefix or SERIES[series_name].prefix, number, pad)


def peek_next_code(series_name: str) -> str:
    """Code the next allocation would return. Read-only; not a reservation."""
    series = SERIES[series_name]
    seq = db.session.query(CodeSequence).filter_by(series=series_name).first()
    number = seq.next_number if seq else highest_existing_number(series) + 1
    return format_code(series.prefix, number)
