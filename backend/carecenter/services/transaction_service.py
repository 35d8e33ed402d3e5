# Overview: Service-layer operations for sales transactions; encapsulates business logic and database work.

"""
Transaction Ledger - validate, price and atomically commit a sale

One call to create_transaction is one atomic unit:
    patient check -> lock medicines -> check stock on the locked snapshot
    -> price lines (integer cents) -> allocate TXN code
    -> insert transaction + items -> decrement stock -> commit

Validation failures raise before anything is written. A failure after that
(storage fault, conflict) rolls back the whole unit: no transaction row, no
item row and no stock decrement survives.
"""

from __future__ import annotations

from ..errors import (
    InvalidArgumentError,
    InvalidStatusTransitionError,
    PatientNotFoundError,
    TransactionNotFoundError,
)
from ..extensions import db
from ..models import Patient, Transaction, TransactionItem
from ..models.transactions import PAYMENT_STATUSES
from ..validation import id_in_range, optional_text, parse_line_items, require_int
from carecenter.time_utils import utcnow
from .concurrency import atomic_unit, lock_for_update
from .inventory_service import decrement_stock, ensure_available, lock_and_fetch
from .sequence_service import TRANSACTIONS, next_code

# Payment status state machine; "cancelled" is terminal
ALLOWED_STATUS_TRANSITIONS = {
    "pending": {"paid", "cancelled"},
    "paid": {"cancelled"},
    "cancelled": set(),
}


def _required_per_medicine(lines) -> dict[int, int]:
    # A medicine on several lines must cover the sum of its lines
    totals: dict[int, int] = {}
    for line in lines:
        totals[line.medicine_id] = totals.get(line.medicine_id, 0) + line.quantity
    return totals


def create_transaction(patient_id, items, notes: str | None = None) -> Transaction:
    """
    Create a pending transaction for a patient and debit stock for every line.

    items: non-empty list of {"medicine_id", "quantity"} dicts,
    (medicine_id, quantity) pairs or LineItemRequest values.

    Raises InvalidArgumentError, PatientNotFoundError, MedicineNotFoundError,
    InsufficientStockError (all before any write), ConflictError or
    StorageFailureError (after a full rollback).
    """
    patient_id = require_int(patient_id, "patient_id", minimum=1)
    lines = parse_line_items(items)
    notes = optional_text(notes, "notes")

    with atomic_unit("create_transaction"):
        if not id_in_range(patient_id) or db.session.get(Patient, patient_id) is None:
            raise PatientNotFoundError(patient_id)

        medicines = lock_and_fetch(line.medicine_id for line in lines)

        for medicine_id, required in _required_per_medicine(lines).items():
            ensure_available(medicines[medicine_id], required)

        transaction_items = []
        total_cents = 0
        for line in lines:
            unit_price_cents = medicines[line.medicine_id].price_cents
            subtotal_cents = unit_price_cents * line.quantity
            total_cents += subtotal_cents
            transaction_items.append(
                TransactionItem(
                    medicine_id=line.medicine_id,
                    quantity=line.quantity,
                    unit_price_cents=unit_price_cents,
                    subtotal_cents=subtotal_cents,
                )
            )

        now = utcnow()
        transaction = Transaction(
            transaction_code=next_code(TRANSACTIONS.name, TRANSACTIONS.prefix),
            patient_id=patient_id,
            transaction_date=now,
            total_amount_cents=total_cents,
            payment_status="pending",
            notes=notes,
            created_at=now,
            updated_at=now,
            items=transaction_items,
        )
        db.session.add(transaction)

        for line in lines:
            decrement_stock(line.medicine_id, line.quantity)

        db.session.flush()

    return transaction


def get_transaction(transaction_id) -> Transaction:
    transaction_id = require_int(transaction_id, "transaction_id")
    transaction = db.session.get(Transaction, transaction_id) if id_in_range(transaction_id) else None
    if transaction is None:
        raise TransactionNotFoundError(transaction_id)
    return transaction


def list_transactions(patient_id=None, payment_status: str | None = None) -> list[Transaction]:
    query = db.session.query(Transaction)
    if patient_id is not None:
        patient_id = require_int(patient_id, "patient_id")
        if not id_in_range(patient_id):
            return []
        query = query.filter(Transaction.patient_id == patient_id)
    if payment_status is not None:
        if payment_status not in PAYMENT_STATUSES:
            raise InvalidArgumentError(
                f"payment_status must be one of {', '.join(PAYMENT_STATUSES)}",
                {"field": "payment_status"},
            )
        query = query.filter(Transaction.payment_status == payment_status)
    return query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc()).all()


def update_transaction_status(transaction_id, payment_status: str) -> Transaction:
    """
    Move a transaction's payment_status along ALLOWED_STATUS_TRANSITIONS.

    Setting the current status again is a no-op. Cancelling does not restock.
    """
    transaction_id = require_int(transaction_id, "transaction_id")
    if payment_status not in PAYMENT_STATUSES:
        raise InvalidArgumentError(
            f"payment_status must be one of {', '.join(PAYMENT_STATUSES)}",
            {"field": "payment_status", "value": payment_status},
        )
    if not id_in_range(transaction_id):
        raise TransactionNotFoundError(transaction_id)

    with atomic_unit("update_transaction_status"):
        transaction = lock_for_update(
            db.session.query(Transaction).filter_by(id=transaction_id)
        ).first()
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)

        current = transaction.payment_status
        if current != payment_status:
            if payment_status not in ALLOWED_STATUS_TRANSITIONS.get(current, set()):
                raise InvalidStatusTransitionError(
                    f"Cannot change payment status from {current} to {payment_status}",
                    {"transaction_id": transaction_id, "from": current, "to": payment_status},
                )
            transaction.payment_status = payment_status
            transaction.updated_at = utcnow()

    return transaction
