# Overview: Service-layer operations for reporting; read-only projections over ledger and inventory data.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from carecenter.extensions import db
from carecenter.models import Medicine, Patient, Transaction, TransactionItem
from carecenter.money import format_cents
from carecenter.services.inventory_service import classify_stock
from carecenter.time_utils import to_iso_date, to_utc_z, today
from carecenter.validation import id_in_range, require_int

# These projections only read. They take no locks and never flush or commit,
# so repeated calls return the same result until someone else writes.


def stock_report(as_of: date | None = None) -> list[dict]:
    """Stock status and days to expiry for every medicine."""
    as_of = as_of or today()
    medicines = db.session.query(Medicine).order_by(Medicine.name.asc(), Medicine.id.asc()).all()
    return [
        {
            "medicine_id": m.id,
            "medicine_name": m.name,
            "category": m.category,
            "current_stock": m.stock_quantity,
            "minimum_stock": m.minimum_stock,
            "stock_status": classify_stock(m.stock_quantity, m.minimum_stock),
            "expiry_date": to_iso_date(m.expiry_date),
            "days_to_expiry": (m.expiry_date - as_of).days,
        }
        for m in medicines
    ]


def patient_report() -> list[dict]:
    """
    Per patient: number of transactions, total spent and last visit.

    All payment statuses count, including cancelled ones.
    """
    rows = (
        db.session.query(
            Patient.id.label("patient_id"),
            Patient.patient_code,
            Patient.name,
            func.count(Transaction.id).label("total_transactions"),
            func.coalesce(func.sum(Transaction.total_amount_cents), 0).label("total_spent_cents"),
            func.max(Transaction.transaction_date).label("last_visit"),
        )
        .outerjoin(Transaction, Transaction.patient_id == Patient.id)
        .group_by(Patient.id, Patient.patient_code, Patient.name)
        .order_by(Patient.name.asc(), Patient.id.asc())
        .all()
    )
    return [
        {
            "patient_id": row.patient_id,
            "patient_code": row.patient_code,
            "patient_name": row.name,
            "total_transactions": int(row.total_transactions or 0),
            "total_amount_spent_cents": int(row.total_spent_cents or 0),
            "total_amount_spent": format_cents(int(row.total_spent_cents or 0)),
            "last_visit": to_utc_z(row.last_visit) if row.last_visit else None,
        }
        for row in rows
    ]


def generate_receipt(transaction_id) -> dict | None:
    """Receipt view of a transaction with its patient and line items; None when absent."""
    transaction_id = require_int(transaction_id, "transaction_id")
    if not id_in_range(transaction_id):
        return None
    row = (
        db.session.query(Transaction, Patient)
        .join(Patient, Patient.id == Transaction.patient_id)
        .filter(Transaction.id == transaction_id)
        .first()
    )
    if row is None:
        return None
    transaction, patient = row

    item_rows = (
        db.session.query(TransactionItem, Medicine.name)
        .join(Medicine, Medicine.id == TransactionItem.medicine_id)
        .filter(TransactionItem.transaction_id == transaction_id)
        .order_by(TransactionItem.id.asc())
        .all()
    )

    return {
        "transaction_id": transaction.id,
        "transaction_code": transaction.transaction_code,
        "patient_name": patient.name,
        "patient_code": patient.patient_code,
        "transaction_date": to_utc_z(transaction.transaction_date),
        "items": [
            {
                "medicine_id": item.medicine_id,
                "medicine_name": medicine_name,
                "quantity": item.quantity,
                "unit_price_cents": item.unit_price_cents,
                "unit_price": format_cents(item.unit_price_cents),
                "subtotal_cents": item.subtotal_cents,
                "subtotal": format_cents(item.subtotal_cents),
            }
            for item, medicine_name in item_rows
        ],
        "total_amount_cents": transaction.total_amount_cents,
        "total_amount": format_cents(transaction.total_amount_cents),
        "payment_status": transaction.payment_status,
        "notes": transaction.notes,
    }
