# Overview: Service-layer operations for medicine usage; encapsulates business logic and database work.

"""
Usage Recorder - administrative stock consumption (not a sale)

Same discipline as create_transaction, on a single medicine:
    lock -> check on the locked snapshot -> decrement + insert usage -> commit
"""

from __future__ import annotations

from ..extensions import db
from ..models import Medicine, MedicineUsage
from ..validation import optional_text, require_int, require_positive_int
from carecenter.time_utils import utcnow
from .concurrency import atomic_unit
from .inventory_service import decrement_stock, ensure_available, lock_and_fetch


def record_usage(medicine_id, quantity_used, notes: str | None = None) -> MedicineUsage:
    """
    Consume quantity_used units of a medicine and log it.

    Raises InvalidArgumentError, MedicineNotFoundError, InsufficientStockError
    (before any write), ConflictError or StorageFailureError (after rollback).
    """
    medicine_id = require_int(medicine_id, "medicine_id", minimum=1)
    quantity_used = require_positive_int(quantity_used, "quantity_used")
    notes = optional_text(notes, "notes")

    with atomic_unit("record_usage"):
        medicine = lock_and_fetch([medicine_id])[medicine_id]
        ensure_available(medicine, quantity_used)

        decrement_stock(medicine_id, quantity_used)
        now = utcnow()
        usage = MedicineUsage(
            medicine_id=medicine_id,
            quantity_used=quantity_used,
            usage_date=now,
            notes=notes,
            created_at=now,
        )
        db.session.add(usage)
        db.session.flush()

    return usage


def list_usage() -> list[dict]:
    """Usage history, most recent first, with the medicine name."""
    rows = (
        db.session.query(MedicineUsage, Medicine.name)
        .join(Medicine, Medicine.id == MedicineUsage.medicine_id)
        .order_by(MedicineUsage.usage_date.desc(), MedicineUsage.id.desc())
        .all()
    )
    result = []
    for usage, medicine_name in rows:
        data = usage.to_dict()
        data["medicine_name"] = medicine_name
        result.append(data)
    return result
