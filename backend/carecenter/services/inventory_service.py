# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/carecenter/services/inventory_service.py
"""
Care Center Inventory Invariants (authoritative)

Stock model:
- Medicine.stock_quantity is the authoritative, mutable on-hand counter.
- stock_quantity may never go negative (also enforced by a CHECK constraint).

Write discipline:
- Any operation that reads stock and decides to decrement it does so inside
  one atomic unit (services.concurrency.atomic_unit):
    lock_and_fetch(ids) -> check against the locked snapshot -> decrement_stock
- lock_and_fetch locks rows in id order so concurrent callers cannot deadlock
  on each other's rows.
- decrement_stock refuses ids that were not locked in the current unit.

Reads:
- get_medicine_stock / get_low_stock_medicines are snapshot reads taken
  outside any write lock. They are never authoritative for a sale.
"""

from __future__ import annotations

from datetime import date

from ..errors import InsufficientStockError, InvalidArgumentError, MedicineNotFoundError
from ..extensions import db
from ..models import Medicine
from ..money import MoneyError, to_cents, MAX_AMOUNT_CENTS
from ..validation import MAX_DB_INT, id_in_range, require_int, require_text, optional_text
from carecenter.time_utils import parse_iso_date, utcnow
from .concurrency import atomic_unit, lock_for_update, locked_ids

STOCK_OUT = "out_of_stock"
STOCK_LOW = "low"
STOCK_SUFFICIENT = "sufficient"


def classify_stock(stock_quantity: int, minimum_stock: int) -> str:
    if stock_quantity == 0:
        return STOCK_OUT
    if stock_quantity <= minimum_stock:
        return STOCK_LOW
    return STOCK_SUFFICIENT


def lock_and_fetch(medicine_ids) -> dict[int, Medicine]:
    """
    Lock the given medicine rows for the rest of the current atomic unit.

    Returns {id: Medicine}. Raises MedicineNotFoundError naming the first
    id (in ascending order) that does not exist.
    """
    ids = sorted(set(medicine_ids))
    if not ids:
        return {}

    query = (
        db.session.query(Medicine)
        .filter(Medicine.id.in_([i for i in ids if id_in_range(i)]))
        .order_by(Medicine.id)
        .populate_existing()
    )
    medicines = {m.id: m for m in lock_for_update(query).all()}

    for medicine_id in ids:
        if medicine_id not in medicines:
            raise MedicineNotFoundError(medicine_id)

    locked_ids().update(ids)
    return medicines


def ensure_available(medicine: Medicine, required: int) -> None:
    """Check a locked snapshot; raises InsufficientStockError with name, available, required."""
    if medicine.stock_quantity < required:
        raise InsufficientStockError(
            medicine_id=medicine.id,
            medicine_name=medicine.name,
            available=medicine.stock_quantity,
            required=required,
        )


def decrement_stock(medicine_id: int, amount: int) -> Medicine:
    """
    Reduce stock_quantity by amount on a row locked in this atomic unit.

    CRITICAL: must follow lock_and_fetch in the same unit, otherwise the
    check-then-decrement could act on a stale value.
    """
    if medicine_id not in locked_ids():
        raise RuntimeError(f"medicine {medicine_id} must be locked with lock_and_fetch before decrementing stock")
    if amount <= 0:
        raise InvalidArgumentError("decrement amount must be > 0", {"amount": amount})

    medicine = db.session.get(Medicine, medicine_id)
    ensure_available(medicine, amount)

    medicine.stock_quantity = medicine.stock_quantity - amount
    medicine.updated_at = utcnow()
    return medicine


def get_medicine(medicine_id: int) -> Medicine:
    medicine = db.session.get(Medicine, medicine_id) if id_in_range(medicine_id) else None
    if medicine is None:
        raise MedicineNotFoundError(medicine_id)
    return medicine


def get_medicine_stock(medicine_id: int) -> dict:
    """
    Pre-flight stock view for UIs.

    NOT authoritative: the binding check happens inside create_transaction.
    """
    medicine_id = require_int(medicine_id, "medicine_id")
    medicine = get_medicine(medicine_id)
    return {
        "medicine_id": medicine.id,
        "medicine_name": medicine.name,
        "stock_quantity": medicine.stock_quantity,
        "minimum_stock": medicine.minimum_stock,
        "stock_status": classify_stock(medicine.stock_quantity, medicine.minimum_stock),
    }


def get_low_stock_medicines(threshold: int | None = None) -> list[Medicine]:
    """
    Medicines running low.

    With a threshold: stock_quantity <= threshold.
    Without: stock_quantity <= the medicine's own minimum_stock.
    """
    query = db.session.query(Medicine)
    if threshold is not None:
        threshold = min(require_int(threshold, "threshold", minimum=0), MAX_DB_INT)
        query = query.filter(Medicine.stock_quantity <= threshold)
    else:
        query = query.filter(Medicine.stock_quantity <= Medicine.minimum_stock)
    return query.order_by(Medicine.stock_quantity.asc(), Medicine.name.asc()).all()


def list_medicines() -> list[Medicine]:
    return db.session.query(Medicine).order_by(Medicine.name.asc(), Medicine.id.asc()).all()


def create_medicine(
    *,
    name: str,
    category: str,
    unit: str,
    price,
    stock_quantity: int,
    minimum_stock: int,
    expiry_date: date | str,
    description: str | None = None,
    supplier: str | None = None,
) -> Medicine:
    """
    Register a medicine (inventory collaborator, not part of the sales core).

    price accepts Decimal, int or a decimal string; it must be > 0 with at
    most two decimal places.
    """
    try:
        price_cents = to_cents(price)
    except MoneyError as exc:
        raise InvalidArgumentError(str(exc), {"field": "price"})
    if price_cents <= 0:
        raise InvalidArgumentError("price must be > 0", {"field": "price"})
    if price_cents > MAX_AMOUNT_CENTS:
        raise InvalidArgumentError("price is too large", {"field": "price"})

    try:
        expiry = parse_iso_date(expiry_date)
    except ValueError:
        raise InvalidArgumentError("expiry_date must be an ISO-8601 date", {"field": "expiry_date"})
    if expiry is None:
        raise InvalidArgumentError("expiry_date is required", {"field": "expiry_date"})

    medicine = Medicine(
        name=require_text(name, "name", max_length=255),
        category=require_text(category, "category", max_length=120),
        unit=require_text(unit, "unit", max_length=32),
        description=optional_text(description, "description"),
        supplier=optional_text(supplier, "supplier", max_length=255),
        price_cents=price_cents,
        stock_quantity=require_int(stock_quantity, "stock_quantity", minimum=0, maximum=MAX_DB_INT),
        minimum_stock=require_int(minimum_stock, "minimum_stock", minimum=0, maximum=MAX_DB_INT),
        expiry_date=expiry,
    )

    with atomic_unit("create_medicine"):
        db.session.add(medicine)
    return medicine
