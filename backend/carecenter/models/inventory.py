from __future__ import annotations

from ..extensions import db
from ..money import cents_to_decimal, format_cents
from carecenter.time_utils import to_utc_z, to_iso_date, utcnow


class Medicine(db.Model):
    """
    Medicine master data with its authoritative stock counter.

    STOCK: stock_quantity is a mutable counter, never negative. It is only
    decremented by inventory_service.decrement_stock inside an atomic unit,
    after the row was locked by inventory_service.lock_and_fetch.

    PRICE: price_cents is the current list price. Sales copy it onto
    TransactionItem.unit_price_cents, so later price edits never rewrite history.
    """
    __tablename__ = "medicines"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_medicines_stock_nonnegative"),
        db.CheckConstraint("minimum_stock >= 0", name="ck_medicines_minimum_nonnegative"),
        db.CheckConstraint("price_cents >= 0", name="ck_medicines_price_nonnegative"),
        db.Index("ix_medicines_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    unit = db.Column(db.String(32), nullable=False)  # e.g. "tablet", "bottle", "box"

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.BigInteger, nullable=False)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    minimum_stock = db.Column(db.Integer, nullable=False, default=0)
    expiry_date = db.Column(db.Date, nullable=False)
    supplier = db.Column(db.String(255), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def price(self):
        return cents_to_decimal(self.price_cents)

    def __repr__(self) -> str:
        return f"<Medicine id={self.id} name={self.name!r} stock={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "unit": self.unit,
            "price_cents": self.price_cents,
            "price": format_cents(self.price_cents),
            "stock_quantity": self.stock_quantity,
            "minimum_stock": self.minimum_stock,
            "expiry_date": to_iso_date(self.expiry_date),
            "supplier": self.supplier,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class MedicineUsage(db.Model):
    """Administrative consumption of stock (not a sale): no patient, no code, no price."""
    __tablename__ = "medicine_usage"
    __table_args__ = (
        db.CheckConstraint("quantity_used > 0", name="ck_medicine_usage_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    medicine_id = db.Column(db.Integer, db.ForeignKey("medicines.id"), nullable=False, index=True)
    quantity_used = db.Column(db.Integer, nullable=False)
    usage_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    medicine = db.relationship("Medicine", backref=db.backref("usages", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "medicine_id": self.medicine_id,
            "quantity_used": self.quantity_used,
            "usage_date": to_utc_z(self.usage_date),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
