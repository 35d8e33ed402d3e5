from __future__ import annotations

from ..extensions import db
from ..money import cents_to_decimal, format_cents
from carecenter.time_utils import to_utc_z, utcnow

PAYMENT_STATUSES = ("pending", "paid", "cancelled")


class Transaction(db.Model):
    """
    Sales transaction (medicines dispensed to a patient).

    Immutable once created, except payment_status which moves through
    transaction_service.ALLOWED_STATUS_TRANSITIONS.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.UniqueConstraint("transaction_code", name="uq_transactions_code"),
        db.CheckConstraint("total_amount_cents >= 0", name="ck_transactions_total_nonnegative"),
        db.Index("ix_transactions_patient_date", "patient_id", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable code from the "transactions" series (e.g., "TXN000042")
    transaction_code = db.Column(db.String(16), nullable=False)

    patient_id = db.Column(db.Integer, db.ForeignKey("patients.id"), nullable=False, index=True)
    transaction_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    total_amount_cents = db.Column(db.BigInteger, nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    patient = db.relationship("Patient", backref=db.backref("transactions", lazy=True))
    items = db.relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.id",
        lazy=True,
    )

    @property
    def total_amount(self):
        return cents_to_decimal(self.total_amount_cents)

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} code={self.transaction_code!r} status={self.payment_status}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "transaction_code": self.transaction_code,
            "patient_id": self.patient_id,
            "transaction_date": to_utc_z(self.transaction_date),
            "total_amount_cents": self.total_amount_cents,
            "total_amount": format_cents(self.total_amount_cents),
            "payment_status": self.payment_status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    """One line of a transaction; owned by exactly one Transaction."""
    __tablename__ = "transaction_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transaction_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)
    medicine_id = db.Column(db.Integer, db.ForeignKey("medicines.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    # Snapshot of Medicine.price_cents at sale time
    unit_price_cents = db.Column(db.BigInteger, nullable=False)
    subtotal_cents = db.Column(db.BigInteger, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    transaction = db.relationship("Transaction", back_populates="items")
    medicine = db.relationship("Medicine")

    @property
    def unit_price(self):
        return cents_to_decimal(self.unit_price_cents)

    @property
    def subtotal(self):
        return cents_to_decimal(self.subtotal_cents)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "medicine_id": self.medicine_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "unit_price": format_cents(self.unit_price_cents),
            "subtotal_cents": self.subtotal_cents,
            "subtotal": format_cents(self.subtotal_cents),
            "created_at": to_utc_z(self.created_at),
        }
