from __future__ import annotations

from ..extensions import db
from carecenter.time_utils import to_utc_z, to_iso_date, utcnow

GENDERS = ("male", "female")


class Patient(db.Model):
    """
    Patient record. Registered by patient_service; read-only to the sales core.

    patient_code ("P000001") is allocated once from the "patients" code series
    and never changes afterwards.
    """
    __tablename__ = "patients"
    __table_args__ = (
        db.UniqueConstraint("patient_code", name="uq_patients_patient_code"),
        db.Index("ix_patients_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    patient_code = db.Column(db.String(16), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=False)
    gender = db.Column(db.String(16), nullable=False)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True, unique=True)
    address = db.Column(db.Text, nullable=True)
    emergency_contact = db.Column(db.String(255), nullable=True)
    medical_history = db.Column(db.Text, nullable=True)
    allergies = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Patient id={self.id} code={self.patient_code!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "patient_code": self.patient_code,
            "name": self.name,
            "date_of_birth": to_iso_date(self.date_of_birth),
            "gender": self.gender,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "emergency_contact": self.emergency_contact,
            "medical_history": self.medical_history,
            "allergies": self.allergies,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
