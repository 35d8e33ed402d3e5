# Overview: Service-layer operations for patient registration; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date

from ..errors import DuplicateRecordError, InvalidArgumentError, PatientNotFoundError
from ..extensions import db
from ..models import Patient
from ..models.patients import GENDERS
from ..validation import id_in_range, optional_text, require_int, require_text
from carecenter.time_utils import parse_iso_date
from .concurrency import atomic_unit
from .sequence_service import PATIENTS, next_code


def register_patient(
    *,
    name: str,
    date_of_birth: date | str,
    gender: str,
    phone: str | None = None,
    email: str | None = None,
    address: str | None = None,
    emergency_contact: str | None = None,
    medical_history: str | None = None,
    allergies: str | None = None,
) -> Patient:
    """
    Register a patient and assign the next patient code (P000001, ...).

    The code is allocated in the same atomic unit as the insert.
    """
    if gender not in GENDERS:
        raise InvalidArgumentError(f"gender must be one of {', '.join(GENDERS)}", {"field": "gender"})
    try:
        dob = parse_iso_date(date_of_birth)
    except ValueError:
        raise InvalidArgumentError("date_of_birth must be an ISO-8601 date", {"field": "date_of_birth"})
    if dob is None:
        raise InvalidArgumentError("date_of_birth is required", {"field": "date_of_birth"})

    email = optional_text(email, "email", max_length=255)
    if email is not None and "@" not in email:
        raise InvalidArgumentError("email is not a valid address", {"field": "email"})

    fields = dict(
        name=require_text(name, "name", max_length=255),
        date_of_birth=dob,
        gender=gender,
        phone=optional_text(phone, "phone", max_length=64),
        email=email,
        address=optional_text(address, "address"),
        emergency_contact=optional_text(emergency_contact, "emergency_contact", max_length=255),
        medical_history=optional_text(medical_history, "medical_history"),
        allergies=optional_text(allergies, "allergies"),
    )

    with atomic_unit("register_patient"):
        if email is not None and db.session.query(Patient.id).filter_by(email=email).first():
            raise DuplicateRecordError("Email already exists", {"field": "email"})

        patient = Patient(patient_code=next_code(PATIENTS.name, PATIENTS.prefix), **fields)
        db.session.add(patient)
        db.session.flush()

    return patient


def get_patient(patient_id) -> Patient:
    patient_id = require_int(patient_id, "patient_id")
    patient = db.session.get(Patient, patient_id) if id_in_range(patient_id) else None
    if patient is None:
        raise PatientNotFoundError(patient_id)
    return patient
