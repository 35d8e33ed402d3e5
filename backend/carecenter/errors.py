# Overview: Error taxonomy shared by services and routes.

"""
Care center error taxonomy.

Every service-layer failure is one of these. Each error carries a message,
a details dict for the client, and the HTTP status the routes answer with.

- Validation errors (InvalidArgument, NotFound, InsufficientStock, ...) are
  raised before any row is written.
- ConflictError and StorageFailureError come out of the atomic unit after a
  rollback; both are retryable by the caller. The core never retries itself.
"""

from __future__ import annotations


class CareCenterError(Exception):
    """Base class for all domain errors."""
    http_status = 500
    code = "error"
    retryable = False

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code, "details": self.details}
        if self.retryable:
            body["retryable"] = True
        return body


class InvalidArgumentError(CareCenterError):
    """400-level input problem (empty item list, non-positive quantity, ...)."""
    http_status = 400
    code = "invalid_argument"


class NotFoundError(CareCenterError):
    http_status = 404
    code = "not_found"


class PatientNotFoundError(NotFoundError):
    code = "patient_not_found"

    def __init__(self, patient_id):
        super().__init__(f"Patient with id {patient_id} not found", {"patient_id": patient_id})
        self.patient_id = patient_id


class MedicineNotFoundError(NotFoundError):
    code = "medicine_not_found"

    def __init__(self, medicine_id):
        super().__init__(f"Medicine with id {medicine_id} not found", {"medicine_id": medicine_id})
        self.medicine_id = medicine_id


class TransactionNotFoundError(NotFoundError):
    code = "transaction_not_found"

    def __init__(self, transaction_id):
        super().__init__(
            f"Transaction with id {transaction_id} not found",
            {"transaction_id": transaction_id},
        )
        self.transaction_id = transaction_id


class InsufficientStockError(CareCenterError):
    http_status = 409
    code = "insufficient_stock"

    def __init__(self, medicine_id: int, medicine_name: str, available: int, required: int):
        super().__init__(
            f"Insufficient stock for medicine {medicine_name}. "
            f"Available: {available}, Required: {required}",
            {
                "medicine_id": medicine_id,
                "medicine_name": medicine_name,
                "available": available,
                "required": required,
            },
        )
        self.medicine_id = medicine_id
        self.medicine_name = medicine_name
        self.available = available
        self.required = required


class InvalidStatusTransitionError(CareCenterError):
    http_status = 409
    code = "invalid_status_transition"


class DuplicateRecordError(CareCenterError):
    """409-level uniqueness rule (e.g., patient email already registered)."""
    http_status = 409
    code = "duplicate_record"


class ConflictError(CareCenterError):
    """Lock contention, deadlock or concurrent code allocation; retry the whole call."""
    http_status = 409
    code = "conflict"
    retryable = True


class StorageFailureError(CareCenterError):
    """Commit or statement failure in the atomic unit; everything was rolled back."""
    http_status = 503
    code = "storage_failure"
    retryable = True
