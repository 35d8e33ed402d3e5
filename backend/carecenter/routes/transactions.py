# Overview: Flask API routes for sales transactions; parses input and returns JSON responses.

# backend/carecenter/routes/transactions.py
"""Transaction API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import CareCenterError
from ..services import reporting_service, transaction_service
from ..services.concurrency import run_with_retry
from ..validation import require_json_object


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.post("/", strict_slashes=False)
def create_transaction_route():
    """
    Create a transaction and debit stock for its items.

    Body: {"patient_id": 1, "items": [{"medicine_id": 3, "quantity": 2}], "notes": null}
    """
    try:
        data = require_json_object(request.get_json(silent=True))

        transaction = run_with_retry(
            lambda: transaction_service.create_transaction(
                data.get("patient_id"),
                data.get("items"),
                data.get("notes"),
            ),
            attempts=current_app.config.get("CONFLICT_RETRY_ATTEMPTS", 0) + 1,
            backoff_base=current_app.config.get("CONFLICT_RETRY_BACKOFF", 0.1),
        )
        current_app.logger.info(
            "Created transaction %s for patient %s, total %s",
            transaction.transaction_code,
            transaction.patient_id,
            transaction.total_amount,
        )
        return jsonify({"transaction": transaction.to_dict(include_items=True)}), 201

    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/", strict_slashes=False)
def list_transactions_route():
    try:
        transactions = transaction_service.list_transactions(
            patient_id=request.args.get("patient_id"),
            payment_status=request.args.get("payment_status"),
        )
        return jsonify({"transactions": [t.to_dict() for t in transactions]}), 200

    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status


@transactions_bp.get("/<int:transaction_id>")
def get_transaction_route(transaction_id: int):
    try:
        transaction = transaction_service.get_transaction(transaction_id)
        return jsonify({"transaction": transaction.to_dict(include_items=True)}), 200

    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status


@transactions_bp.patch("/<int:transaction_id>/status")
def update_transaction_status_route(transaction_id: int):
    """
    Change payment status.

    Allowed: pending -> paid | cancelled, paid -> cancelled.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        transaction = transaction_service.update_transaction_status(
            transaction_id, data.get("payment_status")
        )
        return jsonify({"transaction": transaction.to_dict()}), 200

    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to update transaction status")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/<int:transaction_id>/receipt")
def receipt_route(transaction_id: int):
    receipt = reporting_service.generate_receipt(transaction_id)
    if receipt is None:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify({"receipt": receipt}), 200
