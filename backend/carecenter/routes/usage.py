# Overview: Flask API routes for medicine usage; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import CareCenterError
from ..services import usage_service
from ..services.concurrency import run_with_retry
from ..validation import require_json_object


usage_bp = Blueprint("usage", __name__, url_prefix="/api/medicine-usage")


@usage_bp.post("/", strict_slashes=False)
def record_usage_route():
    """
    Record administrative consumption of a medicine.

    Body: {"medicine_id": 3, "quantity_used": 5, "notes": "ward restock"}
    """
    try:
        data = require_json_object(request.get_json(silent=True))

        usage = run_with_retry(
            lambda: usage_service.record_usage(
                data.get("medicine_id"),
                data.get("quantity_used"),
                data.get("notes"),
            ),
            attempts=current_app.config.get("CONFLICT_RETRY_ATTEMPTS", 0) + 1,
            backoff_base=current_app.config.get("CONFLICT_RETRY_BACKOFF", 0.1),
        )
        current_app.logger.info(
            "Recorded usage %s: medicine %s x%s", usage.id, usage.medicine_id, usage.quantity_used
        )
        return jsonify({"usage": usage.to_dict()}), 201

    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to record medicine usage")
        return jsonify({"error": "Internal server error"}), 500


@usage_bp.get("/", strict_slashes=False)
def list_usage_route():
    return jsonify({"usage": usage_service.list_usage()}), 200
