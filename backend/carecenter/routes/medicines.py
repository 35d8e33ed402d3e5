# Overview: Flask API routes for read-only medicine stock views.

from flask import Blueprint, jsonify, request

from ..errors import CareCenterError
from ..services import inventory_service


medicines_bp = Blueprint("medicines", __name__, url_prefix="/api/medicines")


@medicines_bp.get("/<int:medicine_id>/stock")
def medicine_stock_route(medicine_id: int):
    """Pre-flight stock check; the binding check happens when the transaction is created."""
    try:
        return jsonify(inventory_service.get_medicine_stock(medicine_id)), 200
    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status


@medicines_bp.get("/low-stock")
def low_stock_route():
    try:
        medicines = inventory_service.get_low_stock_medicines(request.args.get("threshold"))
        return jsonify({"medicines": [m.to_dict() for m in medicines]}), 200
    except CareCenterError as e:
        return jsonify(e.to_dict()), e.http_status
