from flask import Blueprint, jsonify

from carecenter.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/stock")
def stock_report():
    return jsonify({"rows": reporting_service.stock_report()}), 200


@reports_bp.get("/patients")
def patient_report():
    return jsonify({"rows": reporting_service.patient_report()}), 200
