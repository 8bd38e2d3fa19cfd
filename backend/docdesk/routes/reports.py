# Overview: Flask API routes for reporting; dashboard summary.

from flask import Blueprint, current_app, request

from ..services.reporting_service import dashboard_summary

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
def dashboard_route():
    """
    Dashboard summary: totals, counts per type, low stock and monthly totals.

    Query params:
    - low_stock_threshold: int (optional) - overrides LOW_STOCK_THRESHOLD
    """
    threshold = request.args.get(
        "low_stock_threshold",
        current_app.config["LOW_STOCK_THRESHOLD"],
        type=int,
    )
    return dashboard_summary(low_stock_threshold=threshold)
