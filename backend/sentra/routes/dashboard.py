# Overview: Flask API route for the admin dashboard figures.

from flask import Blueprint, jsonify

from ..decorators import handles_errors
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@handles_errors("load dashboard stats")
def stats_route():
    return jsonify(dashboard_service.dashboard_stats())
