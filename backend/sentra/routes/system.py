# backend/sentra/routes/system.py
"""
System health and version endpoints.
"""

import os
import time
from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Client, User, Invoice
from sentra.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)

APP_VERSION = "1.0.0"


def check_database_health() -> dict:
    """Run cheap count queries and report latency."""
    start_time = time.time()
    try:
        client_count = db.session.query(Client).count()
        user_count = db.session.query(User).count()
        invoice_count = db.session.query(Invoice).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "clients": client_count,
                "users": user_count,
                "invoices": invoice_count,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_storage_config() -> dict:
    cfg = current_app.config
    keys = ("SPACES_ENDPOINT", "SPACES_REGION", "SPACES_KEY", "SPACES_SECRET", "SPACES_BUCKET")
    configured = all(cfg.get(k) for k in keys)
    return {"status": "configured" if configured else "not_configured"}


@system_bp.get("/health")
def health():
    database = check_database_health()
    status = "healthy" if database["status"] == "healthy" else "unhealthy"
    body = {
        "status": status,
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "database": database,
            "storage": check_storage_config(),
        },
    }
    return jsonify(body), 200 if status == "healthy" else 503


@system_bp.get("/version")
def version():
    return jsonify({
        "version": os.environ.get("APP_VERSION", APP_VERSION),
        "git_sha": os.environ.get("GIT_SHA"),
        "environment": os.environ.get("FLASK_ENV", "production"),
    })
