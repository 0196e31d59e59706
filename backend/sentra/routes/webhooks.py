# Overview: GoHighLevel webhook endpoints (appointment booked -> calendar event).

from flask import Blueprint, request, jsonify, current_app

from ..decorators import verify_ghl_signature
from ..services import webhook_service
from ..services.webhook_service import ONBOARDING, HANDOVER
from ..validation import ValidationError
from sentra.time_utils import utcnow, to_utc_z


webhooks_bp = Blueprint("webhooks", __name__, url_prefix="/webhook")


def _handle(kind):
    try:
        return jsonify(webhook_service.process_appointment(kind, request.get_json(silent=True)))
    except ValidationError as e:
        return jsonify({"status": "error", "message": str(e)}), 400
    except Exception:
        current_app.logger.exception(f"Failed to process {kind.event_type} webhook")
        return jsonify({"status": "error", "message": "Internal server error"}), 500


@webhooks_bp.post("/ghl/onboarding")
@verify_ghl_signature(ONBOARDING)
def onboarding_route():
    return _handle(ONBOARDING)


@webhooks_bp.post("/ghl/handover")
@verify_ghl_signature(HANDOVER)
def handover_route():
    return _handle(HANDOVER)


@webhooks_bp.get("/health")
def webhook_health_route():
    return jsonify({
        "status": "healthy",
        "timestamp": to_utc_z(utcnow()),
        "service": "GHL Webhook Handler",
    })


@webhooks_bp.post("/test")
def webhook_test_route():
    return jsonify({
        "status": "success",
        "message": "Test webhook received",
        "data": request.get_json(silent=True),
    })
