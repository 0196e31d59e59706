# Overview: Request decorators for API routes (error mapping, webhook signatures).

from functools import wraps
from flask import request, jsonify, current_app

from .extensions import db
from .validation import SentraError, ValidationError, NotFoundError, ConflictError
from .services.auth_service import AuthError
from .services.storage_service import StorageNotConfiguredError, StorageError
from .services.webhook_service import WebhookSignatureError, WebhookKind, verify_signature


# Domain error -> HTTP status; first match wins
_ERROR_STATUS = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (AuthError, 401),
    (WebhookSignatureError, 401),
    (StorageNotConfiguredError, 500),
    (StorageError, 500),
)


def _status_for(error: SentraError) -> int:
    for err_type, status in _ERROR_STATUS:
        if isinstance(error, err_type):
            return status
    return 500


def handles_errors(action: str):
    """
    Map service-layer errors to JSON error responses.

    Known domain errors become {"error": message} with their status code.
    Anything else is logged as "Failed to <action>" and returned as a 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SentraError as e:
                db.session.rollback()
                status = _status_for(e)
                if status >= 500:
                    current_app.logger.error("Failed to %s: %s", action, e)
                return jsonify({"error": str(e)}), status
            except Exception:
                db.session.rollback()
                current_app.logger.exception(f"Failed to {action}")
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator


def verify_ghl_signature(kind: WebhookKind):
    """
    Reject webhook calls whose x-ghl-signature does not match the raw body.

    Skipped when the kind's secret is not configured or no signature was sent.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            secret = current_app.config.get(kind.secret_config_key)
            signature = request.headers.get("x-ghl-signature")
            try:
                verify_signature(request.get_data(cache=True), signature, secret)
            except WebhookSignatureError as e:
                current_app.logger.warning("Rejected %s webhook: %s", kind.event_type, e)
                return jsonify({"error": str(e)}), 401
            return f(*args, **kwargs)

        return decorated_function

    return decorator
