# Overview: GoHighLevel appointment webhooks mapped onto calendar events.

"""
GHL Webhook Service

An appointment booked in GoHighLevel arrives as JSON with contact and
calendar details. The contact is matched to a client by email, then by
phone; a match becomes a CalendarEvent of the webhook's kind. An
unmatched contact is reported back as a warning, never as a failure.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass

from ..extensions import db
from ..models import CalendarEvent
from ..validation import SentraError, ValidationError
from sentra.time_utils import parse_timestamp, split_date_time
from .client_service import find_client_by_contact

logger = logging.getLogger(__name__)


class WebhookSignatureError(SentraError):
    """Raised when x-ghl-signature does not match the body (401)."""


@dataclass(frozen=True)
class WebhookKind:
    event_type: str
    default_title: str
    label: str
    secret_config_key: str


ONBOARDING = WebhookKind("onboarding", "Onboarding Session", "Onboarding", "GHL_ONBOARDING_WEBHOOK_SECRET")
HANDOVER = WebhookKind("handover", "Handover Session", "Handover", "GHL_HANDOVER_WEBHOOK_SECRET")


def sign(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> None:
    """
    Check a hex HMAC-SHA256 signature of the raw body.

    Verification only happens when both a secret is configured and a
    signature header was sent.
    """
    if not secret or not signature:
        return
    if not hmac.compare_digest(sign(body, secret), signature.strip().lower()):
        raise WebhookSignatureError("Invalid signature")


def _parse_time(value, field: str):
    try:
        parsed = parse_timestamp(value)
    except (ValueError, OverflowError, OSError):
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be an ISO-8601 datetime or epoch milliseconds")
    return parsed


def process_appointment(kind: WebhookKind, data: dict) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")

    contact = data.get("contact") or {}
    calendar = data.get("calendar") or {}
    contact_id = data.get("contactId")

    client = find_client_by_contact(contact.get("email"), contact.get("phone"))
    if client is None:
        logger.warning("%s webhook: no client for contact %s", kind.label, contact_id)
        return {
            "status": "warning",
            "message": "Client not found in database",
            "contactId": contact_id,
        }

    start = _parse_time(data.get("startTime"), "startTime")
    end = _parse_time(data.get("endTime"), "endTime") if data.get("endTime") else start
    start_date, start_time = split_date_time(start)
    end_date, end_time = split_date_time(end)

    description = (
        f"{kind.label} session scheduled via GHL.\n"
        f"Appointment ID: {data.get('appointmentId')}\n"
        f"Calendar: {calendar.get('name') or 'Unknown'}\n"
        f"Contact: {contact.get('name') or 'Unknown'}"
    )

    event = CalendarEvent(
        client_id=client.id,
        title=data.get("title") or kind.default_title,
        description=description,
        start_date=start_date,
        end_date=end_date,
        start_time=start_time,
        end_time=end_time,
        type=kind.event_type,
    )
    db.session.add(event)
    db.session.commit()

    logger.info("%s event %s created for client %s", kind.label, event.id, client.id)
    return {
        "status": "success",
        "message": f"{kind.label} event created",
        "eventId": event.id,
        "clientName": client.business_name,
    }
