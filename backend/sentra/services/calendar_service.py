# Overview: Service-layer operations for calendar events.

from __future__ import annotations

import re

from ..extensions import db
from ..models import CalendarEvent
from ..models.calendar import EVENT_TYPES
from ..validation import (
    ModelValidationPolicy, NotFoundError, ValidationError,
    validate_payload, enforce_choice,
)
from .client_service import get_client


EVENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "client_id", "title", "start_date", "end_date", "start_time",
        "end_time", "description", "type",
    },
    required_on_create={"client_id", "title", "start_date", "start_time"},
    ignored_fields={"created_at", "updated_at"},
)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def _check_formats(patch: dict) -> None:
    for field in ("start_date", "end_date"):
        if field in patch and not _DATE_RE.match(patch[field] or ""):
            raise ValidationError(f"{field} must be YYYY-MM-DD")
    for field in ("start_time", "end_time"):
        if field in patch and not _TIME_RE.match(patch[field] or ""):
            raise ValidationError(f"{field} must be HH:MM")


def list_events(client_id: int | None = None) -> list[CalendarEvent]:
    query = db.session.query(CalendarEvent)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    return query.order_by(CalendarEvent.start_date, CalendarEvent.start_time).all()


def create_event(payload: dict) -> CalendarEvent:
    payload = dict(payload or {})
    # Single-slot events default their end to the start
    payload.setdefault("end_date", payload.get("start_date"))
    payload.setdefault("end_time", payload.get("start_time"))

    patch = validate_payload(model=CalendarEvent, payload=payload, policy=EVENT_POLICY, partial=False)
    enforce_choice(patch, "type", EVENT_TYPES)
    _check_formats(patch)
    if not patch.get("id"):
        patch.pop("id", None)
    get_client(patch["client_id"])

    event = CalendarEvent(**patch)
    db.session.add(event)
    db.session.commit()
    return event


def update_event(event_id: str, payload: dict) -> CalendarEvent:
    event = db.session.get(CalendarEvent, event_id)
    if not event:
        raise NotFoundError("Calendar event not found")
    patch = validate_payload(model=CalendarEvent, payload=payload, policy=EVENT_POLICY, partial=True)
    patch.pop("id", None)
    enforce_choice(patch, "type", EVENT_TYPES)
    _check_formats(patch)

    for key, value in patch.items():
        setattr(event, key, value)
    db.session.commit()
    return event


def delete_event(event_id: str) -> None:
    event = db.session.get(CalendarEvent, event_id)
    if not event:
        raise NotFoundError("Calendar event not found")
    db.session.delete(event)
    db.session.commit()
