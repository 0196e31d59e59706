# Overview: Flask API routes for calendar events.

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import calendar_service


calendar_bp = Blueprint("calendar", __name__, url_prefix="/api/calendar-events")


@calendar_bp.get("")
@handles_errors("load calendar events")
def list_events_route():
    client_id = request.args.get("client_id", type=int)
    return jsonify([e.to_dict() for e in calendar_service.list_events(client_id)])


@calendar_bp.post("")
@handles_errors("create calendar event")
def create_event_route():
    event = calendar_service.create_event(request.get_json(silent=True))
    return jsonify(event.to_dict()), 201


@calendar_bp.put("/<event_id>")
@handles_errors("update calendar event")
def update_event_route(event_id: str):
    event = calendar_service.update_event(event_id, request.get_json(silent=True))
    return jsonify(event.to_dict())


@calendar_bp.delete("/<event_id>")
@handles_errors("delete calendar event")
def delete_event_route(event_id: str):
    calendar_service.delete_event(event_id)
    return jsonify({"success": True})
