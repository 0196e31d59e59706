# Overview: Flask API routes for add-on services and client service requests.

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import addon_service


addons_bp = Blueprint("addons", __name__, url_prefix="/api")


@addons_bp.get("/add-on-services")
@handles_errors("load add-on services")
def list_services_route():
    available_only = request.args.get("available", "false").lower() == "true"
    return jsonify([s.to_dict() for s in addon_service.list_services(available_only)])


@addons_bp.post("/add-on-services")
@handles_errors("create add-on service")
def create_service_route():
    service = addon_service.create_service(request.get_json(silent=True))
    return jsonify(service.to_dict()), 201


@addons_bp.get("/service-requests")
@handles_errors("load service requests")
def list_requests_route():
    client_id = request.args.get("client_id", type=int)
    status = request.args.get("status")
    return jsonify([r.to_dict() for r in addon_service.list_requests(client_id, status)])


@addons_bp.post("/service-requests")
@handles_errors("create service request")
def create_request_route():
    service_request = addon_service.create_request(request.get_json(silent=True))
    return jsonify(service_request.to_dict()), 201


@addons_bp.put("/service-requests/<int:request_id>")
@handles_errors("update service request")
def update_request_route(request_id: int):
    service_request = addon_service.update_request(request_id, request.get_json(silent=True))
    return jsonify(service_request.to_dict())
