# Overview: Flask API routes for clients, tags and client links.

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import client_service


clients_bp = Blueprint("clients", __name__, url_prefix="/api")


@clients_bp.get("/clients")
@handles_errors("load clients")
def list_clients_route():
    return jsonify([c.to_dict() for c in client_service.list_clients()])


@clients_bp.post("/clients")
@handles_errors("create client")
def create_client_route():
    client = client_service.create_client(request.get_json(silent=True))
    return jsonify(client.to_dict()), 201


@clients_bp.get("/clients/<int:client_id>")
@handles_errors("load client")
def get_client_route(client_id: int):
    return jsonify(client_service.get_client(client_id).to_dict())


@clients_bp.put("/clients/<int:client_id>")
@handles_errors("update client")
def update_client_route(client_id: int):
    client = client_service.update_client(client_id, request.get_json(silent=True))
    return jsonify(client.to_dict())


@clients_bp.delete("/clients/<int:client_id>")
@handles_errors("delete client")
def delete_client_route(client_id: int):
    """Deletes the client and every record that belongs to it."""
    client_service.delete_client(client_id)
    return jsonify({"success": True})


# =============================================================================
# TAGS
# =============================================================================

@clients_bp.get("/tags")
@handles_errors("load tags")
def list_tags_route():
    return jsonify([t.to_dict() for t in client_service.list_tags()])


@clients_bp.post("/tags")
@handles_errors("create tag")
def create_tag_route():
    tag = client_service.create_tag(request.get_json(silent=True))
    return jsonify(tag.to_dict()), 201


@clients_bp.put("/tags/<tag_id>")
@handles_errors("update tag")
def update_tag_route(tag_id: str):
    tag = client_service.update_tag(tag_id, request.get_json(silent=True))
    return jsonify(tag.to_dict())


@clients_bp.delete("/tags/<tag_id>")
@handles_errors("delete tag")
def delete_tag_route(tag_id: str):
    client_service.delete_tag(tag_id)
    return jsonify({"success": True})


# =============================================================================
# CLIENT LINKS
# =============================================================================

@clients_bp.get("/clients/<int:client_id>/links")
@handles_errors("load client links")
def list_links_route(client_id: int):
    client_service.get_client(client_id)
    return jsonify([link.to_dict() for link in client_service.list_links(client_id)])


@clients_bp.post("/client-links")
@handles_errors("create client link")
def create_link_route():
    link = client_service.create_link(request.get_json(silent=True))
    return jsonify(link.to_dict()), 201


@clients_bp.delete("/client-links/<link_id>")
@handles_errors("delete client link")
def delete_link_route(link_id: str):
    client_service.delete_link(link_id)
    return jsonify({"success": True})
