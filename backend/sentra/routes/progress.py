# Overview: Flask API routes for package components, progress steps and step comments.

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import progress_service


progress_bp = Blueprint("progress", __name__, url_prefix="/api")


# =============================================================================
# COMPONENTS
# =============================================================================

@progress_bp.get("/components")
@handles_errors("load components")
def list_components_route():
    client_id = request.args.get("client_id", type=int)
    return jsonify([c.to_dict() for c in progress_service.list_components(client_id)])


@progress_bp.post("/components")
@handles_errors("create component")
def create_component_route():
    """Create a component; a progress step for it is created alongside."""
    component = progress_service.create_component(request.get_json(silent=True))
    return jsonify(component.to_dict()), 201


@progress_bp.put("/components/<component_id>")
@handles_errors("update component")
def update_component_route(component_id: str):
    component = progress_service.update_component(component_id, request.get_json(silent=True))
    return jsonify(component.to_dict())


@progress_bp.delete("/components/<component_id>")
@handles_errors("delete component")
def delete_component_route(component_id: str):
    progress_service.delete_component(component_id)
    return jsonify({"success": True})


@progress_bp.post("/clients/<int:client_id>/components/copy-to-progress-steps")
@handles_errors("copy components to progress steps")
def copy_components_route(client_id: int):
    steps = progress_service.copy_components_to_steps(client_id)
    return jsonify({"created": [s.to_dict() for s in steps], "count": len(steps)}), 201


# =============================================================================
# PROGRESS STEPS
# =============================================================================

@progress_bp.get("/progress-steps")
@handles_errors("load progress steps")
def list_steps_route():
    client_id = request.args.get("client_id", type=int)
    return jsonify([s.to_dict() for s in progress_service.list_steps(client_id)])


@progress_bp.post("/progress-steps")
@handles_errors("create progress step")
def create_step_route():
    step = progress_service.create_step(request.get_json(silent=True))
    return jsonify(step.to_dict()), 201


@progress_bp.put("/progress-steps/<step_id>")
@handles_errors("update progress step")
def update_step_route(step_id: str):
    step = progress_service.update_step(step_id, request.get_json(silent=True))
    return jsonify(step.to_dict())


@progress_bp.delete("/progress-steps/<step_id>")
@handles_errors("delete progress step")
def delete_step_route(step_id: str):
    progress_service.delete_step(step_id)
    return jsonify({"success": True})


@progress_bp.post("/progress-steps/<step_id>/comments")
@handles_errors("add progress comment")
def add_comment_route(step_id: str):
    comment = progress_service.add_comment(step_id, request.get_json(silent=True))
    return jsonify(comment.to_dict()), 201


@progress_bp.delete("/progress-comments/<comment_id>")
@handles_errors("delete progress comment")
def delete_comment_route(comment_id: str):
    progress_service.delete_comment(comment_id)
    return jsonify({"success": True})
