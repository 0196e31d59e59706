# Overview: Flask API routes for client chats and messages.

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import chat_service
from ..validation import ValidationError


chats_bp = Blueprint("chats", __name__, url_prefix="/api")


@chats_bp.get("/chats")
@handles_errors("load chats")
def list_chats_route():
    """Chats without their messages; fetch /chats/<id>/messages per thread."""
    return jsonify([c.to_dict() for c in chat_service.list_chats()])


@chats_bp.post("/chats")
@handles_errors("create chat")
def create_chat_route():
    data = request.get_json(silent=True) or {}
    client_id = data.get("client_id")
    if client_id is None:
        raise ValidationError("client_id is required")
    try:
        client_id = int(client_id)
    except (TypeError, ValueError):
        raise ValidationError("client_id must be an integer")
    chat = chat_service.create_chat(client_id)
    return jsonify(chat.to_dict(include_messages=True)), 201


@chats_bp.get("/chats/unread-count")
@handles_errors("load unread count")
def unread_count_route():
    return jsonify({"unread_count": chat_service.unread_count()})


@chats_bp.get("/chats/<int:chat_id>/messages")
@handles_errors("load chat messages")
def list_messages_route(chat_id: int):
    return jsonify([m.to_dict() for m in chat_service.get_messages(chat_id)])


@chats_bp.post("/chats/<int:chat_id>/messages")
@handles_errors("send chat message")
def send_message_route(chat_id: int):
    message = chat_service.send_message(chat_id, request.get_json(silent=True))
    return jsonify(message.to_dict()), 201


@chats_bp.post("/chats/<int:chat_id>/read")
@handles_errors("mark chat as read")
def mark_read_route(chat_id: int):
    return jsonify(chat_service.mark_as_read(chat_id).to_dict())


@chats_bp.put("/chats/<int:chat_id>/online")
@handles_errors("update chat online status")
def online_route(chat_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get("online"), bool):
        raise ValidationError("online must be a boolean")
    return jsonify(chat_service.set_online(chat_id, data["online"]).to_dict())


@chats_bp.delete("/chat-messages/<int:message_id>")
@handles_errors("delete chat message")
def delete_message_route(message_id: int):
    chat_service.delete_message(message_id)
    return jsonify({"success": True})
