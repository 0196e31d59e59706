# Overview: Service-layer operations for client chats and their messages.

from __future__ import annotations

from ..extensions import db
from ..models import Chat, ChatMessage
from ..models.chat import MESSAGE_SENDERS
from ..validation import ModelValidationPolicy, NotFoundError, ConflictError, validate_payload, enforce_choice
from sentra.time_utils import utcnow
from .client_service import get_client


MESSAGE_POLICY = ModelValidationPolicy(
    writable_fields={"sender", "content", "message_type", "attachment_url", "attachment_type"},
    required_on_create={"sender", "content"},
    ignored_fields={"id", "chat_id", "created_at"},
)


def initials(name: str) -> str:
    """"Ahmad Bin Ali" -> "ABA"."""
    return "".join(part[0] for part in (name or "").split() if part).upper()[:8]


def list_chats() -> list[Chat]:
    return db.session.query(Chat).order_by(Chat.last_message_at.desc(), Chat.id.desc()).all()


def get_chat(chat_id: int) -> Chat:
    chat = db.session.get(Chat, chat_id)
    if not chat:
        raise NotFoundError("Chat not found")
    return chat


def create_chat(client_id: int) -> Chat:
    """Open the chat thread for a client (one per client)."""
    client = get_client(client_id)
    if db.session.query(Chat).filter_by(client_id=client.id).first():
        raise ConflictError("Chat already exists for this client")
    chat = Chat(
        client_id=client.id,
        client_name=client.name,
        avatar=initials(client.name),
        last_message_at=utcnow(),
        unread_count=0,
        online=False,
    )
    db.session.add(chat)
    db.session.commit()
    return chat


def get_messages(chat_id: int) -> list[ChatMessage]:
    get_chat(chat_id)
    return (
        db.session.query(ChatMessage)
        .filter_by(chat_id=chat_id)
        .order_by(ChatMessage.created_at, ChatMessage.id)
        .all()
    )


def send_message(chat_id: int, payload: dict) -> ChatMessage:
    """
    Append a message and refresh the chat summary.

    Client messages bump unread_count; admin replies leave it alone.
    """
    chat = get_chat(chat_id)
    patch = validate_payload(model=ChatMessage, payload=payload, policy=MESSAGE_POLICY, partial=False)
    enforce_choice(patch, "sender", MESSAGE_SENDERS)

    message = ChatMessage(chat_id=chat.id, **patch)
    db.session.add(message)

    chat.last_message = message.content
    chat.last_message_at = utcnow()
    if message.sender == "client":
        chat.unread_count = (chat.unread_count or 0) + 1
    db.session.commit()
    return message


def mark_as_read(chat_id: int) -> Chat:
    chat = get_chat(chat_id)
    chat.unread_count = 0
    db.session.commit()
    return chat


def set_online(chat_id: int, online: bool) -> Chat:
    chat = get_chat(chat_id)
    chat.online = bool(online)
    db.session.commit()
    return chat


def delete_message(message_id: int) -> None:
    message = db.session.get(ChatMessage, message_id)
    if not message:
        raise NotFoundError("Message not found")
    db.session.delete(message)
    db.session.commit()


def unread_count() -> int:
    total = db.session.query(db.func.sum(Chat.unread_count)).scalar()
    return int(total or 0)


def chat_stats() -> dict:
    return {
        "total_chats": db.session.query(Chat).count(),
        "total_messages": db.session.query(ChatMessage).count(),
        "unread_messages": unread_count(),
        "active_chats": db.session.query(Chat).filter_by(online=True).count(),
    }
