from __future__ import annotations

from ..extensions import db
from sentra.time_utils import to_utc_z


MESSAGE_SENDERS = ("client", "admin")


class Chat(db.Model):
    """
    Conversation thread between the team and one client.

    unread_count counts client messages the team has not opened yet;
    last_message / last_message_at are denormalized from the newest message.
    """
    __tablename__ = "chats"
    __table_args__ = (
        db.UniqueConstraint("client_id", name="uq_chats_client"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    client_name = db.Column(db.String(255), nullable=False)
    avatar = db.Column(db.String(8), nullable=False, default="")
    last_message = db.Column(db.Text, nullable=True)
    last_message_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    unread_count = db.Column(db.Integer, nullable=False, default=0)
    online = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    messages = db.relationship(
        "ChatMessage",
        backref="chat",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ChatMessage.id",
    )

    def to_dict(self, include_messages: bool = False) -> dict:
        data = {
            "id": self.id,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "avatar": self.avatar,
            "last_message": self.last_message,
            "last_message_at": to_utc_z(self.last_message_at),
            "unread_count": self.unread_count or 0,
            "online": self.online,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_messages:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    chat_id = db.Column(db.Integer, db.ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)

    sender = db.Column(db.String(16), nullable=False)  # client, admin
    content = db.Column(db.Text, nullable=False)
    message_type = db.Column(db.String(16), nullable=False, default="text")
    attachment_url = db.Column(db.Text, nullable=True)
    attachment_type = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "sender": self.sender,
            "content": self.content,
            "message_type": self.message_type,
            "attachment_url": self.attachment_url,
            "attachment_type": self.attachment_type,
            "created_at": to_utc_z(self.created_at),
        }
