# Overview: In-memory records held by the sync store, mapped to and from the API's snake_case JSON.

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import ClassVar, Optional


@dataclass
class Record:
    # Keys present on the wire that the API computes itself
    READ_ONLY: ClassVar[frozenset] = frozenset({"created_at", "updated_at"})

    @classmethod
    def from_record(cls, data: dict):
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in names})

    def to_record(self) -> dict:
        """Writable fields with a value; None means "not set" on the wire."""
        out = {}
        for f in fields(self):
            if f.name in self.READ_ONLY:
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            out[f.name] = list(value) if isinstance(value, list) else value
        return out

    def copy(self, **changes):
        return replace(self, **changes)


@dataclass
class Client(Record):
    id: Optional[int] = None
    name: str = ""
    business_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    status: str = "Pending"
    pic: Optional[str] = None
    total_sales: float = 0.0
    total_collection: float = 0.0
    balance: float = 0.0
    invoice_count: int = 0
    tags: list = field(default_factory=list)
    company: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    last_activity: Optional[str] = None
    registered_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({"created_at", "updated_at", "registered_at", "last_activity"})


@dataclass
class Invoice(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    package_name: str = ""
    amount: float = 0.0
    paid: float = 0.0
    due: float = 0.0
    status: str = "Pending"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Payment(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    invoice_id: Optional[str] = None
    amount: float = 0.0
    payment_source: str = "Online Transfer"
    status: str = "Paid"
    paid_at: Optional[str] = None
    receipt_file_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class CalendarEvent(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    title: str = ""
    start_date: str = ""
    end_date: str = ""
    start_time: str = ""
    end_time: str = ""
    description: Optional[str] = None
    type: str = "meeting"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Component(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    invoice_id: Optional[str] = None
    name: str = ""
    price: str = "RM 0.00"
    active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ProgressStep(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    deadline: Optional[str] = None
    completed: bool = False
    completed_date: Optional[str] = None
    important: bool = False
    comments: list = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({"created_at", "updated_at", "comments"})


@dataclass
class ChatMessage(Record):
    id: Optional[int] = None
    chat_id: Optional[int] = None
    sender: str = "admin"
    content: str = ""
    message_type: str = "text"
    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    created_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({"id", "chat_id", "created_at"})


@dataclass
class Chat(Record):
    id: Optional[int] = None
    client_id: Optional[int] = None
    client_name: str = ""
    avatar: str = ""
    last_message: Optional[str] = None
    last_message_at: Optional[str] = None
    unread_count: int = 0
    online: bool = False
    # None: not loaded yet (the chat list endpoint omits messages)
    messages: Optional[list] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({"created_at", "updated_at", "messages"})

    @classmethod
    def from_record(cls, data: dict):
        chat = super().from_record(data)
        if chat.messages is not None:
            chat.messages = [
                m if isinstance(m, ChatMessage) else ChatMessage.from_record(m)
                for m in chat.messages
            ]
        return chat


@dataclass
class Tag(Record):
    id: Optional[str] = None
    name: str = ""
    color: str = "#3B82F6"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ClientLink(Record):
    id: Optional[str] = None
    client_id: Optional[int] = None
    title: str = ""
    url: str = ""
    created_at: Optional[str] = None


@dataclass
class User(Record):
    id: Optional[str] = None
    name: str = ""
    email: str = ""
    role: str = "Team"
    status: str = "Active"
    client_id: Optional[int] = None
    permissions: list = field(default_factory=list)
    last_login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({"created_at", "updated_at", "last_login"})


@dataclass
class AddOnService(Record):
    id: Optional[int] = None
    name: str = ""
    description: str = ""
    category: str = "Support"
    price: float = 0.0
    status: str = "Available"
    features: list = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class ServiceRequest(Record):
    id: Optional[int] = None
    client_id: Optional[int] = None
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    status: str = "Pending"
    request_date: Optional[str] = None
    approved_date: Optional[str] = None
    rejected_date: Optional[str] = None
    completed_date: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    READ_ONLY: ClassVar[frozenset] = frozenset({
        "id", "service_name", "request_date", "approved_date", "rejected_date",
        "completed_date", "created_at", "updated_at",
    })


@dataclass(frozen=True)
class AuthUser:
    """The signed-in account as returned by /api/auth/login."""
    id: str
    email: str
    name: str
    role: str
    client_id: Optional[int] = None
    permissions: tuple = ()

    @classmethod
    def from_login(cls, data: dict) -> "AuthUser":
        return cls(
            id=str(data["id"]),
            email=data["email"],
            name=data.get("name") or "",
            role=data.get("role") or "",
            client_id=data.get("clientId"),
            permissions=tuple(data.get("permissions") or ()),
        )

    def to_login(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "clientId": self.client_id,
            "permissions": list(self.permissions),
        }
