# Overview: One adapter per API collection; maps wire records to entities and issues requests through a transport.

"""
Service adapters.

Adapters do no caching and no error handling: an ApiError from the
transport reaches the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Type

from . import entities as e
from .transport import Transport


def _payload(data) -> dict:
    if isinstance(data, e.Record):
        return data.to_record()
    return dict(data or {})


class CollectionAdapter:
    def __init__(self, transport: Transport, path: str, entity: Type[e.Record]):
        self._transport = transport
        self._path = path
        self._entity = entity

    def get_all(self, **params) -> list:
        query = {k: v for k, v in params.items() if v is not None} or None
        rows = self._transport.request("GET", self._path, params=query) or []
        return [self._entity.from_record(row) for row in rows]

    def get_by_id(self, record_id):
        return self._entity.from_record(self._transport.request("GET", f"{self._path}/{record_id}"))

    def create(self, data):
        return self._entity.from_record(self._transport.request("POST", self._path, json=_payload(data)))

    def update(self, record_id, changes):
        body = self._transport.request("PUT", f"{self._path}/{record_id}", json=_payload(changes))
        return self._entity.from_record(body)

    def delete(self, record_id) -> None:
        self._transport.request("DELETE", f"{self._path}/{record_id}")


class ProgressStepAdapter(CollectionAdapter):
    def add_comment(self, step_id: str, comment: dict) -> dict:
        return self._transport.request("POST", f"{self._path}/{step_id}/comments", json=dict(comment))

    def delete_comment(self, comment_id: str) -> None:
        self._transport.request("DELETE", f"/api/progress-comments/{comment_id}")


class ComponentAdapter(CollectionAdapter):
    def copy_to_progress_steps(self, client_id: int) -> list:
        body = self._transport.request("POST", f"/api/clients/{client_id}/components/copy-to-progress-steps")
        return [e.ProgressStep.from_record(row) for row in (body or {}).get("created", [])]


class ChatAdapter(CollectionAdapter):
    def create_chat(self, client_id: int) -> e.Chat:
        return e.Chat.from_record(self._transport.request("POST", self._path, json={"client_id": client_id}))

    def get_messages(self, chat_id: int) -> list:
        rows = self._transport.request("GET", f"{self._path}/{chat_id}/messages") or []
        return [e.ChatMessage.from_record(row) for row in rows]

    def send_message(self, chat_id: int, message) -> e.ChatMessage:
        body = self._transport.request("POST", f"{self._path}/{chat_id}/messages", json=_payload(message))
        return e.ChatMessage.from_record(body)

    def mark_as_read(self, chat_id: int) -> e.Chat:
        return e.Chat.from_record(self._transport.request("POST", f"{self._path}/{chat_id}/read"))

    def update_online_status(self, chat_id: int, online: bool) -> e.Chat:
        body = self._transport.request("PUT", f"{self._path}/{chat_id}/online", json={"online": online})
        return e.Chat.from_record(body)

    def delete_message(self, message_id: int) -> None:
        self._transport.request("DELETE", f"/api/chat-messages/{message_id}")

    def unread_count(self) -> int:
        body = self._transport.request("GET", f"{self._path}/unread-count") or {}
        return int(body.get("unread_count") or 0)


class ClientLinkAdapter(CollectionAdapter):
    """Links are listed per client but created/deleted at /api/client-links."""

    def get_all(self, client_id: Optional[int] = None, **params) -> list:
        if client_id is None:
            raise ValueError("client_id is required to list client links")
        rows = self._transport.request("GET", f"/api/clients/{client_id}/links") or []
        return [e.ClientLink.from_record(row) for row in rows]


class AuthAdapter:
    def __init__(self, transport: Transport):
        self._transport = transport

    def login(self, email: str, password: str) -> e.AuthUser:
        body = self._transport.request("POST", "/api/auth/login", json={"email": email, "password": password})
        return e.AuthUser.from_login(body["user"])


@dataclass
class Adapters:
    clients: CollectionAdapter
    invoices: CollectionAdapter
    payments: CollectionAdapter
    calendar_events: CollectionAdapter
    components: ComponentAdapter
    progress_steps: ProgressStepAdapter
    chats: ChatAdapter
    users: CollectionAdapter
    tags: CollectionAdapter
    client_links: ClientLinkAdapter
    add_on_services: CollectionAdapter
    service_requests: CollectionAdapter
    auth: AuthAdapter

    @classmethod
    def over(cls, transport: Transport) -> "Adapters":
        return cls(
            clients=CollectionAdapter(transport, "/api/clients", e.Client),
            invoices=CollectionAdapter(transport, "/api/invoices", e.Invoice),
            payments=CollectionAdapter(transport, "/api/payments", e.Payment),
            calendar_events=CollectionAdapter(transport, "/api/calendar-events", e.CalendarEvent),
            components=ComponentAdapter(transport, "/api/components", e.Component),
            progress_steps=ProgressStepAdapter(transport, "/api/progress-steps", e.ProgressStep),
            chats=ChatAdapter(transport, "/api/chats", e.Chat),
            users=CollectionAdapter(transport, "/api/users", e.User),
            tags=CollectionAdapter(transport, "/api/tags", e.Tag),
            client_links=ClientLinkAdapter(transport, "/api/client-links", e.ClientLink),
            add_on_services=CollectionAdapter(transport, "/api/add-on-services", e.AddOnService),
            service_requests=CollectionAdapter(transport, "/api/service-requests", e.ServiceRequest),
            auth=AuthAdapter(transport),
        )
