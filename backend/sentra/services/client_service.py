# Overview: Service-layer operations for clients, tags and client links.

"""
Client Service

Clients own invoices, payments, calendar events, components, progress
steps, a chat, links and add-on service requests by foreign key. Deleting
a client removes those rows explicitly in the same transaction because
SQLite does not enforce ON DELETE CASCADE unless told to.
"""

from __future__ import annotations

from ..extensions import db
from ..models import (
    Client, Tag, ClientLink, Invoice, Payment, CalendarEvent, Component,
    ProgressStep, Chat, ServiceRequest,
)
from ..models.clients import CLIENT_STATUSES
from ..accounting import ClientTotals
from ..validation import (
    ModelValidationPolicy, ValidationError, NotFoundError, ConflictError,
    validate_payload, enforce_choice, enforce_non_negative,
)
from sentra.time_utils import utcnow


CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "business_name", "email", "phone", "status", "pic",
        "total_sales", "total_collection", "balance", "invoice_count", "tags",
        "company", "address", "notes",
    },
    required_on_create={"name", "business_name", "email"},
    ignored_fields={"id", "created_at", "updated_at", "registered_at", "last_activity"},
)

TAG_POLICY = ModelValidationPolicy(
    writable_fields={"name", "color"},
    required_on_create={"name"},
    ignored_fields={"id", "created_at", "updated_at"},
)

LINK_POLICY = ModelValidationPolicy(
    writable_fields={"client_id", "title", "url"},
    required_on_create={"client_id", "title", "url"},
    ignored_fields={"id", "created_at"},
)


# =============================================================================
# CLIENTS
# =============================================================================

def list_clients() -> list[Client]:
    return db.session.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).all()


def get_client(client_id: int) -> Client:
    client = db.session.get(Client, client_id)
    if not client:
        raise NotFoundError("Client not found")
    return client


def create_client(payload: dict) -> Client:
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
    enforce_choice(patch, "status", CLIENT_STATUSES)
    enforce_non_negative(patch, "total_sales", "total_collection", "balance", "invoice_count")

    client = Client(**patch)
    if client.status is None:
        client.status = "Pending"
    client.last_activity = utcnow()
    db.session.add(client)
    db.session.commit()
    return client


def update_client(client_id: int, payload: dict) -> Client:
    client = get_client(client_id)
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=True)
    enforce_choice(patch, "status", CLIENT_STATUSES)
    enforce_non_negative(patch, "total_sales", "total_collection", "balance", "invoice_count")

    for key, value in patch.items():
        setattr(client, key, value)
    client.last_activity = utcnow()
    db.session.commit()
    return client


def delete_client(client_id: int) -> None:
    """Delete a client and every row that references it."""
    client = get_client(client_id)

    db.session.query(Payment).filter_by(client_id=client_id).delete(synchronize_session=False)
    db.session.query(Component).filter_by(client_id=client_id).delete(synchronize_session=False)
    db.session.query(Invoice).filter_by(client_id=client_id).delete(synchronize_session=False)
    db.session.query(CalendarEvent).filter_by(client_id=client_id).delete(synchronize_session=False)
    db.session.query(ClientLink).filter_by(client_id=client_id).delete(synchronize_session=False)
    db.session.query(ServiceRequest).filter_by(client_id=client_id).delete(synchronize_session=False)

    # ORM deletes so comment / message children cascade
    for step in db.session.query(ProgressStep).filter_by(client_id=client_id).all():
        db.session.delete(step)
    for chat in db.session.query(Chat).filter_by(client_id=client_id).all():
        db.session.delete(chat)

    db.session.delete(client)
    db.session.commit()


def find_client_by_contact(email: str | None, phone: str | None) -> Client | None:
    """Match an external contact to a client: email first, then phone."""
    if email:
        client = db.session.query(Client).filter(db.func.lower(Client.email) == email.strip().lower()).first()
        if client:
            return client
    if phone:
        client = db.session.query(Client).filter_by(phone=phone.strip()).first()
        if client:
            return client
    return None


def totals_of(client: Client) -> ClientTotals:
    return ClientTotals(
        total_sales=client.total_sales or 0,
        total_collection=client.total_collection or 0,
        balance=client.balance or 0,
        invoice_count=client.invoice_count or 0,
    )


def apply_totals(client: Client, totals: ClientTotals) -> None:
    """Write recomputed aggregates back onto the row (caller commits)."""
    client.total_sales = totals.total_sales
    client.total_collection = totals.total_collection
    client.balance = totals.balance
    client.invoice_count = totals.invoice_count
    client.last_activity = utcnow()


# =============================================================================
# TAGS
# =============================================================================

def list_tags() -> list[Tag]:
    return db.session.query(Tag).order_by(Tag.name).all()


def create_tag(payload: dict) -> Tag:
    patch = validate_payload(model=Tag, payload=payload, policy=TAG_POLICY, partial=False)
    existing = db.session.query(Tag).filter(db.func.lower(Tag.name) == patch["name"].lower()).first()
    if existing:
        raise ConflictError(f"Tag already exists: {patch['name']}")
    tag = Tag(**patch)
    db.session.add(tag)
    db.session.commit()
    return tag


def ensure_tag(name: str) -> Tag:
    """Return the tag with this name, creating it with the default colour if needed."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Tag name is required")
    tag = db.session.query(Tag).filter(db.func.lower(Tag.name) == name.lower()).first()
    if tag:
        return tag
    tag = Tag(name=name)
    db.session.add(tag)
    db.session.flush()
    return tag


def update_tag(tag_id: str, payload: dict) -> Tag:
    tag = db.session.get(Tag, tag_id)
    if not tag:
        raise NotFoundError("Tag not found")
    patch = validate_payload(model=Tag, payload=payload, policy=TAG_POLICY, partial=True)

    old_name = tag.name
    for key, value in patch.items():
        setattr(tag, key, value)

    # Clients reference tags by name
    if "name" in patch and patch["name"] != old_name:
        for client in db.session.query(Client).all():
            if old_name in (client.tags or []):
                client.tags = [patch["name"] if t == old_name else t for t in client.tags]
    db.session.commit()
    return tag


def delete_tag(tag_id: str) -> None:
    tag = db.session.get(Tag, tag_id)
    if not tag:
        raise NotFoundError("Tag not found")
    for client in db.session.query(Client).all():
        if tag.name in (client.tags or []):
            client.tags = [t for t in client.tags if t != tag.name]
    db.session.delete(tag)
    db.session.commit()


# =============================================================================
# CLIENT LINKS
# =============================================================================

def list_links(client_id: int) -> list[ClientLink]:
    return (
        db.session.query(ClientLink)
        .filter_by(client_id=client_id)
        .order_by(ClientLink.created_at.desc())
        .all()
    )


def create_link(payload: dict) -> ClientLink:
    patch = validate_payload(model=ClientLink, payload=payload, policy=LINK_POLICY, partial=False)
    get_client(patch["client_id"])
    link = ClientLink(**patch)
    db.session.add(link)
    db.session.commit()
    return link


def delete_link(link_id: str) -> None:
    link = db.session.get(ClientLink, link_id)
    if not link:
        raise NotFoundError("Client link not found")
    db.session.delete(link)
    db.session.commit()
