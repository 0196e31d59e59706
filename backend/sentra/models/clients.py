from __future__ import annotations

from ..extensions import db
from sentra.ids import new_id
from sentra.time_utils import to_utc_z


CLIENT_STATUSES = ("Complete", "Pending", "Inactive")
DEFAULT_TAG_COLOR = "#3B82F6"


class Client(db.Model):
    """
    A customer of the services business.

    total_sales, total_collection and balance are cached aggregates. They are
    adjusted additively whenever an invoice or payment is recorded and are
    never recomputed from the invoice/payment rows on read.
    """
    __tablename__ = "clients"
    __table_args__ = (
        db.Index("ix_clients_email", "email"),
        db.Index("ix_clients_phone", "phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    business_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(64), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Pending")
    pic = db.Column(db.String(255), nullable=True)  # person in charge

    total_sales = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    total_collection = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    balance = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    invoice_count = db.Column(db.Integer, nullable=False, default=0)

    # Tag names (weak reference by value into tags.name)
    tags = db.Column(db.JSON, nullable=False, default=list)

    company = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    last_activity = db.Column(db.DateTime(timezone=True), nullable=True)
    registered_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "business_name": self.business_name,
            "email": self.email,
            "phone": self.phone,
            "status": self.status,
            "pic": self.pic,
            "total_sales": self.total_sales or 0,
            "total_collection": self.total_collection or 0,
            "balance": self.balance or 0,
            "invoice_count": self.invoice_count or 0,
            "tags": list(self.tags or []),
            "company": self.company,
            "address": self.address,
            "notes": self.notes,
            "last_activity": to_utc_z(self.last_activity),
            "registered_at": to_utc_z(self.registered_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Tag(db.Model):
    """Global coloured label; clients reference tags by name."""
    __tablename__ = "tags"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id())
    name = db.Column(db.String(128), nullable=False, unique=True, index=True)
    color = db.Column(db.String(16), nullable=False, default=DEFAULT_TAG_COLOR)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ClientLink(db.Model):
    """Named URL attached to a client (shared drives, dashboards, ...)."""
    __tablename__ = "client_links"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id())
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    url = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "title": self.title,
            "url": self.url,
            "created_at": to_utc_z(self.created_at),
        }
