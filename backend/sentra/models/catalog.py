from __future__ import annotations

from ..extensions import db
from sentra.time_utils import to_utc_z


SERVICE_CATEGORIES = ("Support", "Analytics", "Domain", "Integration", "Mobile", "Security")
SERVICE_STATUSES = ("Available", "Unavailable")
REQUEST_STATUSES = ("Pending", "Approved", "Rejected", "Completed")


class AddOnService(db.Model):
    """Optional extra a client can request from the portal."""
    __tablename__ = "add_on_services"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(32), nullable=False)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="Available")
    features = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "price": self.price,
            "status": self.status,
            "features": list(self.features or []),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ServiceRequest(db.Model):
    """
    A client's request for an add-on service.

    STATUS FLOW: Pending -> Approved -> Completed, or Pending -> Rejected.
    Each transition stamps its own *_date column.
    """
    __tablename__ = "client_service_requests"
    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("add_on_services.id", ondelete="CASCADE"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default="Pending", index=True)
    request_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    approved_date = db.Column(db.DateTime(timezone=True), nullable=True)
    rejected_date = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_date = db.Column(db.DateTime(timezone=True), nullable=True)
    admin_notes = db.Column(db.Text, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    service = db.relationship("AddOnService", backref=db.backref("requests", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "service_id": self.service_id,
            "service_name": self.service.name if self.service else None,
            "status": self.status,
            "request_date": to_utc_z(self.request_date),
            "approved_date": to_utc_z(self.approved_date),
            "rejected_date": to_utc_z(self.rejected_date),
            "completed_date": to_utc_z(self.completed_date),
            "admin_notes": self.admin_notes,
            "rejection_reason": self.rejection_reason,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
