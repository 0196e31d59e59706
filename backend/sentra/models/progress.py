from __future__ import annotations

from ..extensions import db
from sentra.ids import new_id
from sentra.time_utils import to_utc_z


class Component(db.Model):
    """A deliverable that makes up a client's package (e.g. "SEO Optimization")."""
    __tablename__ = "components"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id("COMP"))
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    invoice_id = db.Column(db.String(32), db.ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.String(64), nullable=False, default="RM 0.00")
    active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "invoice_id": self.invoice_id,
            "name": self.name,
            "price": self.price,
            "active": self.active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProgressStep(db.Model):
    """
    One milestone on a client's onboarding tracker.

    Comments are a separate table ordered by created_at and are embedded in
    to_dict() so the tracker can render a step in one round-trip.
    """
    __tablename__ = "progress_steps"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id("STEP"))
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    deadline = db.Column(db.DateTime(timezone=True), nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_date = db.Column(db.DateTime(timezone=True), nullable=True)
    important = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    comments = db.relationship(
        "ProgressStepComment",
        backref="step",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ProgressStepComment.created_at",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "title": self.title,
            "description": self.description,
            "deadline": to_utc_z(self.deadline),
            "completed": self.completed,
            "completed_date": to_utc_z(self.completed_date),
            "important": self.important,
            "comments": [c.to_dict() for c in self.comments],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProgressStepComment(db.Model):
    __tablename__ = "progress_step_comments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id())
    step_id = db.Column(db.String(36), db.ForeignKey("progress_steps.id", ondelete="CASCADE"), nullable=False, index=True)

    text = db.Column(db.Text, nullable=False)
    username = db.Column(db.String(255), nullable=False)
    attachment_url = db.Column(db.Text, nullable=True)
    attachment_type = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "step_id": self.step_id,
            "text": self.text,
            "username": self.username,
            "attachment_url": self.attachment_url,
            "attachment_type": self.attachment_type,
            "created_at": to_utc_z(self.created_at),
        }
