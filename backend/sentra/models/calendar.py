from __future__ import annotations

from ..extensions import db
from sentra.ids import new_id
from sentra.time_utils import to_utc_z


EVENT_TYPES = ("onboarding", "handover", "meeting", "payment", "deadline", "call")


class CalendarEvent(db.Model):
    """
    Appointment on the shared calendar.

    Dates and times are stored as the strings the calendar renders
    ("YYYY-MM-DD" / "HH:MM"); there is no timezone attached.
    """
    __tablename__ = "calendar_events"
    __table_args__ = (
        db.Index("ix_calendar_events_client_start", "client_id", "start_date"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id())
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    start_date = db.Column(db.String(10), nullable=False)
    end_date = db.Column(db.String(10), nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(32), nullable=False, default="meeting")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "title": self.title,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "type": self.type,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
