"""
GoHighLevel webhook tests.
"""

import json
from datetime import datetime, timezone

from sentra.models import CalendarEvent
from sentra.services.webhook_service import sign


def _appointment(email="alice@acme.test", phone=None, **extra):
    body = {
        "appointmentId": "apt_1",
        "contactId": "ct_1",
        "startTime": "2026-10-20T09:30:00Z",
        "endTime": "2026-10-20T10:30:00Z",
        "calendar": {"name": "Onboarding Calendar"},
        "contact": {"name": "Alice Tan", "email": email, "phone": phone},
    }
    body.update(extra)
    return body


class TestOnboardingWebhook:

    def test_creates_event_for_matched_client(self, client, acme, db_session):
        resp = client.post("/webhook/ghl/onboarding", json=_appointment(email="ALICE@acme.test"))

        assert resp.status_code == 200
        assert resp.json["status"] == "success"
        assert resp.json["clientName"] == "Acme Sdn Bhd"

        event = db_session.get(CalendarEvent, resp.json["eventId"])
        assert event.client_id == acme.id
        assert event.type == "onboarding"
        assert event.title == "Onboarding Session"
        assert (event.start_date, event.start_time) == ("2026-10-20", "09:30")
        assert (event.end_date, event.end_time) == ("2026-10-20", "10:30")
        assert "Appointment ID: apt_1" in event.description

    def test_matches_by_phone(self, client, acme):
        resp = client.post("/webhook/ghl/handover", json=_appointment(email="other@x.test", phone="+60123456789"))
        assert resp.json["status"] == "success"
        assert resp.json["message"] == "Handover event created"

    def test_unknown_contact_is_a_warning(self, client, db_session):
        resp = client.post("/webhook/ghl/onboarding", json=_appointment(email="ghost@x.test"))
        assert resp.status_code == 200
        assert resp.json == {"status": "warning", "message": "Client not found in database", "contactId": "ct_1"}
        assert db_session.query(CalendarEvent).count() == 0

    def test_epoch_millisecond_times(self, client, acme, db_session):
        start = int(datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc).timestamp() * 1000)
        resp = client.post("/webhook/ghl/onboarding", json=_appointment(startTime=start, endTime=str(start + 3600000)))

        event = db_session.get(CalendarEvent, resp.json["eventId"])
        assert (event.start_date, event.start_time) == ("2026-10-20", "09:30")
        assert (event.end_date, event.end_time) == ("2026-10-20", "10:30")

    def test_bad_start_time(self, client, acme):
        resp = client.post("/webhook/ghl/onboarding", json=_appointment(startTime="tomorrow"))
        assert resp.status_code == 400
        assert resp.json["status"] == "error"


class TestSignatures:

    def test_wrong_signature_rejected(self, client, app, acme, monkeypatch):
        monkeypatch.setitem(app.config, "GHL_ONBOARDING_WEBHOOK_SECRET", "s3cret")
        resp = client.post(
            "/webhook/ghl/onboarding",
            data=json.dumps(_appointment()),
            content_type="application/json",
            headers={"x-ghl-signature": "deadbeef"},
        )
        assert resp.status_code == 401
        assert resp.json == {"error": "Invalid signature"}

    def test_valid_signature_accepted(self, client, app, acme, monkeypatch):
        monkeypatch.setitem(app.config, "GHL_ONBOARDING_WEBHOOK_SECRET", "s3cret")
        raw = json.dumps(_appointment()).encode("utf-8")
        resp = client.post(
            "/webhook/ghl/onboarding",
            data=raw,
            content_type="application/json",
            headers={"x-ghl-signature": sign(raw, "s3cret")},
        )
        assert resp.status_code == 200
        assert resp.json["status"] == "success"

    def test_unsigned_request_passes_when_secret_set(self, client, app, acme, monkeypatch):
        monkeypatch.setitem(app.config, "GHL_ONBOARDING_WEBHOOK_SECRET", "s3cret")
        resp = client.post("/webhook/ghl/onboarding", json=_appointment())
        assert resp.status_code == 200


class TestUtilityEndpoints:

    def test_health(self, client):
        resp = client.get("/webhook/health")
        assert resp.json["status"] == "healthy"

    def test_echo(self, client):
        resp = client.post("/webhook/test", json={"ping": 1})
        assert resp.json["data"] == {"ping": 1}
