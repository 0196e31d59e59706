"""
Client, tag and link endpoint tests.

Verifies:
- Client CRUD and validation
- Deleting a client removes everything it owns
- Tag renames/deletes propagate to client tag lists
"""

from sentra.models import Invoice, Payment, ProgressStep, Chat, ChatMessage, ClientLink, CalendarEvent

from conftest import create_invoice


class TestClientCrud:

    def test_create_client_defaults(self, client, db_session):
        resp = client.post("/api/clients", json={
            "name": "Alice Tan",
            "business_name": "Acme Sdn Bhd",
            "email": "alice@acme.test",
        })
        assert resp.status_code == 201
        assert resp.json["status"] == "Pending"
        assert resp.json["total_sales"] == 0
        assert resp.json["tags"] == []

    def test_create_client_missing_fields(self, client, db_session):
        resp = client.post("/api/clients", json={"name": "No Email"})
        assert resp.status_code == 400
        assert resp.json["error"] == "Missing required fields: business_name, email"

    def test_unknown_field_rejected(self, client, db_session):
        resp = client.post("/api/clients", json={
            "name": "A", "business_name": "B", "email": "a@b.test", "password": "x",
        })
        assert resp.status_code == 400
        assert resp.json["error"] == "Field not allowed: password"

    def test_invalid_status_rejected(self, client, acme):
        resp = client.put(f"/api/clients/{acme.id}", json={"status": "Archived"})
        assert resp.status_code == 400

    def test_get_missing_client(self, client, db_session):
        resp = client.get("/api/clients/12345")
        assert resp.status_code == 404
        assert resp.json == {"error": "Client not found"}


class TestClientDeleteCascade:

    def test_delete_removes_owned_records(self, client, acme, db_session):
        invoice = create_invoice(client, acme.id)
        client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 100})
        client.post("/api/calendar-events", json={
            "client_id": acme.id, "title": "Kickoff", "start_date": "2026-10-20", "start_time": "10:00",
        })
        client.post("/api/client-links", json={"client_id": acme.id, "title": "Drive", "url": "https://drive.test"})
        chat = client.post("/api/chats", json={"client_id": acme.id}).json
        client.post(f"/api/chats/{chat['id']}/messages", json={"sender": "client", "content": "hi"})
        client.post("/api/progress-steps", json={"client_id": acme.id, "title": "Brief"})
        client_id = acme.id

        resp = client.delete(f"/api/clients/{client_id}")
        assert resp.status_code == 200

        for model in (Invoice, Payment, CalendarEvent, ClientLink, ProgressStep, Chat):
            assert db_session.query(model).filter_by(client_id=client_id).count() == 0, model.__name__
        assert db_session.query(ChatMessage).count() == 0
        assert client.get(f"/api/clients/{client_id}").status_code == 404


class TestTags:

    def test_duplicate_tag_conflicts(self, client, db_session):
        assert client.post("/api/tags", json={"name": "VIP"}).status_code == 201
        resp = client.post("/api/tags", json={"name": "vip"})
        assert resp.status_code == 409

    def test_rename_and_delete_propagate(self, client, acme):
        tag = client.post("/api/tags", json={"name": "VIP", "color": "#FF0000"}).json
        client.put(f"/api/clients/{acme.id}", json={"tags": ["VIP", "Retail"]})

        client.put(f"/api/tags/{tag['id']}", json={"name": "Priority"})
        assert client.get(f"/api/clients/{acme.id}").json["tags"] == ["Priority", "Retail"]

        client.delete(f"/api/tags/{tag['id']}")
        assert client.get(f"/api/clients/{acme.id}").json["tags"] == ["Retail"]


class TestClientLinks:

    def test_links_listed_per_client(self, client, acme):
        link = client.post("/api/client-links", json={
            "client_id": acme.id, "title": "Drive", "url": "https://drive.test",
        })
        assert link.status_code == 201

        resp = client.get(f"/api/clients/{acme.id}/links")
        assert [l["title"] for l in resp.json] == ["Drive"]

        assert client.delete(f"/api/client-links/{link.json['id']}").status_code == 200
        assert client.get(f"/api/clients/{acme.id}/links").json == []
