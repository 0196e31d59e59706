"""
Add-on catalogue and service request tests.
"""

import pytest

from sentra.services import addon_service


@pytest.fixture
def catalogue(db_session):
    addon_service.seed_sample_services()
    return {s.name: s for s in addon_service.list_services()}


class TestCatalogue:

    def test_seed_is_idempotent(self, db_session):
        assert addon_service.seed_sample_services() == 6
        assert addon_service.seed_sample_services() == 0

    def test_available_filter(self, client, catalogue):
        names = [s["name"] for s in client.get("/api/add-on-services?available=true").json]
        assert "Mobile App" not in names
        assert len(names) == 5


class TestRequests:

    def test_request_lifecycle(self, client, acme, catalogue):
        service = catalogue["Premium Support"]
        resp = client.post("/api/service-requests", json={"client_id": acme.id, "service_id": service.id})
        assert resp.status_code == 201
        assert resp.json["status"] == "Pending"
        assert resp.json["service_name"] == "Premium Support"
        assert resp.json["request_date"] is not None

        approved = client.put(f"/api/service-requests/{resp.json['id']}", json={"status": "Approved"})
        assert approved.json["approved_date"] is not None

    def test_unavailable_service(self, client, acme, catalogue):
        resp = client.post("/api/service-requests", json={
            "client_id": acme.id, "service_id": catalogue["Mobile App"].id,
        })
        assert resp.status_code == 400

    def test_reject_requires_reason(self, client, acme, catalogue):
        req = client.post("/api/service-requests", json={
            "client_id": acme.id, "service_id": catalogue["Custom Domain"].id,
        }).json

        assert client.put(f"/api/service-requests/{req['id']}", json={"status": "Rejected"}).status_code == 400
        resp = client.put(f"/api/service-requests/{req['id']}", json={
            "status": "Rejected", "rejection_reason": "Out of scope",
        })
        assert resp.status_code == 200
        assert resp.json["rejected_date"] is not None
