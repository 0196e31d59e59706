"""
Components and progress steps.

Verifies:
- A new component gets a matching step unless one already exists
- Copying components to steps skips names that already have a step (case-insensitive)
- Completing a step stamps completed_date; re-opening clears it
- Comments with attachments need a type
"""


class TestComponents:

    def test_component_creates_step(self, client, acme):
        resp = client.post("/api/components", json={"client_id": acme.id, "name": "Landing Page"})
        assert resp.status_code == 201

        steps = client.get(f"/api/progress-steps?client_id={acme.id}").json
        assert [s["title"] for s in steps] == ["Landing Page"]
        assert steps[0]["description"] == "Complete setup and configuration for Landing Page"
        assert steps[0]["deadline"] is not None

    def test_component_does_not_duplicate_existing_step(self, client, acme):
        client.post("/api/progress-steps", json={"client_id": acme.id, "title": "landing page"})
        client.post("/api/components", json={"client_id": acme.id, "name": "Landing Page"})

        steps = client.get(f"/api/progress-steps?client_id={acme.id}").json
        assert len(steps) == 1

    def test_copy_to_progress_steps(self, client, acme, db_session):
        from sentra.models import Component

        # Inserted directly so no steps exist yet
        db_session.add_all([
            Component(client_id=acme.id, name="SEO"),
            Component(client_id=acme.id, name="Blog"),
        ])
        db_session.commit()
        client.post("/api/progress-steps", json={"client_id": acme.id, "title": "seo"})

        resp = client.post(f"/api/clients/{acme.id}/components/copy-to-progress-steps")
        assert resp.status_code == 201
        assert resp.json["count"] == 1
        assert resp.json["created"][0]["title"] == "Blog"

        again = client.post(f"/api/clients/{acme.id}/components/copy-to-progress-steps")
        assert again.json["count"] == 0


class TestSteps:

    def test_complete_and_reopen(self, client, acme):
        step = client.post("/api/progress-steps", json={"client_id": acme.id, "title": "Brief"}).json
        assert step["completed_date"] is None

        done = client.put(f"/api/progress-steps/{step['id']}", json={"completed": True}).json
        assert done["completed"] is True
        assert done["completed_date"] is not None

        reopened = client.put(f"/api/progress-steps/{step['id']}", json={"completed": False}).json
        assert reopened["completed_date"] is None

    def test_deadline_offset_normalized_to_utc(self, client, acme):
        step = client.post("/api/progress-steps", json={
            "client_id": acme.id, "title": "Launch", "deadline": "2026-10-20T17:30:00+08:00",
        })
        assert step.status_code == 201
        assert step.json["deadline"] == "2026-10-20T09:30:00Z"

        bad = client.post("/api/progress-steps", json={"client_id": acme.id, "title": "x", "deadline": "soon"})
        assert bad.status_code == 400

    def test_comments(self, client, acme):
        step = client.post("/api/progress-steps", json={"client_id": acme.id, "title": "Brief"}).json

        bad = client.post(f"/api/progress-steps/{step['id']}/comments", json={
            "text": "See file", "username": "Jane", "attachment_url": "https://files.test/a.pdf",
        })
        assert bad.status_code == 400

        comment = client.post(f"/api/progress-steps/{step['id']}/comments", json={
            "text": "See file", "username": "Jane",
            "attachment_url": "https://files.test/a.pdf", "attachment_type": "pdf",
        })
        assert comment.status_code == 201

        steps = client.get(f"/api/progress-steps?client_id={acme.id}").json
        assert [c["text"] for c in steps[0]["comments"]] == ["See file"]

        client.delete(f"/api/progress-comments/{comment.json['id']}")
        steps = client.get(f"/api/progress-steps?client_id={acme.id}").json
        assert steps[0]["comments"] == []
