"""
Login and user management tests.

Verifies:
- Demo accounts sign in without a users row
- The three login failures carry distinct messages
- Client roles must be scoped to a client
"""

import pytest

from sentra.models import User
from sentra.services.auth_service import hash_password, verify_password


@pytest.fixture
def jane(db_session):
    user = User(name="Jane", email="jane@sentra.test", role="Team", status="Active",
                password_hash=hash_password("Secret123!"))
    db_session.add(user)
    db_session.commit()
    return user


class TestLogin:

    def test_demo_admin(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "superadmin@sentra.com", "password": "password123"})
        assert resp.status_code == 200
        assert resp.json["success"] is True
        assert resp.json["user"]["role"] == "Super Admin"
        assert resp.json["user"]["permissions"] == ["all"]

    def test_demo_client_carries_client_id(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "client@demo.com", "password": "client123"})
        assert resp.status_code == 200
        assert resp.json["user"]["clientId"] == 1

    def test_database_user(self, client, jane):
        resp = client.post("/api/auth/login", json={"email": "JANE@sentra.test", "password": "Secret123!"})
        assert resp.status_code == 200
        assert resp.json["user"]["email"] == "jane@sentra.test"
        assert jane.last_login is not None

    @pytest.mark.parametrize(
        "email,password,message",
        [
            ("nobody@sentra.test", "x", "Account not found"),
            ("jane@sentra.test", "wrong", "Invalid password"),
        ],
    )
    def test_rejections(self, client, jane, email, password, message):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 401
        assert resp.json["error"] == message

    def test_inactive_account(self, client, jane, db_session):
        jane.status = "Inactive"
        db_session.commit()
        resp = client.post("/api/auth/login", json={"email": "jane@sentra.test", "password": "Secret123!"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Account is not active"

    def test_missing_credentials(self, client, db_session):
        assert client.post("/api/auth/login", json={"email": "a@b.test"}).status_code == 400


class TestUsers:

    def test_client_role_requires_client(self, client, db_session):
        resp = client.post("/api/users", json={"name": "C", "email": "c@c.test", "role": "Client Admin"})
        assert resp.status_code == 400

    def test_create_user_hashes_password(self, client, acme, db_session):
        resp = client.post("/api/users", json={
            "name": "C", "email": "c@c.test", "role": "Client Team", "client_id": acme.id, "password": "pw-123456",
        })
        assert resp.status_code == 201
        assert "password" not in resp.json
        assert "password_hash" not in resp.json

        user = db_session.get(User, resp.json["id"])
        assert verify_password("pw-123456", user.password_hash)

    def test_duplicate_email(self, client, jane):
        resp = client.post("/api/users", json={"name": "J2", "email": "Jane@sentra.test", "role": "Team"})
        assert resp.status_code == 409


class TestPasswordHashing:

    def test_malformed_hash_is_rejected(self):
        assert verify_password("x", "not-a-bcrypt-hash") is False

    def test_no_hash(self):
        assert verify_password("x", None) is False
