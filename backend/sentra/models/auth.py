from __future__ import annotations

from ..extensions import db
from sentra.ids import new_id
from sentra.time_utils import to_utc_z


USER_ROLES = ("Super Admin", "Team", "Client Admin", "Client Team")
CLIENT_ROLES = ("Client Admin", "Client Team")
USER_STATUSES = ("Active", "Inactive")


class User(db.Model):
    """
    Staff and client-portal accounts.

    Client-scoped roles (Client Admin / Client Team) carry client_id so the
    portal only shows that client's records.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: new_id())

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    role = db.Column(db.String(32), nullable=False, default="Team")
    status = db.Column(db.String(16), nullable=False, default="Active")
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    permissions = db.Column(db.JSON, nullable=False, default=list)

    # Bcrypt hashed password; accounts created without one cannot log in
    password_hash = db.Column(db.String(255), nullable=True)

    last_login = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "status": self.status,
            "client_id": self.client_id,
            "permissions": list(self.permissions or []),
            "last_login": to_utc_z(self.last_login),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_auth_dict(self) -> dict:
        """Shape returned by /api/auth/login (camelCase clientId like the portal expects)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "clientId": self.client_id,
            "permissions": list(self.permissions or []),
        }
