# Overview: Service-layer operations for auth and user accounts; encapsulates business logic and database work.

"""
Authentication Service

Login is dual-mode: the configured demo accounts are checked first, then
the users table. Failures carry distinct messages so the login form can
say what went wrong:
- "Account not found"
- "Account is not active"
- "Invalid password"

Passwords are hashed with bcrypt (cost factor 12). There is no lockout,
throttling or strength policy.
"""

from __future__ import annotations

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from ..models.auth import USER_ROLES, USER_STATUSES, CLIENT_ROLES
from ..validation import (
    SentraError, ModelValidationPolicy, NotFoundError, ValidationError, ConflictError,
    validate_payload, enforce_choice,
)
from sentra.time_utils import utcnow


class AuthError(SentraError):
    """Raised when a login attempt is rejected (401)."""


USER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "role", "status", "client_id", "permissions"},
    required_on_create={"name", "email", "role"},
    ignored_fields={"id", "password", "last_login", "created_at", "updated_at"},
)


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12."""
    if not password:
        raise ValidationError("Password is required")
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Returns True if password matches hash, False otherwise (including no hash)."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


# =============================================================================
# LOGIN
# =============================================================================

def _demo_accounts() -> list[tuple[str, str, dict]]:
    cfg = current_app.config
    if not cfg.get("DEMO_ACCOUNTS_ENABLED"):
        return []
    return [
        (
            cfg["DEMO_ADMIN_EMAIL"],
            cfg["DEMO_ADMIN_PASSWORD"],
            {
                "id": "1",
                "email": cfg["DEMO_ADMIN_EMAIL"],
                "name": cfg["DEMO_ADMIN_NAME"],
                "role": "Super Admin",
                "clientId": None,
                "permissions": ["all"],
            },
        ),
        (
            cfg["DEMO_CLIENT_EMAIL"],
            cfg["DEMO_CLIENT_PASSWORD"],
            {
                "id": "2",
                "email": cfg["DEMO_CLIENT_EMAIL"],
                "name": cfg["DEMO_CLIENT_NAME"],
                "role": "Client Admin",
                "clientId": 1,
                "permissions": ["client_portal"],
            },
        ),
    ]


def authenticate(email: str, password: str) -> dict:
    """
    Check credentials and return the auth user shape
    {id, email, name, role, clientId, permissions}.

    Raises AuthError with one of the three login messages.
    """
    email = (email or "").strip()
    for demo_email, demo_password, user in _demo_accounts():
        if email == demo_email and password == demo_password:
            current_app.logger.info("Demo login: %s", email)
            return dict(user)

    user = db.session.query(User).filter(db.func.lower(User.email) == email.lower()).first()
    if not user:
        raise AuthError("Account not found")
    if user.status != "Active":
        raise AuthError("Account is not active")
    if not verify_password(password, user.password_hash):
        raise AuthError("Invalid password")

    user.last_login = utcnow()
    db.session.commit()
    return user.to_auth_dict()


# =============================================================================
# USER MANAGEMENT
# =============================================================================

def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.desc()).all()


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _check_role_scope(role: str | None, client_id) -> None:
    if role in CLIENT_ROLES and not client_id:
        raise ValidationError(f"client_id is required for role {role}")


def create_user(payload: dict) -> User:
    payload = dict(payload or {})
    password = payload.get("password")
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=False)
    enforce_choice(patch, "role", USER_ROLES)
    enforce_choice(patch, "status", USER_STATUSES)
    _check_role_scope(patch.get("role"), patch.get("client_id"))

    if db.session.query(User).filter(db.func.lower(User.email) == patch["email"].lower()).first():
        raise ConflictError(f"Email already registered: {patch['email']}")

    user = User(**patch)
    if password:
        user.password_hash = hash_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def update_user(user_id: str, payload: dict) -> User:
    user = get_user(user_id)
    payload = dict(payload or {})
    password = payload.get("password")
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=True)
    enforce_choice(patch, "role", USER_ROLES)
    enforce_choice(patch, "status", USER_STATUSES)
    _check_role_scope(patch.get("role", user.role), patch.get("client_id", user.client_id))

    if "email" in patch and patch["email"].lower() != user.email.lower():
        if db.session.query(User).filter(db.func.lower(User.email) == patch["email"].lower()).first():
            raise ConflictError(f"Email already registered: {patch['email']}")

    for key, value in patch.items():
        setattr(user, key, value)
    if password:
        user.password_hash = hash_password(password)
    db.session.commit()
    return user


def delete_user(user_id: str) -> None:
    user = get_user(user_id)
    db.session.delete(user)
    db.session.commit()
