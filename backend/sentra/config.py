# backend/sentra/config.py
from __future__ import annotations
import os


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/sentra.sqlite3; Postgres via DATABASE_URL
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///sentra.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Front-end origins allowed to call the API
    CORS_ORIGINS = _csv(os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    ))

    # Demo accounts checked before the users table
    DEMO_ADMIN_EMAIL = os.environ.get("DEMO_ADMIN_EMAIL", "superadmin@sentra.com")
    DEMO_ADMIN_PASSWORD = os.environ.get("DEMO_ADMIN_PASSWORD", "password123")
    DEMO_ADMIN_NAME = os.environ.get("DEMO_ADMIN_NAME", "Super Admin")
    DEMO_CLIENT_EMAIL = os.environ.get("DEMO_CLIENT_EMAIL", "client@demo.com")
    DEMO_CLIENT_PASSWORD = os.environ.get("DEMO_CLIENT_PASSWORD", "client123")
    DEMO_CLIENT_NAME = os.environ.get("DEMO_CLIENT_NAME", "Demo Client")
    DEMO_ACCOUNTS_ENABLED = os.environ.get("DEMO_ACCOUNTS_ENABLED", "true").lower() == "true"

    # S3-compatible object storage (DigitalOcean Spaces)
    SPACES_ENDPOINT = os.environ.get("DO_SPACES_ENDPOINT")
    SPACES_REGION = os.environ.get("DO_SPACES_REGION")
    SPACES_KEY = os.environ.get("DO_SPACES_KEY")
    SPACES_SECRET = os.environ.get("DO_SPACES_SECRET")
    SPACES_BUCKET = os.environ.get("DO_SPACES_BUCKET")
    SPACES_PUBLIC_BASE_URL = os.environ.get("DO_SPACES_PUBLIC_BASE_URL")
    UPLOAD_URL_EXPIRES_SECONDS = int(os.environ.get("UPLOAD_URL_EXPIRES_SECONDS", "3600"))

    # Maintenance scripts exposed through /api/run-script
    SCRIPT_TIMEOUT_SECONDS = int(os.environ.get("SCRIPT_TIMEOUT_SECONDS", "60"))

    # GoHighLevel webhook secrets (signature check is skipped when unset)
    GHL_ONBOARDING_WEBHOOK_SECRET = os.environ.get("GHL_ONBOARDING_WEBHOOK_SECRET")
    GHL_HANDOVER_WEBHOOK_SECRET = os.environ.get("GHL_HANDOVER_WEBHOOK_SECRET")
