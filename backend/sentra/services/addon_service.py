# Overview: Service-layer operations for the add-on service catalogue and client service requests.

"""
Add-On Service Catalogue

Clients browse Available services from the portal and request them; the
team approves, rejects or completes each request. Every status change
stamps the matching *_date column once.
"""

from __future__ import annotations

from ..extensions import db
from ..models import AddOnService, ServiceRequest
from ..models.catalog import SERVICE_CATEGORIES, SERVICE_STATUSES, REQUEST_STATUSES
from ..validation import (
    ModelValidationPolicy, NotFoundError, ValidationError,
    validate_payload, enforce_choice, enforce_non_negative,
)
from sentra.time_utils import utcnow
from .client_service import get_client


SERVICE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "category", "price", "status", "features"},
    required_on_create={"name", "description", "category", "price"},
    ignored_fields={"id", "created_at", "updated_at"},
)

REQUEST_POLICY = ModelValidationPolicy(
    writable_fields={"client_id", "service_id", "status", "admin_notes", "rejection_reason"},
    required_on_create={"client_id", "service_id"},
    ignored_fields={
        "id", "service_name", "request_date", "approved_date", "rejected_date",
        "completed_date", "created_at", "updated_at",
    },
)

# Status -> date column stamped on entry
_STATUS_DATES = {
    "Approved": "approved_date",
    "Rejected": "rejected_date",
    "Completed": "completed_date",
}

SAMPLE_SERVICES = [
    {
        "name": "Premium Support",
        "description": "24/7 priority support with dedicated account manager",
        "category": "Support",
        "price": 299.00,
        "status": "Available",
        "features": ["24/7 Support", "Dedicated Account Manager", "Priority Response", "Phone Support", "Email Support"],
    },
    {
        "name": "Advanced Analytics",
        "description": "Detailed reporting and analytics dashboard",
        "category": "Analytics",
        "price": 199.00,
        "status": "Available",
        "features": ["Custom Reports", "Real-time Analytics", "Data Export", "Performance Metrics", "User Behavior Tracking"],
    },
    {
        "name": "Custom Domain",
        "description": "Use your own domain name with SSL certificate",
        "category": "Domain",
        "price": 99.00,
        "status": "Available",
        "features": ["Custom Domain", "SSL Certificate", "DNS Management", "Domain Transfer", "Email Setup"],
    },
    {
        "name": "API Integration",
        "description": "Connect with third-party services via API",
        "category": "Integration",
        "price": 399.00,
        "status": "Available",
        "features": ["API Access", "Webhook Support", "Third-party Integration", "Custom Endpoints", "Documentation"],
    },
    {
        "name": "Mobile App",
        "description": "Native mobile application for iOS and Android",
        "category": "Mobile",
        "price": 999.00,
        "status": "Unavailable",
        "features": ["iOS App", "Android App", "Push Notifications", "Offline Support", "App Store Publishing"],
    },
    {
        "name": "Advanced Security",
        "description": "Enhanced security features and monitoring",
        "category": "Security",
        "price": 149.00,
        "status": "Available",
        "features": ["Two-Factor Authentication", "Security Monitoring", "Backup Encryption", "Access Control", "Audit Logs"],
    },
]


# =============================================================================
# CATALOGUE
# =============================================================================

def list_services(available_only: bool = False) -> list[AddOnService]:
    query = db.session.query(AddOnService)
    if available_only:
        query = query.filter_by(status="Available")
    return query.order_by(AddOnService.category, AddOnService.name).all()


def create_service(payload: dict) -> AddOnService:
    patch = validate_payload(model=AddOnService, payload=payload, policy=SERVICE_POLICY, partial=False)
    enforce_choice(patch, "category", SERVICE_CATEGORIES)
    enforce_choice(patch, "status", SERVICE_STATUSES)
    enforce_non_negative(patch, "price")
    service = AddOnService(**patch)
    db.session.add(service)
    db.session.commit()
    return service


def seed_sample_services() -> int:
    """Insert the sample catalogue entries that are not present yet (matched by name)."""
    existing = {name for (name,) in db.session.query(AddOnService.name).all()}
    added = 0
    for data in SAMPLE_SERVICES:
        if data["name"] in existing:
            continue
        db.session.add(AddOnService(**data))
        added += 1
    db.session.commit()
    return added


# =============================================================================
# REQUESTS
# =============================================================================

def list_requests(client_id: int | None = None, status: str | None = None) -> list[ServiceRequest]:
    query = db.session.query(ServiceRequest)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(ServiceRequest.request_date.desc(), ServiceRequest.id.desc()).all()


def create_request(payload: dict) -> ServiceRequest:
    patch = validate_payload(model=ServiceRequest, payload=payload, policy=REQUEST_POLICY, partial=False)
    patch.pop("status", None)
    get_client(patch["client_id"])

    service = db.session.get(AddOnService, patch["service_id"])
    if not service:
        raise NotFoundError("Add-on service not found")
    if service.status != "Available":
        raise ValidationError(f"{service.name} is not available")

    request = ServiceRequest(status="Pending", request_date=utcnow(), **patch)
    db.session.add(request)
    db.session.commit()
    return request


def update_request(request_id: int, payload: dict) -> ServiceRequest:
    request = db.session.get(ServiceRequest, request_id)
    if not request:
        raise NotFoundError("Service request not found")
    patch = validate_payload(model=ServiceRequest, payload=payload, policy=REQUEST_POLICY, partial=True)
    patch.pop("client_id", None)
    patch.pop("service_id", None)
    enforce_choice(patch, "status", REQUEST_STATUSES)

    if patch.get("status") == "Rejected" and not (patch.get("rejection_reason") or request.rejection_reason):
        raise ValidationError("rejection_reason is required when rejecting a request")

    new_status = patch.get("status")
    if new_status and new_status != request.status:
        date_field = _STATUS_DATES.get(new_status)
        if date_field and getattr(request, date_field) is None:
            setattr(request, date_field, utcnow())

    for key, value in patch.items():
        setattr(request, key, value)
    db.session.commit()
    return request
