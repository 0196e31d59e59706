# Overview: Aggregate figures for the admin dashboard.

from __future__ import annotations

from ..extensions import db
from ..models import Client, Invoice, Payment, ServiceRequest
from .chat_service import chat_stats


def dashboard_stats() -> dict:
    """Totals read from the clients' cached aggregates plus simple counts."""
    total_sales, total_collection, total_balance = db.session.query(
        db.func.coalesce(db.func.sum(Client.total_sales), 0),
        db.func.coalesce(db.func.sum(Client.total_collection), 0),
        db.func.coalesce(db.func.sum(Client.balance), 0),
    ).one()

    status_counts = dict(
        db.session.query(Client.status, db.func.count(Client.id)).group_by(Client.status).all()
    )

    return {
        "total_clients": db.session.query(Client).count(),
        "clients_by_status": {
            "Complete": status_counts.get("Complete", 0),
            "Pending": status_counts.get("Pending", 0),
            "Inactive": status_counts.get("Inactive", 0),
        },
        "total_sales": round(float(total_sales), 2),
        "total_collection": round(float(total_collection), 2),
        "total_balance": round(float(total_balance), 2),
        "total_invoices": db.session.query(Invoice).count(),
        "unpaid_invoices": db.session.query(Invoice).filter(Invoice.status != "Paid").count(),
        "total_payments": db.session.query(Payment).count(),
        "pending_service_requests": db.session.query(ServiceRequest).filter_by(status="Pending").count(),
        "chats": chat_stats(),
    }
