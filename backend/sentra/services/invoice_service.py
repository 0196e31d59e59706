# Overview: Service-layer operations for invoices; keeps client aggregates in step with each invoice event.

"""
Invoice Service

Every invoice event adjusts the owning client's cached totals inside the
same transaction:
- create: total_sales += amount, balance += amount, invoice_count += 1
- amount change: total_sales and balance move by the delta
- delete: payments against the invoice are removed, total_sales -= amount,
  balance -= due, invoice_count -= 1
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..models import Client, Invoice, Payment
from ..models.billing import INVOICE_STATUSES
from .. import accounting
from ..validation import (
    ModelValidationPolicy, NotFoundError, ValidationError,
    validate_payload, enforce_choice, enforce_positive, enforce_non_negative,
)
from .client_service import totals_of, apply_totals
from .concurrency import lock_for_update, run_with_retry

logger = logging.getLogger(__name__)


INVOICE_POLICY = ModelValidationPolicy(
    writable_fields={"id", "client_id", "package_name", "amount", "paid", "due", "status"},
    required_on_create={"client_id", "package_name", "amount"},
    ignored_fields={"created_at", "updated_at"},
)


def list_invoices(client_id: int | None = None) -> list[Invoice]:
    query = db.session.query(Invoice)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    return query.order_by(Invoice.created_at.desc()).all()


def get_invoice(invoice_id: str) -> Invoice:
    invoice = db.session.get(Invoice, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def _locked_client(client_id: int) -> Client:
    client = lock_for_update(db.session.query(Client).filter_by(id=client_id)).first()
    if not client:
        raise NotFoundError("Client not found")
    return client


def create_invoice(payload: dict) -> Invoice:
    """Insert an invoice and add its amount to the client's totals in one commit."""
    patch = validate_payload(model=Invoice, payload=payload, policy=INVOICE_POLICY, partial=False)
    enforce_positive(patch, "amount")
    enforce_non_negative(patch, "paid")
    enforce_choice(patch, "status", INVOICE_STATUSES)
    if patch.get("id") and db.session.get(Invoice, patch["id"]):
        raise ValidationError(f"Invoice already exists: {patch['id']}")
    if not patch.get("id"):
        patch.pop("id", None)

    def _work():
        client = _locked_client(patch["client_id"])

        paid = patch.get("paid") or 0
        totals = accounting.invoice_after_amount_change(patch["amount"], paid)
        invoice = Invoice(**patch)
        invoice.paid = totals.paid
        invoice.due = totals.due
        if not patch.get("status"):
            invoice.status = totals.status
        db.session.add(invoice)

        apply_totals(client, accounting.client_after_invoice(totals_of(client), patch["amount"]))
        db.session.commit()
        return invoice

    invoice = run_with_retry(_work)
    logger.info("Invoice %s created for client %s (%.2f)", invoice.id, invoice.client_id, invoice.amount)
    return invoice


def update_invoice(invoice_id: str, payload: dict) -> Invoice:
    patch = validate_payload(model=Invoice, payload=payload, policy=INVOICE_POLICY, partial=True)
    patch.pop("id", None)
    patch.pop("client_id", None)
    enforce_positive(patch, "amount")
    enforce_non_negative(patch, "paid", "due")
    enforce_choice(patch, "status", INVOICE_STATUSES)

    def _work():
        invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
        if not invoice:
            raise NotFoundError("Invoice not found")

        old_amount = invoice.amount or 0
        for key, value in patch.items():
            setattr(invoice, key, value)

        if "amount" in patch or "paid" in patch:
            totals = accounting.invoice_after_amount_change(invoice.amount, invoice.paid)
            invoice.paid = totals.paid
            invoice.due = totals.due
            if "status" not in patch:
                invoice.status = totals.status

        delta = round((invoice.amount or 0) - old_amount, 2)
        if delta:
            client = _locked_client(invoice.client_id)
            apply_totals(client, accounting.client_after_invoice_amount_change(totals_of(client), delta))

        db.session.commit()
        return invoice

    return run_with_retry(_work)


def delete_invoice(invoice_id: str) -> None:
    """Delete an invoice with its payments and reverse its share of the client totals."""
    def _work():
        invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
        if not invoice:
            raise NotFoundError("Invoice not found")

        client = _locked_client(invoice.client_id)
        apply_totals(
            client,
            accounting.client_after_invoice_removed(totals_of(client), invoice.amount, invoice.due),
        )
        db.session.query(Payment).filter_by(invoice_id=invoice.id).delete(synchronize_session=False)
        db.session.delete(invoice)
        db.session.commit()

    run_with_retry(_work)
