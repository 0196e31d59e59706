# Overview: Service-layer operations for payments; encapsulates business logic and database work.

"""
Payment Service

Recording a payment touches three rows: the payment itself, the invoice
(paid / due / status) and the client (total_collection / balance). All
three are written in one transaction so a failure leaves none of them
changed. Updating or deleting a payment reverses the old amount first.
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..models import Client, Invoice, Payment
from ..models.billing import PAYMENT_STATUSES
from .. import accounting
from ..validation import (
    ModelValidationPolicy, NotFoundError, ValidationError,
    validate_payload, enforce_choice, enforce_positive,
)
from .client_service import totals_of, apply_totals
from .concurrency import lock_for_update, run_with_retry

logger = logging.getLogger(__name__)


class PaymentError(ValidationError):
    """Raised when a payment does not match its invoice/client."""


PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "client_id", "invoice_id", "amount", "payment_source", "status",
        "paid_at", "receipt_file_url",
    },
    required_on_create={"client_id", "invoice_id", "amount"},
    ignored_fields={"created_at", "updated_at"},
)


def list_payments(client_id: int | None = None) -> list[Payment]:
    query = db.session.query(Payment)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    return query.order_by(Payment.paid_at.desc(), Payment.created_at.desc()).all()


def _locked_rows(client_id: int, invoice_id: str) -> tuple[Client, Invoice]:
    client = lock_for_update(db.session.query(Client).filter_by(id=client_id)).first()
    if not client:
        raise NotFoundError("Client not found")
    invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
    if not invoice:
        raise NotFoundError("Invoice not found")
    if invoice.client_id != client.id:
        raise PaymentError("Invoice does not belong to this client")
    return client, invoice


def _apply_amount(client: Client, invoice: Invoice, amount: float) -> None:
    """Apply a payment amount (negative to reverse) to invoice and client."""
    inv = accounting.invoice_after_payment(invoice.amount, invoice.paid, amount)
    invoice.paid = inv.paid
    invoice.due = inv.due
    invoice.status = inv.status
    apply_totals(client, accounting.client_after_payment(totals_of(client), amount))


def record_payment(payload: dict) -> Payment:
    """
    Record a payment against an invoice.

    Example: invoice amount 1000 (paid 0) + payment 400
    -> invoice paid 400, due 600, Partial; client collection +400, balance -400.
    """
    patch = validate_payload(model=Payment, payload=payload, policy=PAYMENT_POLICY, partial=False)
    enforce_positive(patch, "amount")
    enforce_choice(patch, "status", PAYMENT_STATUSES)
    if not patch.get("id"):
        patch.pop("id", None)

    def _work():
        client, invoice = _locked_rows(patch["client_id"], patch["invoice_id"])
        payment = Payment(**patch)
        db.session.add(payment)
        _apply_amount(client, invoice, patch["amount"])
        db.session.commit()
        return payment

    payment = run_with_retry(_work)
    logger.info("Payment %s recorded on invoice %s (%.2f)", payment.id, payment.invoice_id, payment.amount)
    return payment


def update_payment(payment_id: str, payload: dict) -> Payment:
    patch = validate_payload(model=Payment, payload=payload, policy=PAYMENT_POLICY, partial=True)
    patch.pop("id", None)
    patch.pop("client_id", None)
    patch.pop("invoice_id", None)
    enforce_positive(patch, "amount")
    enforce_choice(patch, "status", PAYMENT_STATUSES)

    def _work():
        payment = lock_for_update(db.session.query(Payment).filter_by(id=payment_id)).first()
        if not payment:
            raise NotFoundError("Payment not found")

        delta = round(patch.get("amount", payment.amount) - payment.amount, 2)
        for key, value in patch.items():
            setattr(payment, key, value)
        if delta:
            client, invoice = _locked_rows(payment.client_id, payment.invoice_id)
            _apply_amount(client, invoice, delta)
        db.session.commit()
        return payment

    return run_with_retry(_work)


def delete_payment(payment_id: str) -> None:
    def _work():
        payment = lock_for_update(db.session.query(Payment).filter_by(id=payment_id)).first()
        if not payment:
            raise NotFoundError("Payment not found")
        client, invoice = _locked_rows(payment.client_id, payment.invoice_id)
        _apply_amount(client, invoice, -payment.amount)
        db.session.delete(payment)
        db.session.commit()

    run_with_retry(_work)
