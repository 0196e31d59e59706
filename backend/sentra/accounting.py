# Overview: Pure arithmetic for invoice/payment aggregates, shared by the API services and the sync store.

"""
Invoice and client aggregate rules.

Clients carry cached totals (total_sales, total_collection, balance) and
invoices carry paid/due. Both are adjusted additively at each invoice or
payment event instead of being recomputed from the ledger rows, so the
same rules have to run wherever an event is applied: inside the API
transaction and again in the client-side store's optimistic patch.

Nothing here touches the database or Flask.
"""

from __future__ import annotations

from dataclasses import dataclass


INVOICE_PENDING = "Pending"
INVOICE_PARTIAL = "Partial"
INVOICE_PAID = "Paid"


def _money(value) -> float:
    return round(float(value or 0), 2)


def invoice_status(amount, paid) -> str:
    """Paid once nothing is due, Partial once anything was paid, else Pending."""
    due = max(0.0, _money(amount) - _money(paid))
    if due == 0:
        return INVOICE_PAID
    if _money(paid) > 0:
        return INVOICE_PARTIAL
    return INVOICE_PENDING


@dataclass(frozen=True)
class InvoiceTotals:
    paid: float
    due: float
    status: str


@dataclass(frozen=True)
class ClientTotals:
    total_sales: float
    total_collection: float
    balance: float
    invoice_count: int


def invoice_after_payment(amount, paid, payment_amount) -> InvoiceTotals:
    """Invoice paid/due/status after a payment of payment_amount (negative to reverse one)."""
    new_paid = max(0.0, _money(paid) + _money(payment_amount))
    new_due = max(0.0, _money(amount) - new_paid)
    return InvoiceTotals(
        paid=round(new_paid, 2),
        due=round(new_due, 2),
        status=invoice_status(amount, new_paid),
    )


def invoice_after_amount_change(amount, paid) -> InvoiceTotals:
    new_due = max(0.0, _money(amount) - _money(paid))
    return InvoiceTotals(paid=_money(paid), due=round(new_due, 2), status=invoice_status(amount, paid))


def client_after_invoice(totals: ClientTotals, invoice_amount) -> ClientTotals:
    amount = _money(invoice_amount)
    return ClientTotals(
        total_sales=round(_money(totals.total_sales) + amount, 2),
        total_collection=_money(totals.total_collection),
        balance=round(_money(totals.balance) + amount, 2),
        invoice_count=(totals.invoice_count or 0) + 1,
    )


def client_after_invoice_removed(totals: ClientTotals, invoice_amount, invoice_due) -> ClientTotals:
    return ClientTotals(
        total_sales=round(max(0.0, _money(totals.total_sales) - _money(invoice_amount)), 2),
        total_collection=_money(totals.total_collection),
        balance=round(max(0.0, _money(totals.balance) - _money(invoice_due)), 2),
        invoice_count=max(0, (totals.invoice_count or 0) - 1),
    )


def client_after_invoice_amount_change(totals: ClientTotals, delta) -> ClientTotals:
    return ClientTotals(
        total_sales=round(max(0.0, _money(totals.total_sales) + _money(delta)), 2),
        total_collection=_money(totals.total_collection),
        balance=round(max(0.0, _money(totals.balance) + _money(delta)), 2),
        invoice_count=totals.invoice_count or 0,
    )


def client_after_payment(totals: ClientTotals, payment_amount) -> ClientTotals:
    """Client totals after a payment (negative payment_amount reverses one)."""
    amount = _money(payment_amount)
    return ClientTotals(
        total_sales=_money(totals.total_sales),
        total_collection=round(max(0.0, _money(totals.total_collection) + amount), 2),
        balance=round(max(0.0, _money(totals.balance) - amount), 2),
        invoice_count=totals.invoice_count or 0,
    )
