# Overview: Flask API routes for invoices and payments.

"""
Billing Routes

Invoice and payment writes also adjust the owning client's cached totals
(and, for payments, the invoice's paid/due/status) in the same commit.
The response carries the updated invoice/client so callers can patch
their local copies without a refetch.
"""

from flask import Blueprint, request, jsonify

from ..decorators import handles_errors
from ..services import invoice_service, payment_service, client_service


billing_bp = Blueprint("billing", __name__, url_prefix="/api")


# =============================================================================
# INVOICES
# =============================================================================

@billing_bp.get("/invoices")
@handles_errors("load invoices")
def list_invoices_route():
    client_id = request.args.get("client_id", type=int)
    return jsonify([i.to_dict() for i in invoice_service.list_invoices(client_id)])


@billing_bp.post("/invoices")
@handles_errors("create invoice")
def create_invoice_route():
    invoice = invoice_service.create_invoice(request.get_json(silent=True))
    body = invoice.to_dict()
    body["client"] = client_service.get_client(invoice.client_id).to_dict()
    return jsonify(body), 201


@billing_bp.get("/invoices/<invoice_id>")
@handles_errors("load invoice")
def get_invoice_route(invoice_id: str):
    return jsonify(invoice_service.get_invoice(invoice_id).to_dict())


@billing_bp.put("/invoices/<invoice_id>")
@handles_errors("update invoice")
def update_invoice_route(invoice_id: str):
    invoice = invoice_service.update_invoice(invoice_id, request.get_json(silent=True))
    return jsonify(invoice.to_dict())


@billing_bp.delete("/invoices/<invoice_id>")
@handles_errors("delete invoice")
def delete_invoice_route(invoice_id: str):
    invoice_service.delete_invoice(invoice_id)
    return jsonify({"success": True})


# =============================================================================
# PAYMENTS
# =============================================================================

@billing_bp.get("/payments")
@handles_errors("load payments")
def list_payments_route():
    client_id = request.args.get("client_id", type=int)
    return jsonify([p.to_dict() for p in payment_service.list_payments(client_id)])


@billing_bp.post("/payments")
@handles_errors("record payment")
def create_payment_route():
    """
    Record a payment.

    Request body:
    {
        "client_id": 1,                        // required
        "invoice_id": "INV-...",               // required, must belong to client
        "amount": 400,                         // required, > 0
        "payment_source": "Online Transfer",   // optional
        "status": "Paid",                      // optional
        "receipt_file_url": "https://..."      // optional
    }

    Returns:
        Payment object plus the updated "invoice" and "client"
    """
    payment = payment_service.record_payment(request.get_json(silent=True))
    body = payment.to_dict()
    body["invoice"] = invoice_service.get_invoice(payment.invoice_id).to_dict()
    body["client"] = client_service.get_client(payment.client_id).to_dict()
    return jsonify(body), 201


@billing_bp.put("/payments/<payment_id>")
@handles_errors("update payment")
def update_payment_route(payment_id: str):
    payment = payment_service.update_payment(payment_id, request.get_json(silent=True))
    return jsonify(payment.to_dict())


@billing_bp.delete("/payments/<payment_id>")
@handles_errors("delete payment")
def delete_payment_route(payment_id: str):
    payment_service.delete_payment(payment_id)
    return jsonify({"success": True})
