"""
Billing tests: invoices and payments keep client and invoice aggregates in step.

Verifies:
- Creating an invoice raises client sales and balance
- A partial payment moves the invoice to Partial and the client's balance down
- Updating and deleting payments/invoices reverse their effect
- Payments are rejected for invoices of another client
"""

from conftest import create_invoice


# =============================================================================
# INVOICES
# =============================================================================


class TestInvoices:

    def test_create_invoice_updates_client_totals(self, client, acme):
        body = create_invoice(client, acme.id, amount=1000)

        assert body["id"].startswith("INV")
        assert body["paid"] == 0
        assert body["due"] == 1000
        assert body["status"] == "Pending"
        assert body["client"]["total_sales"] == 1000
        assert body["client"]["balance"] == 1000
        assert body["client"]["invoice_count"] == 1

    def test_create_invoice_requires_known_client(self, client, db_session):
        resp = client.post("/api/invoices", json={"client_id": 999, "package_name": "Starter", "amount": 10})
        assert resp.status_code == 404
        assert resp.json["error"] == "Client not found"

    def test_create_invoice_rejects_missing_fields(self, client, acme):
        resp = client.post("/api/invoices", json={"client_id": acme.id})
        assert resp.status_code == 400
        assert "Missing required fields" in resp.json["error"]

    def test_list_invoices_filters_by_client(self, client, acme):
        create_invoice(client, acme.id)
        other = client.post("/api/clients", json={
            "name": "Bob", "business_name": "Bob Co", "email": "bob@bob.test",
        }).json
        create_invoice(client, other["id"], amount=50)

        resp = client.get(f"/api/invoices?client_id={acme.id}")
        assert resp.status_code == 200
        assert [i["client_id"] for i in resp.json] == [acme.id]

    def test_amount_change_adjusts_client(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=1000)

        resp = client.put(f"/api/invoices/{invoice['id']}", json={"amount": 1500})
        assert resp.status_code == 200
        assert resp.json["due"] == 1500

        acme_now = client.get(f"/api/clients/{acme.id}").json
        assert acme_now["total_sales"] == 1500
        assert acme_now["balance"] == 1500

    def test_delete_invoice_reverses_totals_and_payments(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=1000)
        client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 400})

        resp = client.delete(f"/api/invoices/{invoice['id']}")
        assert resp.status_code == 200

        acme_now = client.get(f"/api/clients/{acme.id}").json
        assert acme_now["total_sales"] == 0
        assert acme_now["balance"] == 0
        assert acme_now["invoice_count"] == 0
        assert client.get("/api/payments").json == []


# =============================================================================
# PAYMENTS
# =============================================================================


class TestPayments:

    def test_partial_payment(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=1000)

        resp = client.post("/api/payments", json={
            "client_id": acme.id,
            "invoice_id": invoice["id"],
            "amount": 400,
        })
        assert resp.status_code == 201
        assert resp.json["id"].startswith("PAY")
        assert resp.json["invoice"]["paid"] == 400
        assert resp.json["invoice"]["due"] == 600
        assert resp.json["invoice"]["status"] == "Partial"
        assert resp.json["client"]["total_collection"] == 400
        assert resp.json["client"]["balance"] == 600

    def test_full_payment_marks_invoice_paid(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=1000)
        client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 400})
        resp = client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 600})

        assert resp.json["invoice"]["status"] == "Paid"
        assert resp.json["invoice"]["due"] == 0
        assert resp.json["client"]["balance"] == 0

    def test_overpayment_clamps_balance_at_zero(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=100)
        resp = client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 150})

        assert resp.status_code == 201
        assert resp.json["invoice"]["due"] == 0
        assert resp.json["client"]["balance"] == 0
        assert resp.json["client"]["total_collection"] == 150

    def test_non_positive_amount_rejected(self, client, acme):
        invoice = create_invoice(client, acme.id)
        resp = client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 0})
        assert resp.status_code == 400

    def test_invoice_of_other_client_rejected(self, client, acme):
        other = client.post("/api/clients", json={
            "name": "Bob", "business_name": "Bob Co", "email": "bob@bob.test",
        }).json
        invoice = create_invoice(client, other["id"])

        resp = client.post("/api/payments", json={"client_id": acme.id, "invoice_id": invoice["id"], "amount": 10})
        assert resp.status_code == 400
        assert resp.json["error"] == "Invoice does not belong to this client"

    def test_update_and_delete_payment(self, client, acme):
        invoice = create_invoice(client, acme.id, amount=1000)
        payment = client.post("/api/payments", json={
            "client_id": acme.id, "invoice_id": invoice["id"], "amount": 400,
        }).json

        resp = client.put(f"/api/payments/{payment['id']}", json={"amount": 500})
        assert resp.status_code == 200
        inv = client.get(f"/api/invoices/{invoice['id']}").json
        assert inv["paid"] == 500
        assert inv["due"] == 500

        resp = client.delete(f"/api/payments/{payment['id']}")
        assert resp.status_code == 200
        inv = client.get(f"/api/invoices/{invoice['id']}").json
        assert inv["paid"] == 0
        assert inv["status"] == "Pending"
        acme_now = client.get(f"/api/clients/{acme.id}").json
        assert acme_now["total_collection"] == 0
        assert acme_now["balance"] == 1000
